"""Process-local key-value store."""

import copy
import threading

from calorie_tracker.services.ledger import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Key-value store kept in a dict; values are copied in and out."""

    def __init__(self, initial: dict[str, object] | None = None) -> None:
        self._values: dict[str, object] = copy.deepcopy(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> object | None:
        with self._lock:
            return copy.deepcopy(self._values.get(key))

    def set(self, key: str, value: object) -> None:
        with self._lock:
            self._values[key] = copy.deepcopy(value)
