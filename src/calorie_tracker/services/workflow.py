"""Estimate-then-confirm state machine for logging a meal."""

import logging
import math
import re
from enum import Enum

from calorie_tracker.domain.estimation import (
    CalorieEstimationDraft,
    EstimationRequest,
    ImageEstimationRequest,
    TextEstimationRequest,
)
from calorie_tracker.domain.ledger import DailyLog
from calorie_tracker.domain.results import (
    EstimationError,
    Failure,
    Result,
    Success,
    ValidationError,
    WorkflowBusy,
)
from calorie_tracker.services.energy import round_half_up
from calorie_tracker.services.estimation import EstimationService
from calorie_tracker.services.ledger import LedgerStore

_logger = logging.getLogger(__name__)

MISSING_INPUT_MESSAGE = "Please enter a description or upload an image."
INVALID_DRAFT_MESSAGE = (
    "Description cannot be empty and calories must be greater than zero."
)

_CALORIE_FIELDS = {"total_calories", "totalCalories"}
_LEADING_INTEGER = re.compile(r"\s*[+-]?\d+")

StartError = EstimationError | ValidationError | WorkflowBusy


class WorkflowState(str, Enum):
    """Stages of one logging attempt."""

    IDLE = "IDLE"
    ESTIMATING = "ESTIMATING"
    PENDING_CONFIRMATION = "PENDING_CONFIRMATION"


class ConfirmationWorkflow:
    """Holds the user's input and editable draft for one meal at a time.

    Failures never discard what the user typed or uploaded: a failed
    estimate returns to ``IDLE`` with the input intact and a failed commit
    stays in ``PENDING_CONFIRMATION`` with the draft intact. The workflow is
    reusable; every successful commit returns it to a clean ``IDLE``.
    """

    def __init__(self, estimation_service: EstimationService, ledger: LedgerStore):
        self._estimation_service = estimation_service
        self._ledger = ledger
        self.state = WorkflowState.IDLE
        self.text = ""
        self.image: ImageEstimationRequest | None = None
        self.estimate: CalorieEstimationDraft | None = None
        self.draft: CalorieEstimationDraft | None = None
        self.error: StartError | None = None

    def set_text(self, text: str) -> None:
        """Use a text description as input, replacing any image."""
        self.text = text
        if text:
            self.image = None

    def set_image(self, data: bytes, mime_type: str) -> None:
        """Use a photo as input, replacing any text."""
        self.image = ImageEstimationRequest(data=data, mime_type=mime_type)
        self.text = ""

    def clear_image(self) -> None:
        """Drop the selected photo."""
        self.image = None

    async def start(self) -> Result[CalorieEstimationDraft, StartError]:
        """Request an estimate for the current input."""
        if self.state == WorkflowState.ESTIMATING:
            return Failure(WorkflowBusy())
        if self.state == WorkflowState.PENDING_CONFIRMATION:
            return self._report(
                ValidationError("Confirm or cancel the current estimate first.")
            )
        request = self._current_request()
        if request is None:
            return self._report(ValidationError(MISSING_INPUT_MESSAGE))

        self.state = WorkflowState.ESTIMATING
        self.error = None
        try:
            result = await self._estimation_service.estimate(request)
        finally:
            if self.state == WorkflowState.ESTIMATING:
                self.state = WorkflowState.IDLE

        if isinstance(result, Failure):
            return self._report(result.error)
        self.estimate = result.value
        self.draft = result.value.model_copy(deep=True)
        self.state = WorkflowState.PENDING_CONFIRMATION
        return Success(self.draft)

    def edit_draft(
        self, field: str, value: object
    ) -> Result[CalorieEstimationDraft, ValidationError]:
        """Change the description or total calories of the pending draft."""
        if self.state != WorkflowState.PENDING_CONFIRMATION or self.draft is None:
            return Failure(ValidationError("There is no estimate to edit."))
        if field == "description":
            self.draft = self.draft.model_copy(update={"description": str(value)})
        elif field in _CALORIE_FIELDS:
            self.draft = self.draft.model_copy(
                update={"total_calories": _parse_calories(value)}
            )
        else:
            return Failure(ValidationError(f"Field {field!r} cannot be edited."))
        return Success(self.draft)

    def cancel(self) -> None:
        """Discard the draft and keep the input for another attempt."""
        if self.state != WorkflowState.PENDING_CONFIRMATION:
            return
        self.estimate = None
        self.draft = None
        self.error = None
        self.state = WorkflowState.IDLE

    def commit(self) -> Result[DailyLog, ValidationError]:
        """Save the draft as today's newest meal."""
        if self.state != WorkflowState.PENDING_CONFIRMATION or self.draft is None:
            return self._report(ValidationError("There is no estimate to confirm."))

        description = self.draft.description.strip()
        calories = round_half_up(self.draft.total_calories)
        if not description or calories <= 0:
            return self._report(ValidationError(INVALID_DRAFT_MESSAGE))

        log = self._ledger.append_meal(self._ledger.today_key(), description, calories)
        _logger.info("Meal logged: date=%s calories=%s", log.date, calories)
        self._reset()
        return Success(log)

    def _current_request(self) -> EstimationRequest | None:
        if self.image is not None:
            return self.image
        if self.text.strip():
            return TextEstimationRequest(content=self.text)
        return None

    def _report(self, error: StartError) -> Failure[StartError]:
        self.error = error
        return Failure(error)

    def _reset(self) -> None:
        self.state = WorkflowState.IDLE
        self.text = ""
        self.image = None
        self.estimate = None
        self.draft = None
        self.error = None


def _parse_calories(value: object) -> int:
    """Parse an edited calorie value like a form field: leading digits only.

    Fractions are truncated ("250.5" and 250.5 both give 250) and input
    without leading digits counts as zero.
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return math.trunc(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        match = _LEADING_INTEGER.match(value)
        return int(match.group(0)) if match else 0
    return 0
