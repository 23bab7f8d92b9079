"""Error taxonomy for the scoring engine with user-friendly messages."""
from __future__ import annotations

import sys
import structlog
from typing import Any, Optional

logger = structlog.get_logger(__name__)

GENERIC_USER_MESSAGE = "Scoring is currently unavailable."


class ScoringError(Exception):
    """Base class for scoring errors.

    ``context`` carries the identifiers of the originating record
    (project_id, aim_id, claim_id, ...) for traceability.
    """

    user_visible = False

    def __init__(
        self,
        error_type: str,
        message: str,
        details: str = "",
        context: Optional[dict[str, Any]] = None,
    ):
        self.error_type = error_type
        self.message = message
        self.details = details
        self.context = dict(context or {})
        super().__init__(self.message)

    def __str__(self) -> str:
        if not self.context:
            return self.message
        ids = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} ({ids})"

    def get_user_message(self) -> str:
        """Return the message the presentation layer may show."""
        if not self.user_visible:
            return GENERIC_USER_MESSAGE
        msg = self.message
        if self.details:
            msg += f" Details: {self.details}"
        return msg


class InputError(ScoringError):
    """Missing required identifiers or text; raised before any computation."""

    user_visible = True

    def __init__(self, message: str, **context: Any):
        super().__init__(error_type="INPUT_INVALID", message=message, context=context)


class NotFoundError(ScoringError):
    """A referenced aim or project is absent from the store."""

    def __init__(self, entity: str, **context: Any):
        super().__init__(
            error_type="NOT_FOUND",
            message=f"{entity} not found",
            context=context,
        )


class StoreError(ScoringError):
    """Read/write failure against the collaborator store. Never retried here."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None, **context: Any):
        super().__init__(
            error_type="STORE_FAILURE",
            message=f"Store operation failed: {operation}",
            details=str(cause)[:200] if cause else "",
            context=context,
        )


class ComputationError(ScoringError):
    """Unexpected failure inside deterministic scoring; indicates a malformed record."""

    def __init__(self, stage: str, cause: Optional[BaseException] = None, **context: Any):
        super().__init__(
            error_type="COMPUTATION_DEFECT",
            message=f"Scoring computation failed in {stage}",
            details=f"{type(cause).__name__}: {cause}"[:200] if cause else "",
            context=context,
        )


def exit_with_error(error: ScoringError, context: str = "") -> int:
    """Log error and exit gracefully with user-friendly message."""
    logger.error(
        "scoring_failed",
        error_type=error.error_type,
        message=error.message,
        details=error.details,
        ids=error.context,
        context=context,
    )

    print(f"\nError: {error.get_user_message()}", file=sys.stderr)
    print("", file=sys.stderr)
    return 1
