"""
Custom exception classes for the GrowUp CX mentee dashboard.

Every error carries a technical message for the logs and a short message that can
be shown to the mentee or mentor as-is. Validation problems are recovered locally;
persistence problems are surfaced while the in-memory drafts are kept.
"""

from __future__ import annotations

from typing import Any


class GrowUpError(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.user_message = user_message or self._get_default_user_message()

    def _get_default_user_message(self) -> str:
        return "An unexpected error occurred. Please try again."

    def __str__(self) -> str:
        return f"{self.__class__.__name__}: {self.message}"


class ValidationError(GrowUpError):
    """Raised when user input is incomplete or invalid."""

    def __init__(
        self, field: str, message: str, value: Any = None, details: dict[str, Any] | None = None
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=f"Validation failed for field '{field}': {message}",
            details=details or {"field": field, "value": value},
            user_message=f"Invalid {field.replace('_', ' ')}: {message}",
        )

    def _get_default_user_message(self) -> str:
        return f"Please check your input for {self.field.replace('_', ' ')} and try again."


class MultipleValidationError(GrowUpError):
    """Raised when several fields fail validation at once."""

    def __init__(self, errors: list[ValidationError], user_message: str | None = None):
        self.validation_errors = errors
        messages = [f"{e.field}: {e.message}" for e in errors]
        super().__init__(
            message=f"Multiple validation errors: {'; '.join(messages)}",
            details={
                "errors": [
                    {"field": e.field, "message": e.message, "value": e.value} for e in errors
                ]
            },
            user_message=user_message or "Please correct the following errors and try again.",
        )

    @property
    def fields(self) -> list[str]:
        return [e.field for e in self.validation_errors]


class PersistenceError(GrowUpError):
    """Raised when a call to the persistence backend fails."""

    def __init__(self, message: str, operation: str, details: dict[str, Any] | None = None):
        self.operation = operation
        super().__init__(
            message=f"Persistence error during {operation}: {message}",
            details=details or {"operation": operation},
            user_message="Unable to save your changes. Nothing was lost, please try again.",
        )


class PersistenceConnectionError(PersistenceError):
    """Raised when the backend cannot be reached."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message=message, operation="connection", details=details)
        self.user_message = "Unable to reach the database. Please check your connection."


class IntegrityError(PersistenceError):
    """Raised when a backend integrity constraint is violated."""

    def __init__(
        self,
        message: str,
        constraint: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.constraint = constraint
        super().__init__(
            message=message,
            operation="integrity_check",
            details=details or {"constraint": constraint},
        )
        self.user_message = self._constraint_message()

    def _constraint_message(self) -> str:
        if self.constraint == "unique":
            return "This item already exists."
        if self.constraint == "foreign_key":
            return "Referenced item no longer exists. Please refresh and try again."
        return "Data integrity error. Please check your input and try again."


class MenteeNotFoundError(GrowUpError):
    """Raised when a mentee id does not resolve."""

    def __init__(self, mentee_id: int):
        self.mentee_id = mentee_id
        super().__init__(
            message=f"Mentee with ID {mentee_id} not found",
            details={"mentee_id": mentee_id},
            user_message="The selected mentee could not be found. Run a new diagnosis.",
        )


class PillarNotFoundError(GrowUpError):
    """Raised when a pillar name does not exist for a mentee."""

    def __init__(self, mentee_id: int, pillar_name: str):
        self.mentee_id = mentee_id
        self.pillar_name = pillar_name
        super().__init__(
            message=f"Pillar '{pillar_name}' not found for mentee {mentee_id}",
            details={"mentee_id": mentee_id, "pillar_name": pillar_name},
            user_message=f"The pillar '{pillar_name}' could not be found.",
        )


class TaskNotFoundError(GrowUpError):
    """Raised when a task id does not exist."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(
            message=f"Task with ID {task_id} not found",
            details={"task_id": task_id},
            user_message="The selected task could not be found. Please refresh and try again.",
        )


class WizardNotFoundError(GrowUpError):
    """Raised when a diagnosis wizard id is unknown or has expired."""

    def __init__(self, wizard_id: str):
        self.wizard_id = wizard_id
        super().__init__(
            message=f"Diagnosis wizard {wizard_id} not found",
            details={"wizard_id": wizard_id},
            user_message="This diagnosis session has expired. Please start again.",
        )


class WizardStateError(GrowUpError):
    """Raised when a wizard action is not allowed in its current state."""

    def __init__(self, action: str, state: str):
        self.action = action
        self.state = state
        super().__init__(
            message=f"Action '{action}' is not available in state {state}",
            details={"action": action, "state": state},
            user_message="This step is not available right now.",
        )


class SubmissionInProgressError(GrowUpError):
    """Raised when a mutating submission is already in flight for the same key."""

    def __init__(self, action: str, key: Any):
        self.action = action
        self.key = key
        super().__init__(
            message=f"A '{action}' submission for {key!r} is already in progress",
            details={"action": action, "key": str(key)},
            user_message="Your previous submission is still being saved. Please wait.",
        )


class ConfigurationError(GrowUpError):
    """Raised when configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            details=details or {"config_key": config_key},
            user_message="Configuration error. Please check your settings.",
        )


class ExportError(GrowUpError):
    """Raised when exporting dashboard data fails."""

    def __init__(
        self,
        message: str,
        export_format: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.export_format = export_format
        super().__init__(
            message=message,
            details=details or {"export_format": export_format},
            user_message="Export failed. Please try again or choose a different format.",
        )


def handle_persistence_error(
    e: Exception, operation: str = "persistence operation"
) -> PersistenceError:
    """
    Convert a backend exception into the matching PersistenceError subclass.

    Example:
        >>> try:
        ...     session.commit()
        ... except SQLAlchemyError as e:
        ...     raise handle_persistence_error(e, "create sprint") from e
    """
    error_msg = str(e).lower()

    if "connection" in error_msg or "timeout" in error_msg or "unable to open" in error_msg:
        return PersistenceConnectionError(str(e))
    if "unique constraint" in error_msg or "duplicate" in error_msg:
        return IntegrityError(str(e), constraint="unique")
    if "foreign key" in error_msg or "foreign_key" in error_msg:
        return IntegrityError(str(e), constraint="foreign_key")
    if "check constraint" in error_msg:
        return IntegrityError(str(e), constraint="check")
    return PersistenceError(str(e), operation)


def create_user_friendly_error_message(error: Exception) -> str:
    """
    Create a user-facing message from any exception.

    Example:
        >>> create_user_friendly_error_message(ValidationError("name", "cannot be empty"))
        'Invalid name: cannot be empty'
    """
    if isinstance(error, GrowUpError):
        return error.user_message

    messages = {
        "ValueError": "Invalid input provided. Please check your data and try again.",
        "KeyError": "Required information is missing. Please check your input.",
        "TypeError": "Incorrect data type provided. Please check your input format.",
    }
    return messages.get(
        type(error).__name__, "An unexpected error occurred. Please try again or contact support."
    )


def log_error_details(error: Exception, context: dict[str, Any] | None = None) -> dict[str, Any]:
    """Structured error details suitable for ``logger.error(..., extra=...)``."""
    details: dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "context": context or {},
    }

    if isinstance(error, GrowUpError):
        details.update({"user_message": error.user_message, "error_details": error.details})

    return details
