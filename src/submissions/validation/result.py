"""Validation result — immutable container for validated data or errors."""

from dataclasses import dataclass
from typing import Any

from submissions.errors import DEFAULT_REASON, SubmissionValidationError


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """The outcome of validating a submission or a plain mapping.

    ``is_valid`` is True when there are no errors.
    The result is falsy when invalid, so you can write::

        result = await validate_submission(submission)
        if not result:
            raise result.error()

    ``data`` is the validated submission (or the cleaned string values
    when validating a plain mapping).

    ``errors`` maps field keys to lists of error messages, in field
    declaration order, and only contains keys that failed::

        {"title": ["data is not larger than 5"],
         "email": ["This field is required"]}
    """

    data: Any
    errors: dict[str, list[str]]
    reason: str = DEFAULT_REASON

    @property
    def is_valid(self) -> bool:
        """True if validation passed with no errors."""
        return not self.errors

    def __bool__(self) -> bool:
        """Falsy when invalid — enables ``if not result:`` pattern."""
        return self.is_valid

    def error(self) -> SubmissionValidationError:
        """Build the aggregate error for an invalid result.

        Raises ``ValueError`` when the result is valid: a passing
        submission never produces a validation error.
        """
        return SubmissionValidationError(self.errors, self.reason)
