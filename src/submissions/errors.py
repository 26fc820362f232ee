"""Submissions exception hierarchy.

Shared across decoding, validation, and the create/update helpers so every
module raises and catches the same types.

Validation failures are the one expected outcome in here:
``SubmissionValidationError`` only travels between the lifecycle helpers
and ``promote_errors()``, which turns it back into data.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_REASON = "One or more fields failed to pass validation."


class SubmissionsError(Exception):
    """Base for all submissions-specific errors."""


class ConfigurationError(SubmissionsError):
    """Raised when a submission type or template setup is invalid.

    Typically raised by ``check_alignment()`` when a create representation
    requires a field the submission table does not mark as non-optional.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(SubmissionsError):
    """An error that maps directly to an HTTP status code.

    The host framework is expected to turn these into error responses.
    """

    status: int
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class BadRequest(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """400 — the request body could not be decoded into a submission."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — the object to update does not exist."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class UnsupportedMediaType(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """415 — the request body is neither JSON nor form data."""

    def __init__(self, content_type: str | None) -> None:
        super().__init__(status=415, detail=f"Unsupported content type: {content_type!r}")


class CreateDecodeError(HTTPError):
    """500 — the strict create representation failed to decode after validation passed.

    Means the submission's non-optional fields and the create type's
    required fields have drifted apart. Never reported as a validation
    error.
    """

    def __init__(self, errors: Mapping[str, list[str]]) -> None:
        fields = ", ".join(sorted(errors))
        super().__init__(status=500, detail=f"Create decoding failed for: {fields}")


class SubmissionValidationError(SubmissionsError):
    """One or more fields failed validation.

    Attributes:
        errors: Dict mapping field keys to their failure messages, in
            declaration order. Never empty.
        reason: Human-readable summary.

    ``to_dict()`` produces the JSON payload API clients receive::

        {"error": true,
         "validationErrors": {"title": ["data is not larger than 5"]},
         "reason": "One or more fields failed to pass validation."}
    """

    def __init__(self, errors: Mapping[str, list[str]], reason: str = DEFAULT_REASON) -> None:
        if not errors:
            msg = "SubmissionValidationError requires at least one failing field"
            raise ValueError(msg)
        self.errors: dict[str, list[str]] = {key: list(messages) for key, messages in errors.items()}
        self.reason = reason
        super().__init__(reason)

    @property
    def keys(self) -> list[str]:
        """Keys of the failing fields."""
        return list(self.errors)

    def merge(self, other: SubmissionValidationError) -> SubmissionValidationError:
        """Return a new error with *other*'s messages appended key by key."""
        merged = {key: list(messages) for key, messages in self.errors.items()}
        for key, messages in other.errors.items():
            merged.setdefault(key, []).extend(messages)
        return SubmissionValidationError(merged, self.reason)

    def to_dict(self) -> dict[str, object]:
        return {
            "error": True,
            "validationErrors": {key: list(messages) for key, messages in self.errors.items()},
            "reason": self.reason,
        }

    def __repr__(self) -> str:
        return f"SubmissionValidationError({self.errors!r})"
