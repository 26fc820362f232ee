"""Accepted and Rejected — the two outcomes of a submission.

Frozen dataclasses that the create/update helpers hand back once
validation errors are promoted to data. The response layer dispatches on
the variant; neither side needs to know how the other serializes.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, is_dataclass
from typing import Any

from submissions.errors import SubmissionValidationError


def serialize(value: Any) -> Any:
    """Convert a domain value into JSON-compatible data.

    Prefers a ``to_dict()`` method, then dataclasses, then mappings.
    Anything else (str, int, list, ...) passes through.
    """
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, Mapping):
        return dict(value)
    return value


@dataclass(frozen=True)
class Accepted[T]:
    """The submission passed validation; *value* is the created or updated object.

    Usage::

        match outcome:
            case Accepted(value=post):
                ...
            case Rejected(error=error):
                ...
    """

    value: T

    def to_dict(self) -> Any:
        return serialize(self.value)


@dataclass(frozen=True, slots=True)
class Rejected:
    """The submission failed validation; *error* lists the failing fields."""

    error: SubmissionValidationError

    @property
    def errors(self) -> dict[str, list[str]]:
        return self.error.errors

    def to_dict(self) -> dict[str, object]:
        return self.error.to_dict()


type Outcome[T] = Accepted[T] | Rejected
