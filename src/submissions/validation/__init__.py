"""Submission validation — field tables, composable rules, collect-all results.

Usage::

    from submissions.validation import Field, Mode, Submission, count, validate_submission

    @dataclass(frozen=True, slots=True)
    class PostSubmission(Submission):
        title: str | None = None

        @classmethod
        def make_fields(cls, mode: Mode = Mode.CREATE) -> tuple[Field, ...]:
            return (Field("title", is_optional=False, validators=(count(5),)),)

    result = await validate_submission(PostSubmission(title="hi"))
    if not result:
        # result.errors == {"title": ["data is not larger than 5"]}
        ...
"""

from submissions.validation.engine import validate, validate_submission
from submissions.validation.entry import Field, FieldEntry, Mode, Submission
from submissions.validation.result import ValidationResult
from submissions.validation.rules import (
    AsyncValidator,
    Validator,
    between,
    count,
    email,
    integer,
    matches,
    max_length,
    min_length,
    not_blank,
    number,
    one_of,
    required,
    url,
)

__all__ = [
    "AsyncValidator",
    "Field",
    "FieldEntry",
    "Mode",
    "Submission",
    "ValidationResult",
    "Validator",
    "between",
    "count",
    "email",
    "integer",
    "matches",
    "max_length",
    "min_length",
    "not_blank",
    "number",
    "one_of",
    "required",
    "url",
    "validate",
    "validate_submission",
]
