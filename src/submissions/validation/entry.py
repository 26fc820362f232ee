"""Field descriptors, field entries, and the submission base class.

A submission type lists its fields explicitly. There is no reflection
over attributes beyond the default accessor, which reads the attribute
named after the field key::

    @dataclass(frozen=True, slots=True)
    class PostSubmission(Submission):
        title: str | None = None
        body: str | None = None

        @classmethod
        def make_fields(cls, mode: Mode = Mode.CREATE) -> tuple[Field, ...]:
            return (
                Field(
                    "title",
                    label="Title",
                    is_optional=mode is Mode.UPDATE,
                    validators=(count(5),),
                ),
                Field("body", label="Body", validators=(count(max=10_000),)),
            )

``is_optional`` decides whether a value is *required*. It is unrelated to
the attribute's storage type: every submission attribute is ``X | None``
so decoding never fails on a missing value, and validation reports the
missing required ones instead. The table is built per ``Mode``, so a field
can be required on create yet left untouched by a partial update.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from submissions.errors import ConfigurationError
from submissions.validation.rules import AsyncValidator, Validator


class Mode(enum.Enum):
    """What a submission is being validated for."""

    CREATE = "create"
    UPDATE = "update"


def display_value(value: Any) -> str:
    """String shown in a form input for *value* (``""`` when absent)."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def default_label(key: str) -> str:
    """``"first_name"`` → ``"First name"``."""
    return key.replace("_", " ").capitalize()


@dataclass(frozen=True, slots=True)
class Field:
    """Descriptor for one field of a submission type.

    Validators and async validators run in declaration order. *accessor*
    overrides how the value is read from a submission instance.
    """

    key: str
    label: str | None = None
    is_optional: bool = True
    validators: tuple[Validator, ...] = ()
    async_validators: tuple[AsyncValidator, ...] = ()
    accessor: Callable[[Any], Any] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "validators", tuple(self.validators))
        object.__setattr__(self, "async_validators", tuple(self.async_validators))

    def read(self, submission: Any) -> Any:
        if self.accessor is not None:
            return self.accessor(submission)
        return getattr(submission, self.key, None)

    def bind(self, submission: Any) -> FieldEntry:
        """Produce the entry for this field's value on *submission*."""
        data = self.read(submission)
        return FieldEntry(
            key=self.key,
            label=self.label if self.label is not None else default_label(self.key),
            value=display_value(data),
            data=data,
            is_optional=self.is_optional,
            validators=self.validators,
            async_validators=self.async_validators,
        )


@dataclass(frozen=True, slots=True)
class FieldEntry:
    """One field bound to the value of a specific submission.

    ``value`` is the display string used for re-rendering; ``data`` is the
    typed value validators receive (``None`` when absent).
    """

    key: str
    label: str
    value: str
    data: Any = None
    is_optional: bool = True
    validators: tuple[Validator, ...] = ()
    async_validators: tuple[AsyncValidator, ...] = ()

    @property
    def is_absent(self) -> bool:
        return self.data is None


class Submission:
    """Base class for all-optional submission dataclasses.

    Subclasses implement ``make_fields()``. Declare subclasses with
    ``slots=True`` (or plain dataclasses); this base has no instance state.
    """

    __slots__ = ()

    @classmethod
    def make_fields(cls, mode: Mode = Mode.CREATE) -> Sequence[Field]:
        msg = f"{cls.__name__} must implement make_fields()"
        raise NotImplementedError(msg)

    @classmethod
    def field_table(cls, mode: Mode = Mode.CREATE) -> tuple[Field, ...]:
        """The ordered field table for *mode*, checked for duplicate keys."""
        table = tuple(cls.make_fields(mode))
        seen: set[str] = set()
        for field in table:
            if field.key in seen:
                msg = f"{cls.__name__} declares field {field.key!r} more than once"
                raise ConfigurationError(msg)
            seen.add(field.key)
        return table

    @classmethod
    def required_keys(cls, mode: Mode = Mode.CREATE) -> frozenset[str]:
        """Keys of the fields that must be present to validate in *mode*."""
        return frozenset(field.key for field in cls.field_table(mode) if not field.is_optional)

    def field_entries(self, mode: Mode = Mode.CREATE) -> list[FieldEntry]:
        """Bind every field to this instance, in declaration order."""
        return [field.bind(self) for field in self.field_table(mode)]
