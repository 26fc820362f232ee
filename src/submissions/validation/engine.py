"""Validation engine — runs every field's validators and collects all failures.

Policy is collect-all, within a field and across fields:

1. Absent non-optional field → exactly one required message; its
   validators are skipped.
2. Absent optional field → nothing runs, nothing fails.
3. Present field → every sync validator in declaration order, then every
   async validator in declaration order. Each failure adds one message.

Sync validators run first for every field. Fields with async validators
are then checked concurrently in an anyio task group, so one field's
storage lookup never holds up another's. A validator that raises
propagates as its own exception type. Every field's attempted value and
messages land in the field cache whatever the outcome.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import anyio

from submissions import cache as field_caches
from submissions.config import DEFAULT_CONFIG, SubmissionsConfig
from submissions.validation.entry import FieldEntry, Mode, Submission
from submissions.validation.result import ValidationResult
from submissions.validation.rules import Validator, required

if TYPE_CHECKING:
    from submissions.cache import FieldCache

logger = logging.getLogger("submissions.validation")


def check_entry(entry: FieldEntry, required_message: str) -> list[str]:
    """Run *entry*'s sync validators and return their failure messages."""
    if entry.is_absent:
        return [] if entry.is_optional else [required_message]
    messages: list[str] = []
    for validator in entry.validators:
        message = validator(entry.data)
        if message is not None:
            messages.append(message)
    return messages


async def check_entry_async(entry: FieldEntry) -> list[str]:
    """Run *entry*'s async validators and return their failure messages."""
    messages: list[str] = []
    if entry.is_absent:
        return messages
    for validator in entry.async_validators:
        message = await validator(entry.data)
        if message is not None:
            messages.append(message)
    return messages


async def validate_submission(
    submission: Submission,
    *,
    mode: Mode = Mode.CREATE,
    cache: FieldCache | None = None,
    config: SubmissionsConfig | None = None,
) -> ValidationResult:
    """Validate every field of *submission*.

    Args:
        submission: A decoded submission instance.
        mode: Which field table to check against.
        cache: Field cache to write to. Defaults to the current request's.
        config: Supplies the required-field message and the error reason.

    Returns:
        A ``ValidationResult`` whose ``data`` is *submission* and whose
        ``errors`` only lists failing keys, in field declaration order.

    Example::

        result = await validate_submission(PostSubmission(title="hi"))
        # result.errors == {"title": ["data is not larger than 5"]}
    """
    cfg = config or DEFAULT_CONFIG
    target = cache if cache is not None else field_caches.field_cache()
    entries = submission.field_entries(mode)
    found = {entry.key: check_entry(entry, cfg.required_message) for entry in entries}

    async def _check(entry: FieldEntry) -> None:
        found[entry.key].extend(await check_entry_async(entry))

    pending = [entry for entry in entries if entry.async_validators and not entry.is_absent]
    if pending:
        try:
            async with anyio.create_task_group() as tg:
                for entry in pending:
                    tg.start_soon(_check, entry)
        except ExceptionGroup as eg:
            # A single failing validator surfaces as itself
            if len(eg.exceptions) == 1:
                raise eg.exceptions[0] from None
            raise

    errors: dict[str, list[str]] = {}
    for entry in entries:
        messages = found[entry.key]
        target.put_entry(entry, messages)
        if messages:
            errors[entry.key] = messages

    if errors:
        logger.debug(
            "%s failed validation for: %s",
            type(submission).__name__,
            ", ".join(errors),
        )
    return ValidationResult(data=submission, errors=errors, reason=cfg.reason)


def validate(
    data: Mapping[str, Any],
    rules: dict[str, list[Validator]],
) -> ValidationResult:
    """Validate a plain mapping against a set of rules.

    For quick forms that have no submission type. Missing values and
    blank strings count as absent: a field listing ``required`` gets that single message, other
    blank fields are skipped.

    Args:
        data: Any mapping of field names to values: ``FormData``, a
            decoded JSON object, or a plain ``dict``. Non-string values
            reach the validators unchanged.
        rules: A dict mapping field names to lists of validator
            functions. Each validator returns an error message string
            on failure, or ``None`` on success.

    Returns:
        A ``ValidationResult`` with ``.data`` (cleaned values) and
        ``.errors`` (field → list of error messages).

    Example::

        result = validate(form, {
            "title": [required, max_length(200)],
            "body": [required, min_length(10)],
        })
        if not result:
            # result.errors == {"body": ["data is not larger than 10"]}
            ...
    """
    errors: dict[str, list[str]] = {}
    cleaned: dict[str, Any] = {}

    for field_name, validators in rules.items():
        value = data.get(field_name)

        if value is None or (isinstance(value, str) and not value.strip()):
            if required in validators:
                errors[field_name] = [str(required(value))]
            elif value is not None:
                cleaned[field_name] = value
            continue

        field_errors = [
            message
            for validator in validators
            if (message := validator(value)) is not None
        ]
        if field_errors:
            errors[field_name] = field_errors
        else:
            cleaned[field_name] = value

    return ValidationResult(data=cleaned, errors=errors)
