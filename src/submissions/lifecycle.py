"""Create/update helpers — decode, validate, then build or mutate a domain object.

Domain types implement the ``Submittable`` protocol::

    @dataclass
    class Post:
        title: str
        body: str = ""

        submission_type = PostSubmission
        create_type = PostCreate

        @classmethod
        def make_submission(cls, existing: Post | None) -> PostSubmission:
            if existing is None:
                return PostSubmission()
            return PostSubmission(title=existing.title, body=existing.body)

        def update(self, submission: PostSubmission) -> None:
            if submission.title is not None:
                self.title = submission.title

        @classmethod
        def create(cls, payload: PostCreate) -> Post:
            return cls(title=payload.title, body=payload.body or "")

A handler then reads::

    outcome = await promote_errors(create_valid(request, Post))
    return to_response(outcome, created=True)

Two representations exist on purpose. The submission is all-optional so
decoding never fails before validation can report what is missing; the
create type is strict and is only decoded once validation has passed.
``check_alignment()`` keeps the two from drifting apart.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable
from dataclasses import MISSING
from dataclasses import fields as dc_fields
from typing import Any, ClassVar, Protocol, Self

from submissions.cache import FieldCache
from submissions.config import DEFAULT_CONFIG, SubmissionsConfig
from submissions.errors import ConfigurationError, CreateDecodeError, NotFound, SubmissionValidationError
from submissions.http.forms import FormBindingError, RequestLike, bind, bind_submission, read_payload
from submissions.returns import Accepted, Outcome, Rejected
from submissions.validation.engine import validate_submission
from submissions.validation.entry import Mode, Submission

logger = logging.getLogger("submissions.lifecycle")


class Submittable(Protocol):
    """A domain type that can be created and updated from submissions."""

    submission_type: ClassVar[type[Submission]]
    create_type: ClassVar[type[Any]]

    @classmethod
    def make_submission(cls, existing: Self | None) -> Submission:
        """Derive a submission from *existing*, or an empty one for ``None``."""
        ...

    def update(self, submission: Any) -> None:
        """Apply the present fields of *submission*; absent ones stay untouched."""
        ...

    @classmethod
    def create(cls, payload: Any) -> Self:
        """Build a new instance from the strict create representation."""
        ...


class Repository(Protocol):
    """Persistence collaborator for update lookups and saves."""

    async def get(self, identifier: Any) -> Any | None: ...

    async def save(self, obj: Any) -> Any: ...


@functools.cache
def check_alignment(submission_cls: type[Submission], create_cls: type[Any]) -> None:
    """Ensure every required create field is a non-optional submission field.

    Raises:
        ConfigurationError: Naming the create fields that validation would
            let through as missing.
    """
    required_on_create = {
        f.name
        for f in dc_fields(create_cls)
        if f.default is MISSING and f.default_factory is MISSING
    }
    drifted = sorted(required_on_create - submission_cls.required_keys(Mode.CREATE))
    if drifted:
        msg = (
            f"{create_cls.__name__} requires {', '.join(drifted)} but "
            f"{submission_cls.__name__} does not mark them as non-optional on create"
        )
        raise ConfigurationError(msg)


async def create_valid[M: Submittable](
    request: RequestLike,
    model_cls: type[M],
    *,
    cache: FieldCache | None = None,
    config: SubmissionsConfig | None = None,
) -> M:
    """Decode and validate a submission, then construct a new domain object.

    The strict create representation is only decoded after validation
    passed.

    Raises:
        SubmissionValidationError: If any field failed validation.
        BadRequest: If the body could not be decoded.
        CreateDecodeError: If the create representation fails to decode
            despite passing validation.
    """
    cfg = config or DEFAULT_CONFIG
    check_alignment(model_cls.submission_type, model_cls.create_type)

    payload = await read_payload(request)
    submission = bind_submission(model_cls.submission_type, payload, config=cfg)
    result = await validate_submission(submission, mode=Mode.CREATE, cache=cache, config=cfg)
    if not result:
        raise result.error()

    try:
        create = bind(model_cls.create_type, payload, blank_is_absent=cfg.blank_is_absent)
    except FormBindingError as e:
        logger.error(
            "%s passed validation but %s failed to decode: %s",
            model_cls.submission_type.__name__,
            model_cls.create_type.__name__,
            e.errors,
        )
        raise CreateDecodeError(e.errors) from e
    return model_cls.create(create)


async def update_valid[M: Submittable](
    request: RequestLike,
    model_cls: type[M],
    identifier: Any,
    repository: Repository,
    *,
    cache: FieldCache | None = None,
    config: SubmissionsConfig | None = None,
) -> M:
    """Load an object, validate a submission against it, and apply the present fields.

    The returned object is not saved.

    Raises:
        NotFound: If *repository* has no object for *identifier*.
        SubmissionValidationError: If any field failed validation.
    """
    cfg = config or DEFAULT_CONFIG
    existing = await repository.get(identifier)
    if existing is None:
        raise NotFound(f"{model_cls.__name__} {identifier!r} not found")

    submission = bind_submission(model_cls.submission_type, await read_payload(request), config=cfg)
    result = await validate_submission(submission, mode=Mode.UPDATE, cache=cache, config=cfg)
    if not result:
        raise result.error()

    existing.update(submission)
    return existing


async def promote_errors[T](awaitable: Awaitable[T]) -> Outcome[T]:
    """Await *awaitable*, turning a validation failure into a ``Rejected`` value.

    Every other exception propagates.

    Usage::

        outcome = await promote_errors(create_valid(request, Post))
        if isinstance(outcome, Rejected):
            ...
    """
    try:
        value = await awaitable
    except SubmissionValidationError as e:
        return Rejected(e)
    return Accepted(value)


async def create_and_save[M: Submittable](
    request: RequestLike,
    model_cls: type[M],
    repository: Repository,
    *,
    cache: FieldCache | None = None,
    config: SubmissionsConfig | None = None,
) -> Outcome[M]:
    """``create_valid()`` followed by ``repository.save()``, with errors promoted."""

    async def _create() -> M:
        obj = await create_valid(request, model_cls, cache=cache, config=config)
        await repository.save(obj)
        return obj

    return await promote_errors(_create())


async def update_and_save[M: Submittable](
    request: RequestLike,
    model_cls: type[M],
    identifier: Any,
    repository: Repository,
    *,
    cache: FieldCache | None = None,
    config: SubmissionsConfig | None = None,
) -> Outcome[M]:
    """``update_valid()`` followed by ``repository.save()``, with errors promoted."""

    async def _update() -> M:
        obj = await update_valid(
            request, model_cls, identifier, repository, cache=cache, config=config,
        )
        await repository.save(obj)
        return obj

    return await promote_errors(_update())
