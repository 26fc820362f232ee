"""Request-scoped field cache via ContextVar.

Provides:
- ``FieldState``: one field's display value, label, and error messages.
- ``FieldCache``: the per-request store templates read when rendering forms.
- ``field_cache()``: the cache of the current request, created lazily.
- ``request_scope()``: installs a fresh cache for the duration of a request.

The cache is written by ``populate_fields()`` before rendering a create or
edit form, and by the validation engine after every validation attempt,
so a re-rendered form shows the user's last input with its messages.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    free-threading. A cache is only ever touched by the request that owns
    it, so no locks are needed.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from submissions.validation.entry import FieldEntry, Mode

if TYPE_CHECKING:
    from submissions.lifecycle import Submittable


logger = logging.getLogger("submissions.cache")


@dataclass(frozen=True, slots=True)
class FieldState:
    """Renderable state of one form field."""

    key: str
    label: str
    value: str = ""
    errors: tuple[str, ...] = ()
    is_optional: bool = True

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


class FieldCache:
    """Ordered mapping of field key → ``FieldState`` for one request.

    Usage::

        cache = field_cache()
        state = cache["title"]
        state.value, state.errors
    """

    __slots__ = ("_states",)

    def __init__(self) -> None:
        self._states: dict[str, FieldState] = {}

    def put(self, state: FieldState) -> None:
        self._states[state.key] = state

    def put_entry(self, entry: FieldEntry, errors: list[str] | tuple[str, ...] = ()) -> FieldState:
        """Store *entry*'s value together with *errors*, replacing any previous state."""
        state = FieldState(
            key=entry.key,
            label=entry.label,
            value=entry.value,
            errors=tuple(errors),
            is_optional=entry.is_optional,
        )
        self._states[entry.key] = state
        return state

    def __getitem__(self, key: str) -> FieldState:
        return self._states[key]

    def __contains__(self, key: object) -> bool:
        return key in self._states

    def __iter__(self) -> Iterator[str]:
        return iter(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def get(self, key: str, default: FieldState | None = None) -> FieldState | None:
        return self._states.get(key, default)

    def errors(self) -> dict[str, list[str]]:
        """Messages per key, for keys that have any."""
        return {key: list(state.errors) for key, state in self._states.items() if state.errors}

    def values(self) -> dict[str, str]:
        """Display value per key."""
        return {key: state.value for key, state in self._states.items()}

    def clear(self) -> None:
        self._states.clear()

    def __repr__(self) -> str:
        return f"<FieldCache {self._states!r}>"


# -- Request scope --

_cache_var: ContextVar[FieldCache | None] = ContextVar("submissions_field_cache", default=None)


def field_cache() -> FieldCache:
    """Return the field cache of the current request, creating it on first use.

    A lazily created cache lives in the calling context until that context
    ends. Hosts that do not run each request in its own task (thread pools,
    WSGI workers) must wrap requests in ``request_scope()``, or a later
    request on the same thread sees the previous request's field states.
    """
    cache = _cache_var.get()
    if cache is None:
        cache = FieldCache()
        _cache_var.set(cache)
        logger.debug("Created field cache outside request_scope()")
    return cache


@contextlib.contextmanager
def request_scope() -> Iterator[FieldCache]:
    """Install a fresh field cache for the duration of one request.

    Usage (from the host framework's request handling)::

        with request_scope():
            response = await handler(request)
    """
    cache = FieldCache()
    token = _cache_var.set(cache)
    try:
        yield cache
    finally:
        _cache_var.reset(token)


def populate_fields(
    model_cls: type[Submittable],
    existing: Any = None,
    *,
    cache: FieldCache | None = None,
) -> FieldCache:
    """Fill the cache for rendering a create (``existing=None``) or edit form.

    Writes one state per field of ``model_cls.make_submission(existing)``
    with no errors. Edit forms use the update field table.
    """
    target = cache if cache is not None else field_cache()
    submission = model_cls.make_submission(existing)
    mode = Mode.CREATE if existing is None else Mode.UPDATE
    for entry in submission.field_entries(mode):
        target.put_entry(entry)
    return target
