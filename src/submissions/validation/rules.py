"""Built-in validation rules for submissions.

Each validator is a callable with the signature::

    def rule(value: Any) -> str | None:
        '''Return error message, or None if valid.'''

Validators only ever see present values: the engine reports missing
required fields itself and skips the rules for absent ones.

Parameterized validators are factory functions that return a validator::

    def count(min: int | None = None, max: int | None = None) -> Validator:
        def check(value: Any) -> str | None:
            ...
        return check

Async validators follow the same protocol but return an awaitable, so
they can look things up in storage::

    async def unique_title(value: Any) -> str | None:
        if await repo.exists(title=value):
            return "data is already taken"
        return None
"""

import re
from collections.abc import Awaitable, Callable
from typing import Any

# Type alias for a validator function
type Validator = Callable[[Any], str | None]

# Type alias for a validator that needs I/O
type AsyncValidator = Callable[[Any], Awaitable[str | None]]


# ---------------------------------------------------------------------------
# Presence
# ---------------------------------------------------------------------------


def required(value: Any) -> str | None:
    """Field must be present and non-empty."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return "This field is required"
    return None


def not_blank(value: Any) -> str | None:
    """String must contain something other than whitespace."""
    if not str(value).strip():
        return "data is blank"
    return None


# ---------------------------------------------------------------------------
# Ranges
# ---------------------------------------------------------------------------


def _check_bounds(measure: Any, lower: Any, upper: Any) -> str | None:
    if lower is not None and measure < lower:
        return f"data is not larger than {lower}"
    if upper is not None and measure > upper:
        return f"data is larger than {upper}"
    return None


def count(min: int | None = None, max: int | None = None) -> Validator:  # noqa: A002
    """Length of the value must lie in ``[min, max]``.

    Both bounds are inclusive; leave either as ``None`` for an open end.
    ``count(5)`` accepts anything at least five characters (or items) long.
    """

    def check(value: Any) -> str | None:
        try:
            size = len(value)
        except TypeError:
            return "data has no length"
        return _check_bounds(size, min, max)

    return check


def between(min: float | None = None, max: float | None = None) -> Validator:  # noqa: A002
    """Numeric value must lie in ``[min, max]`` (inclusive, open ends allowed)."""

    def check(value: Any) -> str | None:
        try:
            number_value = float(value)
        except (ValueError, TypeError):
            return "data is not a number"
        return _check_bounds(number_value, min, max)

    return check


def max_length(n: int) -> Validator:
    """String must be at most *n* characters."""
    return count(max=n)


def min_length(n: int) -> Validator:
    """String must be at least *n* characters."""
    return count(min=n)


# ---------------------------------------------------------------------------
# Format
# ---------------------------------------------------------------------------

# Basic email pattern — checks structure, not deliverability
_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")


def email(value: Any) -> str | None:
    """Value must be a valid email address (basic format check)."""
    if not _EMAIL_RE.match(str(value)):
        return "data is not a valid email address"
    return None


# Basic URL pattern — checks scheme + host structure
_URL_RE = re.compile(r"^https?://[^\s/$.?#].\S*$", re.IGNORECASE)


def url(value: Any) -> str | None:
    """Value must be a valid URL (http/https)."""
    if not _URL_RE.match(str(value)):
        return "data is not a valid URL"
    return None


def matches(pattern: str, message: str | None = None) -> Validator:
    """Value must match the given regex pattern."""
    compiled = re.compile(pattern)

    def check(value: Any) -> str | None:
        if not compiled.match(str(value)):
            return message or f"data does not match pattern: {pattern}"
        return None

    return check


# ---------------------------------------------------------------------------
# Choice
# ---------------------------------------------------------------------------


def one_of(*choices: str) -> Validator:
    """Value must be one of the given choices."""
    allowed = frozenset(choices)

    def check(value: Any) -> str | None:
        if value not in allowed:
            options = ", ".join(sorted(allowed))
            return f"data is not one of: {options}"
        return None

    return check


# ---------------------------------------------------------------------------
# Type coercion
# ---------------------------------------------------------------------------


def integer(value: Any) -> str | None:
    """Value must be a valid integer."""
    if isinstance(value, bool):
        return "data is not a whole number"
    if isinstance(value, int):
        return None
    try:
        int(value)
    except (ValueError, TypeError):
        return "data is not a whole number"
    return None


def number(value: Any) -> str | None:
    """Value must be a valid number (int or float)."""
    try:
        float(value)
    except (ValueError, TypeError):
        return "data is not a number"
    return None
