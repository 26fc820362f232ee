"""Request body decoding — JSON, URL-encoded, and multipart — and dataclass binding.

``read_payload()`` turns a request body into a flat mapping. ``bind()``
populates a dataclass from that mapping with type coercion for ``str``,
``int``, ``float``, and ``bool``. Submissions are bound leniently (every
field is optional); create representations are bound strictly.

Any request-like object works: it needs a ``content_type`` attribute and
an async ``body()`` method. A thin adapter over the host framework's request
is enough.

``python-multipart`` is an optional dependency (``pip install submissions[forms]``).
URL-encoded forms use stdlib ``urllib.parse`` — no extra dependency.
"""

from __future__ import annotations

import json as json_module
import types
from collections.abc import Iterator, Mapping
from dataclasses import MISSING
from dataclasses import fields as dc_fields
from typing import TYPE_CHECKING, Any, Protocol, get_type_hints

from submissions.config import DEFAULT_CONFIG, SubmissionsConfig
from submissions.errors import BadRequest, ConfigurationError, UnsupportedMediaType
from submissions.validation.entry import display_value

if TYPE_CHECKING:
    from submissions.validation.entry import Submission


class RequestLike(Protocol):
    """The slice of a request the decoders need."""

    @property
    def content_type(self) -> str | None: ...

    async def body(self) -> bytes: ...


class FormData(Mapping[str, str]):
    """Immutable parsed form data.

    Implements ``Mapping[str, str]``. ``__getitem__`` returns the first
    value for a key, ``get_list`` returns all values for a key.

    Usage::

        form = await parse_form_data(body, content_type)
        title = form["title"]
    """

    __slots__ = ("_data",)

    def __init__(self, data: dict[str, list[str]]) -> None:
        object.__setattr__(self, "_data", data)

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"FormData({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key* (checkboxes, multi-selects)."""
        return list(self._data.get(key, []))


class FormBindingError(Exception):
    """Raised when a payload cannot be bound to a dataclass.

    Attributes:
        errors: Dict mapping field names to lists of error messages.
    """

    def __init__(self, errors: dict[str, list[str]]) -> None:
        self.errors = errors
        fields = ", ".join(sorted(errors))
        super().__init__(f"Form binding failed for: {fields}")


# Type coercion map for bind()
_COERCIONS: dict[type, Any] = {
    str: lambda v: v.strip(),
    int: int,
    float: float,
    bool: lambda v: v.lower() in ("true", "1", "yes", "on"),
}


def _coerce(base_type: type, raw: Any) -> Any:
    """Convert *raw* to *base_type*. Raises ``ValueError`` or ``TypeError``."""
    if isinstance(raw, str):
        coerce = _COERCIONS.get(base_type, base_type)
        return coerce(raw)
    # JSON scalars arrive already typed
    if base_type is float and isinstance(raw, int) and not isinstance(raw, bool):
        return float(raw)
    if base_type is int and isinstance(raw, bool):
        msg = "bool is not an int"
        raise TypeError(msg)
    if isinstance(raw, base_type):
        return raw
    msg = f"expected {base_type.__name__}, got {type(raw).__name__}"
    raise TypeError(msg)


def bind[T](datacls: type[T], payload: Mapping[str, Any], *, blank_is_absent: bool = True) -> T:
    """Bind a decoded payload to a dataclass instance.

    Fields with defaults are optional; fields without defaults are required.
    String fields are stripped of whitespace. With *blank_is_absent*, blank
    strings count as missing, which is how HTML forms send empty inputs.

    Args:
        datacls: A dataclass class to bind into.
        payload: Mapping of field names to raw values (``FormData`` or a
            decoded JSON object).
        blank_is_absent: Treat ``""`` and whitespace-only strings as missing.

    Returns:
        An instance of ``datacls``.

    Raises:
        FormBindingError: If required fields are missing or type coercion fails.
    """
    hints = get_type_hints(datacls)
    errors: dict[str, list[str]] = {}
    values: dict[str, Any] = {}

    for f in dc_fields(datacls):  # type: ignore[arg-type]
        raw = payload.get(f.name)
        if blank_is_absent and isinstance(raw, str) and not raw.strip():
            raw = None

        if raw is None:
            # Field missing from the payload entirely
            if f.default is not MISSING:
                values[f.name] = f.default
            elif f.default_factory is not MISSING:
                values[f.name] = f.default_factory()
            else:
                errors.setdefault(f.name, []).append(f"{f.name} is required.")
            continue

        hint = hints.get(f.name, str)
        base_type = _unwrap_optional(hint)

        try:
            values[f.name] = _coerce(base_type, raw)
        except (ValueError, TypeError):
            errors.setdefault(f.name, []).append(
                f"Invalid value for {f.name}: expected {base_type.__name__}."
            )

    if errors:
        raise FormBindingError(errors)

    return datacls(**values)


def _unwrap_optional(hint: Any) -> type:
    """Extract the base type from ``X | None`` or plain ``X``."""
    if isinstance(hint, types.UnionType):
        # e.g. str | None → pick the non-None type
        args = [a for a in hint.__args__ if a is not type(None)]
        if args:
            return args[0]
    return hint if isinstance(hint, type) else str


def form_values(form: Any) -> dict[str, str]:
    """Extract field values as strings for template re-population.

    Accepts a dataclass instance or a ``Mapping``. Values render the same
    way the field cache shows them (``None`` as ``""``, bools lowercase).
    """
    if hasattr(form, "__dataclass_fields__"):
        return {f.name: display_value(getattr(form, f.name)) for f in dc_fields(form)}
    if isinstance(form, Mapping):
        return {k: display_value(v) for k, v in form.items()}
    return {}


# -- Request decoding --


async def read_payload(request: RequestLike) -> Mapping[str, Any]:
    """Read and decode the request body into a flat mapping.

    JSON bodies must hold an object. Form bodies become ``FormData``.

    Raises:
        BadRequest: If the body is malformed.
        UnsupportedMediaType: If the content type is neither JSON nor a form.
    """
    content_type = request.content_type or ""
    ct_lower = content_type.lower().split(";")[0].strip()
    body = await request.body()

    if ct_lower == "application/json" or ct_lower.endswith("+json"):
        try:
            decoded = json_module.loads(body or b"{}")
        except ValueError as exc:
            raise BadRequest(f"Malformed JSON body: {exc}") from exc
        if not isinstance(decoded, dict):
            raise BadRequest("JSON body must be an object")
        return decoded

    if ct_lower in ("application/x-www-form-urlencoded", "multipart/form-data"):
        try:
            return await parse_form_data(body, content_type)
        except ValueError as exc:
            raise BadRequest(str(exc)) from exc

    raise UnsupportedMediaType(request.content_type)


def bind_submission[S: Submission](
    submission_cls: type[S],
    payload: Mapping[str, Any],
    *,
    config: SubmissionsConfig | None = None,
) -> S:
    """Bind *payload* to a submission type.

    Every submission field is optional, so only malformed values fail.

    Raises:
        BadRequest: If a value cannot be coerced to its field type.
    """
    cfg = config or DEFAULT_CONFIG
    try:
        return bind(submission_cls, payload, blank_is_absent=cfg.blank_is_absent)
    except FormBindingError as e:
        raise BadRequest(str(e)) from e


async def decode_submission[S: Submission](
    request: RequestLike,
    submission_cls: type[S],
    *,
    config: SubmissionsConfig | None = None,
) -> S:
    """Decode the request body into a submission.

    Usage::

        submission = await decode_submission(request, PostSubmission)
    """
    payload = await read_payload(request)
    return bind_submission(submission_cls, payload, config=config)


async def parse_form_data(
    body: bytes,
    content_type: str,
) -> FormData:
    """Parse form body into FormData.

    Supports:
    - ``application/x-www-form-urlencoded`` (stdlib, no extra dependency)
    - ``multipart/form-data`` (requires ``python-multipart``)

    Raises:
        ConfigurationError: If multipart parsing is needed but
            ``python-multipart`` is not installed.
        ValueError: If content type is not a supported form encoding.
    """
    ct_lower = content_type.lower().split(";")[0].strip()

    if ct_lower == "application/x-www-form-urlencoded":
        return _parse_urlencoded(body)

    if ct_lower == "multipart/form-data":
        return await _parse_multipart(body, content_type)

    msg = f"Unsupported form content type: {content_type!r}"
    raise ValueError(msg)


def _parse_urlencoded(body: bytes) -> FormData:
    """Parse URL-encoded form data using stdlib."""
    from urllib.parse import parse_qs

    parsed = parse_qs(body.decode("utf-8"), keep_blank_values=True)
    return FormData(parsed)


async def _parse_multipart(body: bytes, content_type: str) -> FormData:
    """Parse the text fields of multipart form data using python-multipart.

    File parts are not submission fields and are skipped.
    """
    try:
        from multipart.multipart import MultipartParser, parse_options_header
    except ImportError:
        msg = (
            "Multipart form parsing requires the 'python-multipart' package. "
            "Install it with: pip install submissions[forms]"
        )
        raise ConfigurationError(msg) from None

    _, options = parse_options_header(content_type.encode("latin-1"))
    boundary = options.get(b"boundary")
    if boundary is None:
        msg = "Multipart form data missing boundary parameter"
        raise ValueError(msg)

    data: dict[str, list[str]] = {}

    # Track current part state
    pending_header = ""
    current_data = bytearray()
    current_field_name: str | None = None
    is_file = False

    def on_part_begin() -> None:
        nonlocal current_data, current_field_name, is_file
        current_data = bytearray()
        current_field_name = None
        is_file = False

    def on_part_data(data_chunk: bytes, start: int, end: int) -> None:
        current_data.extend(data_chunk[start:end])

    def on_part_end() -> None:
        if current_field_name is None or is_file:
            return
        value = current_data.decode("utf-8", errors="replace")
        data.setdefault(current_field_name, []).append(value)

    def on_header_field(hdata: bytes, start: int, end: int) -> None:
        nonlocal pending_header
        pending_header = hdata[start:end].decode("latin-1").lower()

    def on_header_value(hdata: bytes, start: int, end: int) -> None:
        nonlocal current_field_name, is_file
        if pending_header != "content-disposition":
            return
        _, params = parse_options_header(hdata[start:end])
        name = params.get(b"name")
        if name is not None:
            current_field_name = name.decode("utf-8")
        is_file = b"filename" in params

    callbacks: dict[str, Any] = {
        "on_part_begin": on_part_begin,
        "on_part_data": on_part_data,
        "on_part_end": on_part_end,
        "on_header_field": on_header_field,
        "on_header_value": on_header_value,
    }

    parser = MultipartParser(boundary, callbacks)
    parser.write(body)
    parser.finalize()

    return FormData(data)
