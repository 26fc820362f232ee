"""Built-in submissions template filters and globals.

Auto-registered on every environment built by ``create_environment()``.
``text_group`` is the form directive: it reads one field from the field
cache and renders its label, input, and error messages.
"""

import html
from typing import Any

from kida.template import Markup

from submissions.cache import FieldCache, field_cache


def attr(value: Any, name: str) -> str | Markup:
    """Output an HTML attribute when value is truthy, else empty string.

    Example:
        <input{{ placeholder | attr("placeholder") }}>
        → <input placeholder="Title">   (when placeholder is "Title")
        → <input>                       (when placeholder is None or "")

    """
    if not value:
        return ""
    return Markup(f' {name}="{html.escape(str(value))}"')


def field_errors(errors: Any, field_name: str) -> list[str]:
    """Extract validation errors for a single form field.

    Accepts a ``FieldCache`` or a ``{field: [messages]}`` dict, returning
    an empty list when *errors* is None, missing, or the field has no
    errors.

    Example:
        {% for msg in fields | field_errors("title") %}
          <span class="error">{{ msg }}</span>
        {% end %}

    """
    if errors is None:
        return []
    if isinstance(errors, FieldCache):
        state = errors.get(field_name)
        return list(state.errors) if state is not None else []
    if isinstance(errors, dict):
        val = errors.get(field_name, [])
        return list(val) if val else []
    return []


def field_value(fields: Any, field_name: str) -> str:
    """The last submitted (or pre-populated) value of a field, or ``""``.

    Example:
        <textarea name="body">{{ fields | field_value("body") }}</textarea>

    """
    if isinstance(fields, FieldCache):
        state = fields.get(field_name)
        return state.value if state is not None else ""
    if isinstance(fields, dict):
        value = fields.get(field_name)
        return "" if value is None else str(value)
    return ""


def text_group(
    key: str,
    type: str = "text",  # noqa: A002
    placeholder: str | None = None,
    fields: FieldCache | None = None,
) -> Markup:
    """Render a labeled text input for *key* with its error messages.

    Reads from *fields*, or the current request's field cache.

    Example:
        {{ text_group("title", placeholder="A catchy title") }}
        → <div class="form-group field--error">
            <label for="title">Title</label>
            <input type="text" id="title" name="title" value="hi" required>
            <span class="field-error">data is not larger than 5</span>
          </div>

    Raises:
        KeyError: If the cache has no state for *key* (the form was
            rendered without ``populate_fields()`` or a validation pass).
    """
    cache = fields if fields is not None else field_cache()
    state = cache.get(key)
    if state is None:
        msg = f"No field {key!r} in the field cache; call populate_fields() before rendering"
        raise KeyError(msg)

    field_id = html.escape(key, quote=True)
    group_class = "form-group field--error" if state.has_errors else "form-group"
    input_attrs = [
        f' type="{html.escape(type, quote=True)}"',
        f' id="{field_id}"',
        f' name="{field_id}"',
        f' value="{html.escape(state.value, quote=True)}"',
        str(attr(placeholder, "placeholder")),
    ]
    if not state.is_optional:
        input_attrs.append(" required")
    if state.has_errors:
        input_attrs.append(' aria-invalid="true"')

    parts = [
        f'<div class="{group_class}">',
        f'<label for="{field_id}">{html.escape(state.label)}</label>',
        f"<input{''.join(input_attrs)}>",
    ]
    parts.extend(f'<span class="field-error">{html.escape(message)}</span>' for message in state.errors)
    parts.append("</div>")
    return Markup("\n".join(parts))


BUILTIN_GLOBALS: dict[str, Any] = {
    "text_group": text_group,
}


# All built-in filters, registered automatically on every env.
BUILTIN_FILTERS: dict[str, Any] = {
    "attr": attr,
    "field_errors": field_errors,
    "field_value": field_value,
}
