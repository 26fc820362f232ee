"""Response negotiation — maps submission outcomes to Response objects.

isinstance-based dispatch, no magic, fully predictable:

1. ``Accepted``  -> 200 (201 when *created*), application/json
2. ``Rejected``  -> 422, application/json with the validation payload,
                    or 422 text/html re-rendering *template* when given
"""

from __future__ import annotations

import json as json_module
from typing import TYPE_CHECKING, Any

from submissions.cache import FieldCache, field_cache
from submissions.errors import ConfigurationError
from submissions.http.response import Response
from submissions.returns import Accepted, Rejected

if TYPE_CHECKING:
    from kida import Environment


def _json_response(payload: Any, *, status: int) -> Response:
    return Response(
        body=json_module.dumps(payload, default=str),
        status=status,
        content_type="application/json; charset=utf-8",
    )


def to_response(
    outcome: Accepted[Any] | Rejected,
    *,
    created: bool = False,
    kida_env: Environment | None = None,
    template: str | None = None,
    fields: FieldCache | None = None,
    retarget: str | None = None,
    **context: Any,
) -> Response:
    """Convert a submission outcome to a Response.

    Args:
        outcome: The value returned by ``promote_errors()``.
        created: Answer an ``Accepted`` outcome with 201 instead of 200.
        kida_env: Environment for HTML re-rendering of rejected forms.
        template: Template to re-render for a ``Rejected`` outcome. JSON
            is returned when omitted.
        fields: Field cache passed to the template as ``fields``. Defaults
            to the current request's.
        retarget: Optional ``HX-Retarget`` header value for htmx forms.
        **context: Extra template context.

    Usage::

        outcome = await create_and_save(request, Post, repo)
        return to_response(outcome, created=True)

        # HTML form
        return to_response(outcome, kida_env=env, template="posts/new.html")
    """
    match outcome:
        case Accepted():
            return _json_response(outcome.to_dict(), status=201 if created else 200)
        case Rejected() if template is None:
            return _json_response(outcome.to_dict(), status=422)
        case Rejected():
            if kida_env is None:
                msg = "Re-rendering a rejected form requires a kida Environment."
                raise ConfigurationError(msg)
            tmpl = kida_env.get_template(template)
            html = tmpl.render({
                **context,
                "fields": fields if fields is not None else field_cache(),
                "errors": outcome.errors,
                "reason": outcome.error.reason,
            })
            response = Response(body=html, status=422)
            if retarget is not None:
                response = response.with_hx_retarget(retarget)
            return response
        case _:
            msg = f"Cannot convert {type(outcome).__name__} to a response. Expected Accepted or Rejected."
            raise TypeError(msg)
