"""Submissions — validated form and API submissions for Python web apps.

Decodes request bodies into all-optional submission values, runs every
field's validators, keeps a per-request field cache for re-rendering forms
with inline errors, and answers API clients with a structured
success-or-validation-errors payload.

Basic usage::

    from submissions import create_and_save, to_response

    async def create_post(request):
        outcome = await create_and_save(request, Post, repository)
        return to_response(outcome, created=True)

Rendering a form (kida)::

    from submissions import create_environment, populate_fields

    env = create_environment()
    populate_fields(Post)
    env.from_string('{{ text_group("title") }}').render({})
"""

__version__ = "0.1.0"
__all__ = [
    "Accepted",
    "ConfigurationError",
    "CreateDecodeError",
    "Field",
    "FieldCache",
    "FieldEntry",
    "FieldState",
    "HTTPError",
    "Mode",
    "Rejected",
    "Response",
    "Submission",
    "SubmissionValidationError",
    "SubmissionsConfig",
    "SubmissionsError",
    "Submittable",
    "ValidationResult",
    "create_and_save",
    "create_environment",
    "create_valid",
    "decode_submission",
    "field_cache",
    "populate_fields",
    "promote_errors",
    "request_scope",
    "to_response",
    "update_and_save",
    "update_valid",
    "validate_submission",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import submissions`` fast while providing a clean top-level API.
    """
    if name in ("Field", "FieldEntry", "Mode", "Submission", "ValidationResult", "validate_submission"):
        from submissions import validation as _validation

        return getattr(_validation, name)

    if name in ("FieldCache", "FieldState", "field_cache", "populate_fields", "request_scope"):
        from submissions import cache as _cache

        return getattr(_cache, name)

    if name in (
        "Submittable",
        "create_and_save",
        "create_valid",
        "promote_errors",
        "update_and_save",
        "update_valid",
    ):
        from submissions import lifecycle as _lifecycle

        return getattr(_lifecycle, name)

    if name in ("Accepted", "Rejected"):
        from submissions import returns as _returns

        return getattr(_returns, name)

    if name == "to_response":
        from submissions.responses import to_response

        return to_response

    if name == "Response":
        from submissions.http.response import Response

        return Response

    if name == "decode_submission":
        from submissions.http.forms import decode_submission

        return decode_submission

    if name == "create_environment":
        from submissions.templating.integration import create_environment

        return create_environment

    if name == "SubmissionsConfig":
        from submissions.config import SubmissionsConfig

        return SubmissionsConfig

    if name in (
        "ConfigurationError",
        "CreateDecodeError",
        "HTTPError",
        "SubmissionValidationError",
        "SubmissionsError",
    ):
        from submissions import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
