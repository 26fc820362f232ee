"""Kida integration for submission forms."""

from submissions.templating.filters import field_errors, field_value, text_group
from submissions.templating.integration import create_environment

__all__ = ["create_environment", "field_errors", "field_value", "text_group"]
