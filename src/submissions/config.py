"""Submissions configuration.

SubmissionsConfig is a frozen dataclass — immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path

from submissions.errors import DEFAULT_REASON


@dataclass(frozen=True, slots=True)
class SubmissionsConfig:
    """Submissions configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = SubmissionsConfig(required_message="Please fill this in")
    """

    # Validation
    required_message: str = "This field is required"
    reason: str = DEFAULT_REASON
    blank_is_absent: bool = True  # Blank form strings decode as missing values

    # Templates
    template_dir: str | Path | None = "templates"
    component_dirs: tuple[str | Path, ...] = ()  # Additional template directories (e.g. partials)
    autoescape: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True
    debug: bool = False  # Reload templates on change


DEFAULT_CONFIG = SubmissionsConfig()
