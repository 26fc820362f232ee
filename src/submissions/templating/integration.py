"""Kida environment setup.

Creates a kida Environment from SubmissionsConfig and binds the built-in
form filters and the ``text_group`` directive, plus any user-registered
filters and globals. Build it once at startup and share it across requests;
request state lives in the field cache, not in the environment.
"""

import logging
from collections.abc import Callable
from typing import Any

from kida import ChoiceLoader, Environment, FileSystemLoader

from submissions.config import DEFAULT_CONFIG, SubmissionsConfig
from submissions.templating.filters import BUILTIN_FILTERS, BUILTIN_GLOBALS

logger = logging.getLogger("submissions.templating")


def create_environment(
    config: SubmissionsConfig | None = None,
    filters: dict[str, Callable[..., Any]] | None = None,
    globals_: dict[str, Any] | None = None,
) -> Environment:
    """Create a kida Environment from configuration.

    Supports multiple template directories via ``config.component_dirs``
    for partials and shared templates. With no ``template_dir`` the
    environment only renders ``from_string()`` templates.
    """
    cfg = config or DEFAULT_CONFIG
    dirs = [d for d in (cfg.template_dir, *cfg.component_dirs) if d is not None]
    loaders = [FileSystemLoader(str(d)) for d in dirs]

    env = Environment(
        loader=ChoiceLoader(loaders) if loaders else None,
        autoescape=cfg.autoescape,
        auto_reload=cfg.debug,
        trim_blocks=cfg.trim_blocks,
        lstrip_blocks=cfg.lstrip_blocks,
    )
    logger.debug("Template environment created with directories: %s", dirs)

    # Built-in filters (field_errors, field_value, attr)
    env.update_filters(BUILTIN_FILTERS)

    # User-defined filters (may override built-ins)
    if filters:
        env.update_filters(filters)

    for name, value in BUILTIN_GLOBALS.items():
        env.add_global(name, value)

    # User-defined globals
    for name, value in (globals_ or {}).items():
        env.add_global(name, value)

    return env
