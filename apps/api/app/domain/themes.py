"""Admin theme registry."""

import logging

logger = logging.getLogger(__name__)

DEFAULT_THEME = "default"

ADMIN_THEMES: dict[str, str] = {
    DEFAULT_THEME: "tanam-light-theme",
    "light": "tanam-light-theme",
    "dark": "tanam-dark-theme",
}


def is_known_theme(name: object) -> bool:
    return isinstance(name, str) and name in ADMIN_THEMES


def resolve_admin_theme(name: object) -> str:
    """Return the theme definition for ``name``, falling back to the default theme."""
    if is_known_theme(name):
        return ADMIN_THEMES[name]
    if name is not None:
        logger.info("theme.unrecognized fallback=%s", DEFAULT_THEME)
    return ADMIN_THEMES[DEFAULT_THEME]
