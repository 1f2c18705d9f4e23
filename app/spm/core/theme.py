"""Theme management for the spm CLI.

Colors come from the ``[colors]`` table of the user configuration, with
every key optional and falling back to the defaults below.
"""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from rich.theme import Theme

logger = logging.getLogger(__name__)


class ThemeColors(BaseModel):
    """Color configuration for the spm CLI.

    All colors must be valid hex codes (#RRGGBB or #RGB).
    """

    model_config = ConfigDict(extra="forbid")

    # Base colors
    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"

    # Semantic colors
    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    # Tree entries
    directory: str = "#fe28a2"
    file_size: str = "#03b971"
    symlink: str = "#0ec1c8"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, v: object, info: Any) -> str:
        """Validate that all color values are valid hex codes."""
        if not isinstance(v, str):
            msg = f"{info.field_name}: color must be a string"
            raise ValueError(msg)
        color = v.strip()
        if not color.startswith("#"):
            msg = f"{info.field_name}: color must start with '#'"
            raise ValueError(msg)
        color_part = color[1:]
        if len(color_part) not in (3, 6):
            msg = f"{info.field_name}: color must be #RGB or #RRGGBB format"
            raise ValueError(msg)
        try:
            int(color_part, 16)
        except ValueError:
            msg = f"{info.field_name}: invalid hex color '{color}'"
            raise ValueError(msg) from None
        return color


def load_colors() -> ThemeColors:
    """Load theme colors from the user configuration.

    A missing or invalid configuration falls back to the default colors;
    the CLI reports configuration errors separately when it loads them.
    """
    from spm.core.config import ConfigError, load_config

    try:
        return load_config().colors
    except ConfigError as e:
        logger.warning("Using default colors: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Convert ThemeColors to a Rich Theme.

    Args:
        colors: ThemeColors instance to convert. If None, loads colors from
            the user configuration.

    Returns:
        Rich Theme instance configured with the color scheme.
    """
    if colors is None:
        colors = load_colors()

    styles: dict[str, str] = {
        "text": colors.text,
        "muted": colors.muted,
        "header": colors.header,
        "border": colors.border,
        "success": colors.success,
        "warning": colors.warning,
        "error": f"bold {colors.error}",
        "info": colors.info,
        "bold_header": f"bold {colors.header}",
        "dim": colors.muted,
        "tree.dir": f"bold {colors.directory}",
        "tree.size": colors.file_size,
        "tree.link": colors.symlink,
    }

    return Theme(styles)


# Module-level cached theme instance
_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Get the Rich theme, loading and caching it if necessary."""
    global _cached_theme
    if _cached_theme is None:
        _cached_theme = get_rich_theme()
    return _cached_theme
