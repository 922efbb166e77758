"""UI theme definitions and selection helpers.

Themes are ANSI palettes for the editor, error banner, and output chrome.
A theme is resolved once at startup and passed into rendering.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    reset: str
    faint: str
    reverse: str
    prompt: str
    command_text: str
    error_text: str
    border: str
    title: str
    percent: str
    sync_marker: str


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    faint="\033[2m",
    reverse="\033[7m",
    prompt="\033[1;38;5;81m",
    command_text="\033[38;5;252m",
    error_text="\033[38;5;203m",
    border="\033[38;5;245m",
    title="\033[1;38;5;81m",
    percent="\033[38;5;229m",
    sync_marker="\033[38;5;214m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reset="\033[0m",
    faint="\033[2m",
    reverse="\033[7m",
    prompt="\033[1;38;5;45m",
    command_text="\033[38;5;153m",
    error_text="\033[38;5;209m",
    border="\033[38;5;31m",
    title="\033[1;38;5;45m",
    percent="\033[38;5;117m",
    sync_marker="\033[38;5;215m",
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    faint="",
    reverse="",
    prompt="",
    command_text="",
    error_text="",
    border="",
    title="",
    percent="",
    sync_marker="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
