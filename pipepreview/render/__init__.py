"""Frame composition for the preview screen.

Builds the editor line, error banner, header, output rows, and footer as
styled strings, then joins them into one ANSI frame. Rendering never mutates
state; the theme arrives as an argument.
"""

from __future__ import annotations

from ..ansi import clip_ansi_line, display_width, fit_ansi_line, sanitize_output_line, style_with_ansi
from ..layout import ERROR_ROWS
from ..state import PreviewState
from ..ui_theme import UITheme
from ..widgets import LineEditor, Viewport

TITLE_TEXT = "Output"
SYNC_MARKER_TEXT = "running"
ERROR_PREFIX = "Error: "
INITIALIZING_ROWS: tuple[str, ...] = ("", "  Initializing...")


def _paint(text: str, sgr: str, theme: UITheme, faint: bool = False) -> str:
    style = sgr + (theme.faint if faint else "")
    if not style or not text:
        return text
    return f"{style}{text}{theme.reset}"


def editor_view(editor: LineEditor, width: int, focused: bool, theme: UITheme) -> str:
    """Render the prompt and command text, scrolled so the cursor stays visible."""
    prompt = f" {editor.prompt}"
    faint = not focused
    available = max(0, width - display_width(prompt))
    text, cursor_col = editor.visible_window(available)
    out = [_paint(prompt, theme.prompt, theme, faint)]
    if focused and theme.reverse:
        out.append(_paint(text[:cursor_col], theme.command_text, theme))
        out.append(f"{theme.reverse}{text[cursor_col : cursor_col + 1] or ' '}{theme.reset}")
        out.append(_paint(text[cursor_col + 1 :], theme.command_text, theme))
    else:
        out.append(_paint(text, theme.command_text, theme, faint))
    return "".join(out)


def error_message(stderr: str) -> str:
    """Collapse stderr to one banner line, noting how many lines were hidden."""
    lines = [sanitize_output_line(line).strip() for line in stderr.splitlines()]
    lines = [line for line in lines if line]
    if not lines:
        return ""
    if len(lines) == 1:
        return lines[0]
    return f"{lines[0]} (+{len(lines) - 1} more lines)"


def error_view(stderr: str, width: int, theme: UITheme) -> list[str]:
    """Padded one-line banner; blank and faint when there is no error."""
    message = error_message(stderr)
    if not message:
        return ["" for _ in range(ERROR_ROWS)]
    text = clip_ansi_line(ERROR_PREFIX + message, max(0, width - 2))
    return ["", " " + _paint(text, theme.error_text, theme), ""]


def header_view(width: int, faint: bool, running: bool, theme: UITheme) -> list[str]:
    """Boxed title joined to a horizontal rule, with a marker while a run is pending."""
    title = f" {TITLE_TEXT} "
    inner = len(title)
    rule_width = max(0, width - inner - 2)
    marker = f" {SYNC_MARKER_TEXT} " if running else ""
    if marker and rule_width >= len(marker) + 2:
        rule = _paint("─" * (rule_width - len(marker) - 1), theme.border, theme, faint)
        rule += _paint(marker, theme.sync_marker, theme, faint) + _paint("─", theme.border, theme, faint)
    else:
        rule = _paint("─" * rule_width, theme.border, theme, faint)
    pad = " " * rule_width
    return [
        _paint("┌" + "─" * inner + "┐", theme.border, theme, faint) + pad,
        _paint("│", theme.border, theme, faint)
        + _paint(title, theme.title, theme, faint)
        + _paint("├", theme.border, theme, faint)
        + rule,
        _paint("└" + "─" * inner + "┘", theme.border, theme, faint) + pad,
    ]


def footer_view(scroll_percent: float, width: int, faint: bool, theme: UITheme) -> list[str]:
    """Horizontal rule ending in a rounded box with the scroll percentage."""
    info = f" {scroll_percent * 100:3.0f}% "
    inner = len(info)
    rule_width = max(0, width - inner - 2)
    pad = " " * rule_width
    return [
        pad + _paint("╭" + "─" * inner + "╮", theme.border, theme, faint),
        _paint("─" * rule_width + "┤", theme.border, theme, faint)
        + _paint(info, theme.percent, theme, faint)
        + _paint("│", theme.border, theme, faint),
        pad + _paint("╰" + "─" * inner + "╯", theme.border, theme, faint),
    ]


def viewer_view(viewer: Viewport, faint: bool, theme: UITheme) -> list[str]:
    rows = [clip_ansi_line(line, viewer.width) for line in viewer.visible_lines()]
    if faint and theme.faint:
        rows = [style_with_ansi(row, theme.faint) for row in rows]
    return rows


def compose_frame(state: PreviewState, width: int, height: int, theme: UITheme) -> list[str]:
    """Return exactly ``height`` rows, each fitted to ``width`` columns.

    Every cell is written so a repaint never needs to clear the screen.
    """
    viewer = state.viewer
    if viewer is None:
        rows = list(INITIALIZING_ROWS)
    else:
        editing = state.editor_focused
        running = state.running or state.pending_since is not None
        rows = [editor_view(state.editor, width, editing, theme)]
        rows.extend(error_view(state.result.stderr, width, theme))
        rows.extend(header_view(width, editing, running, theme))
        rows.extend(viewer_view(viewer, editing, theme))
        rows.extend(footer_view(viewer.scroll_percent(), width, editing, theme))
    rows = rows[:height]
    rows.extend("" for _ in range(height - len(rows)))
    return [fit_ansi_line(row, width) for row in rows]


def frame_to_ansi(rows: list[str]) -> str:
    """Join frame rows into one write that repaints from the top-left corner."""
    body = "\r\n".join(f"{row}\033[0m" for row in rows)
    return f"\033[H{body}"


__all__ = [
    "ERROR_PREFIX",
    "INITIALIZING_ROWS",
    "SYNC_MARKER_TEXT",
    "TITLE_TEXT",
    "compose_frame",
    "editor_view",
    "error_message",
    "error_view",
    "footer_view",
    "frame_to_ansi",
    "header_view",
    "viewer_view",
]
