"""ANSI-aware text measurement and line shaping utilities.

Provides clipping, padding, and sanitizing that preserve color sequences.
These helpers keep the frame aligned when command output carries colors.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
# OSC payloads (titles, hyperlinks) terminated by BEL or ST.
_OSC_RE = re.compile(r"\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)?")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b-\x1a\x1c-\x1f\x7f]")
TAB_STOP = 8


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(text: str) -> int:
    """Return the display width of ``text`` ignoring escape sequences."""
    col = 0
    for ch in ANSI_ESCAPE_RE.sub("", text):
        col += char_display_width(ch, col)
    return col


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    ANSI escape sequences are preserved verbatim and do not count toward width.
    Tabs are expanded into spaces so clipping aligns with rendered terminal cells.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n and col < max_cols:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch, col)
        if ch == "\t":
            if col + w > max_cols:
                out.append(" " * (max_cols - col))
                break
            out.append(" " * w)
            col += w
            i += 1
            continue
        if col + w > max_cols:
            break
        out.append(ch)
        col += w
        i += 1

    return "".join(out)


def fit_ansi_line(text: str, width: int) -> str:
    """Clip ``text`` to ``width`` columns and right-pad it with spaces."""
    clipped = clip_ansi_line(text, width)
    return clipped + " " * max(0, width - display_width(clipped))


def _strip_controls(text: str) -> str:
    # Lone ESC bytes here never started a recognized sequence.
    return _CONTROL_CHARS_RE.sub("", text).replace("\x1b", "")


def sanitize_output_line(line: str) -> str:
    """Strip escape sequences that would move the cursor or clear the screen.

    SGR (color/style) sequences survive so ``grep --color=always`` and friends
    still render; everything else, including stray control bytes, is dropped.
    """
    line = _OSC_RE.sub("", line)
    out: list[str] = []
    pos = 0
    for match in ANSI_ESCAPE_RE.finditer(line):
        out.append(_strip_controls(line[pos : match.start()]))
        if match.group(0).endswith("m"):
            out.append(match.group(0))
        pos = match.end()
    out.append(_strip_controls(line[pos:]))
    return "".join(out)


def split_output_lines(text: str) -> list[str]:
    """Split captured output into sanitized display lines."""
    return [sanitize_output_line(line) for line in text.splitlines()]


def style_with_ansi(text: str, sgr: str) -> str:
    """Apply ``sgr`` to ``text`` without losing it at embedded resets."""
    if not text or not sgr:
        return text
    params = sgr[2:-1]
    # Keep the style active even when the text contains internal resets.
    return sgr + text.replace("\033[0m", f"\033[0;{params}m").replace("\033[m", f"\033[0;{params}m") + "\033[0m"
