"""Frame geometry shared by the reducer and the renderer.

The chrome around the output viewer has fixed heights; the renderer is
required to produce exactly these many rows for each fragment.
"""

from __future__ import annotations

from dataclasses import dataclass

EDITOR_ROWS = 1
ERROR_ROWS = 3
HEADER_ROWS = 3
FOOTER_ROWS = 3
CHROME_ROWS = EDITOR_ROWS + ERROR_ROWS + HEADER_ROWS + FOOTER_ROWS


@dataclass(frozen=True)
class ViewportGeometry:
    width: int
    height: int


def viewer_geometry(terminal_width: int, terminal_height: int) -> ViewportGeometry:
    """Size of the output viewer once editor, error, header and footer rows are taken."""
    return ViewportGeometry(
        width=max(1, terminal_width),
        height=max(1, terminal_height - CHROME_ROWS),
    )
