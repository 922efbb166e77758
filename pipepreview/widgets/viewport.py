"""Scrollable output region widget.

Holds sanitized output lines, a fixed geometry, and a vertical offset.
Offsets are always clamped so the last page never scrolls past the content.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from ..ansi import split_output_lines

MOUSE_WHEEL_DELTA = 3


@dataclass(frozen=True)
class Viewport:
    width: int
    height: int
    lines: tuple[str, ...] = ()
    y_offset: int = 0

    @property
    def max_y_offset(self) -> int:
        return max(0, len(self.lines) - self.height)

    def set_content(self, text: str) -> Viewport:
        """Replace content, keeping the offset when the new content allows it."""
        updated = replace(self, lines=tuple(split_output_lines(text)))
        return updated.set_y_offset(self.y_offset)

    def set_y_offset(self, offset: int) -> Viewport:
        clamped = max(0, min(offset, max(0, len(self.lines) - self.height)))
        if clamped == self.y_offset:
            return self
        return replace(self, y_offset=clamped)

    def resize(self, width: int, height: int) -> Viewport:
        resized = replace(self, width=max(1, width), height=max(1, height))
        return resized.set_y_offset(self.y_offset)

    def scroll_by(self, delta: int) -> Viewport:
        return self.set_y_offset(self.y_offset + delta)

    def scroll_percent(self) -> float:
        """Fraction of the scrollable range above the viewport, 1.0 when it all fits."""
        if self.height >= len(self.lines):
            return 1.0
        percent = self.y_offset / (len(self.lines) - self.height)
        return max(0.0, min(1.0, percent))

    def visible_lines(self) -> list[str]:
        """Return exactly ``height`` rows, padding past the end with blanks."""
        rows = list(self.lines[self.y_offset : self.y_offset + self.height])
        rows.extend("" for _ in range(self.height - len(rows)))
        return rows

    def update(self, key: str) -> Viewport:
        """Apply one navigation key or mouse-wheel token."""
        half_page = max(1, self.height // 2)
        if key in {"DOWN", "j"}:
            return self.scroll_by(1)
        if key in {"UP", "k"}:
            return self.scroll_by(-1)
        if key in {"PGDN", "f", " ", "CTRL_F"}:
            return self.scroll_by(self.height)
        if key in {"PGUP", "b", "CTRL_B"}:
            return self.scroll_by(-self.height)
        if key in {"d", "CTRL_D"}:
            return self.scroll_by(half_page)
        if key in {"u", "CTRL_U"}:
            return self.scroll_by(-half_page)
        if key in {"HOME", "g"}:
            return self.set_y_offset(0)
        if key in {"END", "G"}:
            return self.set_y_offset(self.max_y_offset)
        if key.startswith("MOUSE_WHEEL_DOWN:"):
            return self.scroll_by(MOUSE_WHEEL_DELTA)
        if key.startswith("MOUSE_WHEEL_UP:"):
            return self.scroll_by(-MOUSE_WHEEL_DELTA)
        return self
