"""Single-line command editor widget.

Immutable value/cursor pair with readline-style editing keys.
Every edit returns a new editor so the reducer can compare before/after.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

DEFAULT_PROMPT = "| "


def _is_insertable(key: str) -> bool:
    # Named tokens ("LEFT", "MOUSE_WHEEL_UP:3:4") are longer than one character.
    return len(key) == 1 and key.isprintable()


@dataclass(frozen=True)
class LineEditor:
    """Current command text plus cursor position."""

    value: str = ""
    cursor: int = 0
    prompt: str = DEFAULT_PROMPT

    def insert(self, text: str) -> LineEditor:
        value = self.value[: self.cursor] + text + self.value[self.cursor :]
        return replace(self, value=value, cursor=self.cursor + len(text))

    def _word_start_before(self, pos: int) -> int:
        while pos > 0 and self.value[pos - 1].isspace():
            pos -= 1
        while pos > 0 and not self.value[pos - 1].isspace():
            pos -= 1
        return pos

    def _word_end_after(self, pos: int) -> int:
        n = len(self.value)
        while pos < n and self.value[pos].isspace():
            pos += 1
        while pos < n and not self.value[pos].isspace():
            pos += 1
        return pos

    def update(self, key: str) -> LineEditor:
        """Apply one key token and return the resulting editor."""
        value = self.value
        cursor = self.cursor
        if _is_insertable(key):
            return self.insert(key)
        if key == "BACKSPACE":
            if cursor == 0:
                return self
            return replace(self, value=value[: cursor - 1] + value[cursor:], cursor=cursor - 1)
        if key in {"DELETE", "CTRL_D"}:
            if cursor >= len(value):
                return self
            return replace(self, value=value[:cursor] + value[cursor + 1 :])
        if key in {"LEFT", "CTRL_B"}:
            return replace(self, cursor=max(0, cursor - 1))
        if key in {"RIGHT", "CTRL_F"}:
            return replace(self, cursor=min(len(value), cursor + 1))
        if key in {"HOME", "CTRL_A"}:
            return replace(self, cursor=0)
        if key in {"END", "CTRL_E"}:
            return replace(self, cursor=len(value))
        if key in {"ALT_LEFT", "CTRL_LEFT"}:
            return replace(self, cursor=self._word_start_before(cursor))
        if key in {"ALT_RIGHT", "CTRL_RIGHT"}:
            return replace(self, cursor=self._word_end_after(cursor))
        if key == "CTRL_U":
            return replace(self, value=value[cursor:], cursor=0)
        if key == "CTRL_K":
            return replace(self, value=value[:cursor])
        if key in {"CTRL_W", "ALT_BACKSPACE"}:
            start = self._word_start_before(cursor)
            return replace(self, value=value[:start] + value[cursor:], cursor=start)
        if key == "ALT_d":
            return replace(self, value=value[:cursor] + value[self._word_end_after(cursor) :])
        return self

    def visible_window(self, width: int) -> tuple[str, int]:
        """Return the slice of ``value`` that fits ``width`` and the cursor column in it.

        One column is reserved for the cursor cell past the end of the text.
        """
        if width <= 1:
            return "", 0
        start = max(0, self.cursor - (width - 1))
        return self.value[start : start + width - 1], self.cursor - start
