"""Preview state threaded through the reducer.

One immutable snapshot holds the captured input, the current result, both
widgets, focus, and the bookkeeping that decides when a run is due.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .runner import ExecutionResult
from .widgets import LineEditor, Viewport


class FocusState(Enum):
    EDITOR = "editor"
    VIEWER = "viewer"

    def toggled(self) -> FocusState:
        return FocusState.VIEWER if self is FocusState.EDITOR else FocusState.EDITOR


@dataclass(frozen=True)
class PreviewState:
    input_text: str
    result: ExecutionResult
    editor: LineEditor = field(default_factory=LineEditor)
    # ``None`` until the first resize reports the terminal size.
    viewer: Viewport | None = None
    focus: FocusState = FocusState.EDITOR
    previous_command: str = ""
    last_scroll_offset: int = 0
    request_id: int = 0
    requested_command: str = ""
    running: bool = False
    debounce_seconds: float = 0.0
    pending_since: float | None = None
    quitting: bool = False

    @property
    def editor_focused(self) -> bool:
        return self.focus is FocusState.EDITOR


def initial_state(input_text: str, *, debounce_seconds: float = 0.0) -> PreviewState:
    """Build the starting state: empty command, identity preview, editor focused."""
    return PreviewState(
        input_text=input_text,
        result=ExecutionResult.identity(input_text),
        debounce_seconds=max(0.0, debounce_seconds),
    )
