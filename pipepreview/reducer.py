"""Reactive core: fold one event into the preview state.

``reduce`` is the only place state changes. It routes keys by focus, freezes
the viewer while the editor is focused, detects command edits, and decides
when a run is requested or a finished run is applied. Side effects are
returned, never performed.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from .events import (
    CancelRun,
    CommandCompletedEvent,
    CopyToClipboard,
    Effect,
    Event,
    KeyEvent,
    Quit,
    ResizeEvent,
    RunCommand,
    TickEvent,
)
from .layout import viewer_geometry
from .runner import ExecutionResult
from .state import PreviewState
from .widgets import Viewport

logger = logging.getLogger(__name__)

TOGGLE_FOCUS_KEY = "TAB"
COPY_OUTPUT_KEY = "CTRL_O"
COPY_COMMAND_KEY = "CTRL_P"
QUIT_KEYS = frozenset({"ESC", "CTRL_Q", "CTRL_C"})


def reduce(state: PreviewState, event: Event, *, now: float = 0.0) -> tuple[PreviewState, list[Effect]]:
    """Return the next state and the effects the runtime should perform.

    ``now`` is a monotonic timestamp used only for time-based debouncing.
    """
    next_state, effects = _dispatch(state, event, now)
    return _track_scroll_offset(next_state), effects


def _dispatch(state: PreviewState, event: Event, now: float) -> tuple[PreviewState, list[Effect]]:
    if isinstance(event, KeyEvent):
        return _reduce_key(state, event.key, now)
    if isinstance(event, ResizeEvent):
        return _reduce_resize(state, event), []
    if isinstance(event, TickEvent):
        return _reduce_tick(state, event.now)
    if isinstance(event, CommandCompletedEvent):
        return _reduce_completion(state, event), []
    raise TypeError(f"unhandled event: {event!r}")


def _track_scroll_offset(state: PreviewState) -> PreviewState:
    """While the viewer is focused, remember its offset after any clamping."""
    if state.editor_focused or state.viewer is None:
        return state
    if state.last_scroll_offset == state.viewer.y_offset:
        return state
    return replace(state, last_scroll_offset=state.viewer.y_offset)


def _pin_viewer(state: PreviewState, viewer: Viewport | None) -> Viewport | None:
    if viewer is None or not state.editor_focused:
        return viewer
    return viewer.set_y_offset(state.last_scroll_offset)


def _reduce_key(state: PreviewState, key: str, now: float) -> tuple[PreviewState, list[Effect]]:
    if key in QUIT_KEYS:
        return replace(state, quitting=True), [Quit()]
    if key == COPY_OUTPUT_KEY:
        return state, [CopyToClipboard(text=state.result.stdout, label="output")]
    if key == COPY_COMMAND_KEY:
        return state, [CopyToClipboard(text=state.editor.value, label="command")]

    if key == TOGGLE_FOCUS_KEY:
        state = replace(state, focus=state.focus.toggled())
        return replace(state, viewer=_pin_viewer(state, state.viewer)), []

    if state.editor_focused:
        # The viewer sees nothing while editing; its offset stays pinned.
        state = replace(
            state,
            editor=state.editor.update(key),
            viewer=_pin_viewer(state, state.viewer),
        )
    elif state.viewer is not None:
        state = replace(state, viewer=state.viewer.update(key))
    return _reconcile_command(state, now)


def _reconcile_command(state: PreviewState, now: float) -> tuple[PreviewState, list[Effect]]:
    """Compare the editor value to the last seen one and react to a change."""
    current = state.editor.value
    if current == state.previous_command:
        return state, []
    state = replace(state, previous_command=current)

    if not current:
        request_id = state.request_id + 1
        result = ExecutionResult.identity(state.input_text)
        viewer = state.viewer.set_content(result.stdout) if state.viewer is not None else None
        state = replace(
            state,
            result=result,
            viewer=_pin_viewer(state, viewer),
            request_id=request_id,
            requested_command="",
            running=False,
            pending_since=None,
        )
        return state, [CancelRun(request_id=request_id)]

    if state.debounce_seconds > 0:
        return replace(state, pending_since=now), []
    return _request_run(state, current)


def _request_run(state: PreviewState, command: str) -> tuple[PreviewState, list[Effect]]:
    request_id = state.request_id + 1
    logger.debug("requesting run %d: %r", request_id, command)
    state = replace(
        state,
        request_id=request_id,
        requested_command=command,
        running=True,
        pending_since=None,
    )
    return state, [RunCommand(request_id=request_id, command=command)]


def _reduce_tick(state: PreviewState, now: float) -> tuple[PreviewState, list[Effect]]:
    if state.pending_since is None:
        return state, []
    if now - state.pending_since < state.debounce_seconds:
        return state, []
    return _request_run(state, state.editor.value)


def _reduce_resize(state: PreviewState, event: ResizeEvent) -> PreviewState:
    geometry = viewer_geometry(event.width, event.height)
    if state.viewer is None:
        viewer = Viewport(width=geometry.width, height=geometry.height).set_content(state.result.stdout)
    else:
        viewer = state.viewer.resize(geometry.width, geometry.height)
    return replace(state, viewer=_pin_viewer(state, viewer))


def _reduce_completion(state: PreviewState, event: CommandCompletedEvent) -> PreviewState:
    if event.request_id != state.request_id:
        logger.debug("discarding stale result for run %d: %r", event.request_id, event.command)
        return state
    viewer = state.viewer.set_content(event.result.stdout) if state.viewer is not None else None
    return replace(
        state,
        result=event.result,
        viewer=_pin_viewer(state, viewer),
        running=False,
    )


__all__ = [
    "COPY_COMMAND_KEY",
    "COPY_OUTPUT_KEY",
    "QUIT_KEYS",
    "TOGGLE_FOCUS_KEY",
    "reduce",
]
