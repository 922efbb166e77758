"""Main interactive event loop for the terminal UI.

Turns terminal size changes, finished runs, keys, and idle ticks into events,
folds them through ``reduce``, performs the returned effects, and repaints.
This loop is intentionally wiring-heavy; feature logic lives in the reducer.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..events import (
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
from ..input import read_key
from ..reducer import reduce
from ..state import PreviewState
from .scheduler import CommandCompletion
from .terminal import TerminalController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Input poll timeouts controlling interactive loop behavior."""

    idle_poll_ms: int = 120
    # Shorter while a run is in flight so its result shows up promptly.
    busy_poll_ms: int = 15


@dataclass(frozen=True)
class RuntimeLoopCallbacks:
    """Injected operations used by ``run_main_loop``.

    Keeping the loop callback-driven isolates side effects outside the core
    event loop and makes behavior easier to unit test.
    """

    schedule_command: Callable[[int, str], None]
    cancel_command: Callable[[int], None]
    drain_completions: Callable[[], list[CommandCompletion]]
    copy_to_clipboard: Callable[[str, str], None]
    render: Callable[[PreviewState, int, int], None]


def apply_effects(effects: list[Effect], callbacks: RuntimeLoopCallbacks) -> None:
    """Perform reducer effects in order."""
    for effect in effects:
        if isinstance(effect, RunCommand):
            callbacks.schedule_command(effect.request_id, effect.command)
        elif isinstance(effect, CancelRun):
            callbacks.cancel_command(effect.request_id)
        elif isinstance(effect, CopyToClipboard):
            callbacks.copy_to_clipboard(effect.text, effect.label)
        elif isinstance(effect, Quit):
            logger.debug("quit requested")
        else:
            raise TypeError(f"unhandled effect: {effect!r}")


def run_main_loop(
    state: PreviewState,
    terminal: TerminalController,
    input_fd: int,
    timing: RuntimeLoopTiming,
    callbacks: RuntimeLoopCallbacks,
) -> PreviewState:
    """Run the interactive loop until a quit key and return the final state.

    Each iteration reports resizes, applies finished runs, repaints when the
    state changed, then waits for one key (or an idle tick).
    """
    last_size: tuple[int, int] | None = None
    rendered_state: PreviewState | None = None

    def dispatch(current: PreviewState, event: Event, now: float) -> PreviewState:
        next_state, effects = reduce(current, event, now=now)
        apply_effects(effects, callbacks)
        return next_state

    with terminal.raw_mode():
        while True:
            now = time.monotonic()
            size = terminal.size()
            if size != last_size:
                last_size = size
                state = dispatch(state, ResizeEvent(width=size[0], height=size[1]), now)
                rendered_state = None

            for completion in callbacks.drain_completions():
                event = CommandCompletedEvent(
                    request_id=completion.request.request_id,
                    command=completion.request.command,
                    result=completion.result,
                )
                state = dispatch(state, event, now)

            if state is not rendered_state:
                callbacks.render(state, size[0], size[1])
                rendered_state = state

            waiting = state.running or state.pending_since is not None
            timeout_ms = timing.busy_poll_ms if waiting else timing.idle_poll_ms
            key = read_key(input_fd, timeout_ms=timeout_ms)
            now = time.monotonic()
            if key == "":
                state = dispatch(state, TickEvent(now=now), now)
                continue
            state = dispatch(state, KeyEvent(key=key), now)
            if state.quitting:
                break
    return state
