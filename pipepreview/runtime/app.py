"""Runtime composition layer for pipepreview.

Opens the controlling terminal, builds the initial state, wires the command
scheduler, clipboard, and renderer into the loop, and returns the final result.
"""

from __future__ import annotations

import logging
import os
import termios
from functools import partial

from ..clipboard import ClipboardWriter
from ..config import RuntimeConfig
from ..render import compose_frame, frame_to_ansi
from ..runner import ExecutionResult, run_command
from ..state import PreviewState, initial_state
from ..ui_theme import resolve_theme
from .loop import RuntimeLoopCallbacks, RuntimeLoopTiming, run_main_loop
from .scheduler import CommandScheduler, InlineCommandScheduler
from .terminal import TerminalController, TerminalStartError, open_controlling_tty

logger = logging.getLogger(__name__)


def run_app(input_text: str, config: RuntimeConfig) -> ExecutionResult:
    """Run the interactive preview over ``input_text`` and return the result shown at quit.

    Raises ``TerminalStartError`` when the controlling terminal cannot be opened
    or its attributes read. Errors raised once the loop runs propagate unchanged.
    """
    try:
        tty_fd = open_controlling_tty()
    except OSError as exc:
        raise TerminalStartError(str(exc)) from exc
    try:
        try:
            terminal = TerminalController(tty_fd, tty_fd)
        except (OSError, termios.error) as exc:
            raise TerminalStartError(str(exc)) from exc
        final_state = run_preview(input_text, config, terminal, tty_fd)
    finally:
        os.close(tty_fd)
    return final_state.result


def run_preview(
    input_text: str,
    config: RuntimeConfig,
    terminal: TerminalController,
    input_fd: int,
) -> PreviewState:
    """Wire subsystems around ``terminal`` and run the loop to completion."""
    theme = resolve_theme(config.theme, no_color=config.no_color)
    run = partial(run_command, config.shell, config.invoke_flag, input_text=input_text)
    scheduler = InlineCommandScheduler(run) if config.synchronous else CommandScheduler(run)
    clipboard = ClipboardWriter()
    logger.info(
        "starting preview: %d chars of input, shell=%s %s, synchronous=%s",
        len(input_text),
        config.shell,
        config.invoke_flag,
        config.synchronous,
    )

    def render(state: PreviewState, width: int, height: int) -> None:
        terminal.write(frame_to_ansi(compose_frame(state, width, height, theme)))

    callbacks = RuntimeLoopCallbacks(
        schedule_command=scheduler.schedule,
        cancel_command=scheduler.cancel,
        drain_completions=scheduler.drain_results,
        copy_to_clipboard=clipboard.copy,
        render=render,
    )
    state = initial_state(input_text, debounce_seconds=config.debounce_seconds)
    try:
        return run_main_loop(state, terminal, input_fd, RuntimeLoopTiming(), callbacks)
    finally:
        scheduler.shutdown()
        clipboard.shutdown()
