"""Tests for the interactive runtime loop wiring.

Drives ``run_main_loop`` with a fake terminal and scripted keys to verify
event dispatch, effect handling, repaint decisions, and poll timeouts.
"""

from __future__ import annotations

from contextlib import contextmanager
import unittest
from unittest import mock

from pipepreview.events import CancelRun, CopyToClipboard, Quit, RunCommand
from pipepreview.runner import ExecutionResult
from pipepreview.runtime import RuntimeLoopCallbacks, RuntimeLoopTiming, run_main_loop
from pipepreview.runtime.loop import apply_effects
from pipepreview.runtime.scheduler import InlineCommandScheduler
from pipepreview.state import initial_state


class _FakeTerminal:
    def __init__(self, size: tuple[int, int] = (40, 20)) -> None:
        self.current_size = size
        self.raw_mode_entered = 0

    @contextmanager
    def raw_mode(self):
        self.raw_mode_entered += 1
        yield

    def size(self) -> tuple[int, int]:
        return self.current_size


def _callbacks(scheduler, **overrides) -> RuntimeLoopCallbacks:
    values = dict(
        schedule_command=scheduler.schedule,
        cancel_command=scheduler.cancel,
        drain_completions=scheduler.drain_results,
        copy_to_clipboard=mock.Mock(),
        render=mock.Mock(),
    )
    values.update(overrides)
    return RuntimeLoopCallbacks(**values)


class RunMainLoopTests(unittest.TestCase):
    def test_typed_command_runs_and_final_result_is_returned(self) -> None:
        scheduler = InlineCommandScheduler(lambda command: ExecutionResult(stdout=f"ran {command}"))
        callbacks = _callbacks(scheduler)
        terminal = _FakeTerminal()

        with mock.patch("pipepreview.runtime.loop.read_key", side_effect=["l", "s", "", "ESC"]):
            final = run_main_loop(initial_state("in\n"), terminal, 0, RuntimeLoopTiming(), callbacks)

        self.assertTrue(final.quitting)
        self.assertEqual(final.editor.value, "ls")
        self.assertEqual(final.result.stdout, "ran ls")
        self.assertEqual(terminal.raw_mode_entered, 1)
        # Initial frame, then one repaint per applied edit and result.
        self.assertGreaterEqual(callbacks.render.call_count, 3)
        width, height = callbacks.render.call_args.args[1:]
        self.assertEqual((width, height), (40, 20))

    def test_unchanged_state_is_not_repainted(self) -> None:
        scheduler = InlineCommandScheduler(lambda command: ExecutionResult(stdout=command))
        callbacks = _callbacks(scheduler)

        with mock.patch("pipepreview.runtime.loop.read_key", side_effect=["", "", "", "CTRL_Q"]):
            run_main_loop(initial_state("in"), _FakeTerminal(), 0, RuntimeLoopTiming(), callbacks)

        callbacks.render.assert_called_once()

    def test_poll_timeout_is_short_while_a_run_is_outstanding(self) -> None:
        never_completes = mock.Mock()
        never_completes.drain_results.return_value = []
        callbacks = _callbacks(never_completes)
        timeouts: list[int] = []
        keys = iter(["x", "", "ESC"])

        def fake_read_key(_fd: int, timeout_ms: int | None = None) -> str:
            timeouts.append(timeout_ms)
            return next(keys)

        timing = RuntimeLoopTiming(idle_poll_ms=100, busy_poll_ms=5)
        with mock.patch("pipepreview.runtime.loop.read_key", side_effect=fake_read_key):
            run_main_loop(initial_state("in"), _FakeTerminal(), 0, timing, callbacks)

        self.assertEqual(timeouts, [100, 5, 5])
        never_completes.schedule.assert_called_once_with(1, "x")

    def test_resize_is_reported_to_render(self) -> None:
        scheduler = InlineCommandScheduler(lambda command: ExecutionResult(stdout=command))
        callbacks = _callbacks(scheduler)
        terminal = _FakeTerminal(size=(40, 20))
        keys = iter(["", "ESC"])

        def fake_read_key(_fd: int, timeout_ms: int | None = None) -> str:
            terminal.current_size = (60, 30)
            return next(keys)

        with mock.patch("pipepreview.runtime.loop.read_key", side_effect=fake_read_key):
            final = run_main_loop(initial_state("in"), terminal, 0, RuntimeLoopTiming(), callbacks)

        self.assertEqual(callbacks.render.call_args.args[1:], (60, 30))
        self.assertEqual(final.viewer.width, 60)


class ApplyEffectsTests(unittest.TestCase):
    def test_effects_map_to_callbacks(self) -> None:
        scheduler = mock.Mock()
        callbacks = _callbacks(scheduler)

        apply_effects(
            [
                RunCommand(request_id=1, command="ls"),
                CancelRun(request_id=2),
                CopyToClipboard(text="out", label="output"),
                Quit(),
            ],
            callbacks,
        )

        scheduler.schedule.assert_called_once_with(1, "ls")
        scheduler.cancel.assert_called_once_with(2)
        callbacks.copy_to_clipboard.assert_called_once_with("out", "output")

    def test_unknown_effect_is_rejected(self) -> None:
        with self.assertRaises(TypeError):
            apply_effects([object()], _callbacks(mock.Mock()))


if __name__ == "__main__":
    unittest.main()
