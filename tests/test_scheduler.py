"""Tests for background command scheduling.

Verifies latest-request-wins delivery, cancellation of running children,
and the synchronous scheduler used by ``--sync``.
"""

from __future__ import annotations

import threading
import time
import unittest
from functools import partial

from pipepreview.runner import ExecutionResult, run_command
from pipepreview.runtime.scheduler import CommandCompletion, CommandScheduler, InlineCommandScheduler


def _wait_for_results(scheduler: CommandScheduler, count: int, timeout: float = 5.0) -> list[CommandCompletion]:
    deadline = time.monotonic() + timeout
    out: list[CommandCompletion] = []
    while time.monotonic() < deadline and len(out) < count:
        out.extend(scheduler.drain_results())
        time.sleep(0.01)
    return out


class CommandSchedulerTests(unittest.TestCase):
    def test_superseded_result_is_dropped(self) -> None:
        first_started = threading.Event()
        release = threading.Event()

        def run(command: str, on_spawn=None) -> ExecutionResult:
            if command == "slow":
                first_started.set()
                release.wait(5)
            return ExecutionResult(stdout=f"ran {command}")

        scheduler = CommandScheduler(run)
        try:
            scheduler.schedule(1, "slow")
            self.assertTrue(first_started.wait(5))
            scheduler.schedule(2, "fast")
            release.set()
            results = _wait_for_results(scheduler, 1)
            time.sleep(0.05)
            results.extend(scheduler.drain_results())
        finally:
            scheduler.shutdown()

        self.assertEqual([c.request.request_id for c in results], [2])
        self.assertEqual(results[0].result.stdout, "ran fast")

    def test_cancel_kills_running_child_and_drops_its_result(self) -> None:
        scheduler = CommandScheduler(partial(run_command, "/bin/sh", "-c", input_text=""))
        started = time.monotonic()
        scheduler.schedule(1, "sleep 5")
        time.sleep(0.1)
        scheduler.cancel(2)
        scheduler.shutdown(timeout=5.0)

        self.assertLess(time.monotonic() - started, 4.0)
        self.assertEqual(scheduler.drain_results(), [])

    def test_crashing_runner_becomes_error_result(self) -> None:
        def run(command: str, on_spawn=None) -> ExecutionResult:
            raise RuntimeError("boom")

        scheduler = CommandScheduler(run)
        try:
            scheduler.schedule(1, "anything")
            results = _wait_for_results(scheduler, 1)
        finally:
            scheduler.shutdown()

        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].result.stdout, "")
        self.assertIn("anything", results[0].result.stderr)


class InlineCommandSchedulerTests(unittest.TestCase):
    def test_runs_immediately_and_drains_once(self) -> None:
        scheduler = InlineCommandScheduler(lambda command: ExecutionResult(stdout=command.upper()))
        scheduler.schedule(1, "ls")
        results = scheduler.drain_results()
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].result.stdout, "LS")
        self.assertEqual(scheduler.drain_results(), [])

    def test_cancel_drops_older_results(self) -> None:
        scheduler = InlineCommandScheduler(lambda command: ExecutionResult(stdout=command))
        scheduler.schedule(1, "a")
        scheduler.cancel(2)
        self.assertEqual(scheduler.drain_results(), [])


if __name__ == "__main__":
    unittest.main()
