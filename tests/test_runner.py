"""Tests for shell command execution against captured input.

Runs real ``/bin/sh`` children to verify stdin feeding, output capture,
failure folding into stderr, and process cleanup.
"""

from __future__ import annotations

import subprocess
import time
import unittest

from pipepreview.runner import ExecutionResult, decode_output, kill_process_group, run_command

SHELL = "/bin/sh"


class RunCommandTests(unittest.TestCase):
    def test_command_filters_input(self) -> None:
        result = run_command(SHELL, "-c", "grep b", "a\nb\nc\n")
        self.assertEqual(result, ExecutionResult(stdout="b\n", stderr=""))

    def test_failure_without_output_reports_exit_status(self) -> None:
        result = run_command(SHELL, "-c", "false", "x")
        self.assertEqual(result.stdout, "")
        self.assertEqual(result.stderr, "exit status 1")

    def test_failure_keeps_partial_stdout_and_real_stderr(self) -> None:
        result = run_command(SHELL, "-c", "echo out; echo err >&2; exit 3", "")
        self.assertEqual(result.stdout, "out\n")
        self.assertEqual(result.stderr, "err\n")

    def test_line_count_matches_input_newlines(self) -> None:
        result = run_command(SHELL, "-c", "wc -l", "one\ntwo\nthree\n")
        self.assertEqual(result.stdout.strip(), "3")

    def test_missing_shell_is_reported_as_stderr(self) -> None:
        result = run_command("/nonexistent/shell", "-c", "true", "")
        self.assertEqual(result.stdout, "")
        self.assertTrue(result.stderr.startswith("failed to start /nonexistent/shell:"))

    def test_empty_command_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            run_command(SHELL, "-c", "", "input")

    def test_child_is_reaped_before_returning(self) -> None:
        spawned: list[subprocess.Popen] = []
        run_command(SHELL, "-c", "cat", "abc", on_spawn=spawned.append)
        self.assertEqual(len(spawned), 1)
        self.assertEqual(spawned[0].returncode, 0)

    def test_killed_run_reports_signal(self) -> None:
        started = time.monotonic()
        result = run_command(SHELL, "-c", "sleep 5", "", on_spawn=kill_process_group)
        self.assertLess(time.monotonic() - started, 3.0)
        self.assertEqual(result.stderr, "signal: SIGKILL")


class HelperTests(unittest.TestCase):
    def test_identity_result_is_the_input(self) -> None:
        self.assertEqual(ExecutionResult.identity("x\n"), ExecutionResult(stdout="x\n", stderr=""))

    def test_decode_output_replaces_invalid_utf8(self) -> None:
        self.assertEqual(decode_output(b"ok\xff"), "ok�")
        self.assertEqual(decode_output(None), "")


if __name__ == "__main__":
    unittest.main()
