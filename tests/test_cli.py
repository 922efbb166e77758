"""CLI validation, help, and output-flushing behavior tests.

Verifies how ``pipepreview.cli.main`` treats help requests, terminal stdin,
terminal startup failures, and the final result it writes on exit.
"""

from __future__ import annotations

import io
import os
import sys
import unittest
from unittest import mock

from pipepreview import cli
from pipepreview.config import RuntimeConfig
from pipepreview.runner import ExecutionResult
from pipepreview.runtime.terminal import TerminalStartError


def _fake_stdin(data: bytes) -> mock.Mock:
    stdin = mock.Mock()
    stdin.fileno.return_value = 0
    stdin.buffer.read.return_value = data
    return stdin


class CliHelpTests(unittest.TestCase):
    def test_help_prints_usage_to_stdout_and_skips_ui(self) -> None:
        stdout = io.StringIO()
        with mock.patch.object(sys, "stdout", stdout), mock.patch("pipepreview.cli.run_app") as run_app:
            cli.main(["--help"])

        run_app.assert_not_called()
        text = stdout.getvalue()
        self.assertIn("flags:", text)
        self.assertIn("--debounce-ms DEBOUNCE_MS", text)
        self.assertIn("keybinds:", text)

    def test_negative_debounce_is_a_usage_error(self) -> None:
        with mock.patch.object(sys, "stderr", io.StringIO()):
            with self.assertRaises(SystemExit) as raised:
                cli.main(["--debounce-ms", "-5"])
        self.assertEqual(raised.exception.code, 2)


class CliStdinValidationTests(unittest.TestCase):
    def test_terminal_stdin_prints_usage_and_exits_without_ui(self) -> None:
        stderr = io.StringIO()
        with mock.patch.object(sys, "stdin", _fake_stdin(b"")), mock.patch.object(sys, "stderr", stderr), mock.patch(
            "pipepreview.cli.stdin_is_pipe", return_value=False
        ), mock.patch("pipepreview.cli.run_app") as run_app:
            with self.assertRaises(SystemExit) as raised:
                cli.main([])

        self.assertEqual(raised.exception.code, 2)
        run_app.assert_not_called()
        self.assertTrue(stderr.getvalue().startswith("not a valid pipe\n"))
        self.assertIn("keybinds:", stderr.getvalue())

    def test_stdin_is_pipe_for_real_pipe(self) -> None:
        read_fd, write_fd = os.pipe()
        try:
            self.assertTrue(cli.stdin_is_pipe(read_fd))
        finally:
            os.close(read_fd)
            os.close(write_fd)


class CliRunTests(unittest.TestCase):
    def test_input_is_previewed_and_final_result_flushed(self) -> None:
        stdout = io.StringIO()
        stderr = io.StringIO()
        config = RuntimeConfig(shell="/bin/sh")
        with mock.patch.object(sys, "stdin", _fake_stdin("héllo\n".encode("utf-8"))), mock.patch.object(
            sys, "stdout", stdout
        ), mock.patch.object(sys, "stderr", stderr), mock.patch(
            "pipepreview.cli.stdin_is_pipe", return_value=True
        ), mock.patch(
            "pipepreview.cli.build_runtime_config", return_value=config
        ) as build_config, mock.patch(
            "pipepreview.cli.run_app", return_value=ExecutionResult(stdout="out\n", stderr="err\n")
        ) as run_app:
            cli.main(["--theme", "ocean", "--sync", "--debounce-ms", "150"])

        run_app.assert_called_once_with("héllo\n", config)
        build_config.assert_called_once_with(theme="ocean", no_color=False, debounce_ms=150, synchronous=True)
        self.assertEqual(stdout.getvalue(), "out\n")
        self.assertEqual(stderr.getvalue(), "err\n")

    def test_terminal_startup_failure_exits_nonzero(self) -> None:
        stderr = io.StringIO()
        with mock.patch.object(sys, "stdin", _fake_stdin(b"x")), mock.patch.object(sys, "stderr", stderr), mock.patch(
            "pipepreview.cli.stdin_is_pipe", return_value=True
        ), mock.patch("pipepreview.cli.build_runtime_config", return_value=RuntimeConfig()), mock.patch(
            "pipepreview.cli.run_app", side_effect=TerminalStartError("no such device")
        ):
            with self.assertRaises(SystemExit) as raised:
                cli.main([])

        self.assertEqual(raised.exception.code, 1)
        self.assertIn("unable to start terminal UI: no such device", stderr.getvalue())

    def test_error_inside_running_ui_is_not_reported_as_startup_failure(self) -> None:
        stderr = io.StringIO()
        with mock.patch.object(sys, "stdin", _fake_stdin(b"x")), mock.patch.object(sys, "stderr", stderr), mock.patch(
            "pipepreview.cli.stdin_is_pipe", return_value=True
        ), mock.patch("pipepreview.cli.build_runtime_config", return_value=RuntimeConfig()), mock.patch(
            "pipepreview.cli.run_app", side_effect=OSError(5, "Input/output error")
        ):
            with self.assertRaises(OSError):
                cli.main([])

        self.assertNotIn("unable to start terminal UI", stderr.getvalue())

    def test_flush_result_writes_each_stream_once(self) -> None:
        stdout = mock.Mock()
        stderr = mock.Mock()
        cli.flush_result(ExecutionResult(stdout="a", stderr="b"), stdout, stderr)
        stdout.write.assert_called_once_with("a")
        stderr.write.assert_called_once_with("b")


if __name__ == "__main__":
    unittest.main()
