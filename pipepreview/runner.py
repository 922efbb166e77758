"""Shell command execution against the captured input.

Runs one command to completion with the buffered input as its stdin and
captures stdout/stderr whole. Every failure is folded into the stderr text.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionResult:
    """Captured output of one run, or the identity preview of the input."""

    stdout: str
    stderr: str = ""

    @classmethod
    def identity(cls, input_text: str) -> ExecutionResult:
        """Result shown for an empty command: the input itself, no error."""
        return cls(stdout=input_text, stderr="")


def decode_output(data: bytes | None) -> str:
    """Decode captured bytes, replacing anything that is not valid UTF-8."""
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


def kill_process_group(proc: subprocess.Popen) -> None:
    """Kill ``proc`` and every process it spawned in its session."""
    if proc.poll() is not None:
        return
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        # Group already gone or never formed; fall back to the direct child.
        try:
            proc.kill()
        except ProcessLookupError:
            pass


def _exit_description(returncode: int) -> str:
    if returncode < 0:
        try:
            name = signal.Signals(-returncode).name
        except ValueError:
            name = str(-returncode)
        return f"signal: {name}"
    return f"exit status {returncode}"


def run_command(
    shell: str,
    invoke_flag: str,
    command: str,
    input_text: str,
    *,
    on_spawn: Callable[[subprocess.Popen], None] | None = None,
) -> ExecutionResult:
    """Run ``shell invoke_flag command`` with ``input_text`` as stdin.

    ``on_spawn`` receives the live process right after it starts so callers
    can cancel it with :func:`kill_process_group`. The child is always reaped
    before this returns.
    """
    if not command:
        raise ValueError("command must be non-empty")

    argv = [shell, invoke_flag, command]
    try:
        proc = subprocess.Popen(
            argv,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            start_new_session=True,
        )
    except OSError as exc:
        logger.warning("failed to start %s: %s", shell, exc)
        return ExecutionResult(stdout="", stderr=f"failed to start {shell}: {exc}")

    if on_spawn is not None:
        on_spawn(proc)

    try:
        stdout_bytes, stderr_bytes = proc.communicate(input_text.encode("utf-8"))
    finally:
        if proc.poll() is None:
            kill_process_group(proc)
            proc.wait()

    stdout = decode_output(stdout_bytes)
    stderr = decode_output(stderr_bytes)
    if proc.returncode != 0:
        logger.debug("command %r finished with %s", command, _exit_description(proc.returncode))
        if not stderr:
            stderr = _exit_description(proc.returncode)
    return ExecutionResult(stdout=stdout, stderr=stderr)
