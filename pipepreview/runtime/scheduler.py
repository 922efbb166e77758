"""Background command execution with latest-request-wins semantics.

The event loop never waits on a command. Requests are handed to one worker
thread; a newer request or a cancel kills whatever is still running, and
results for superseded requests are dropped before they reach the loop.
"""

from __future__ import annotations

import logging
import subprocess
import threading
from collections.abc import Callable
from dataclasses import dataclass
from queue import Empty, Queue

from ..runner import ExecutionResult, kill_process_group

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandRequest:
    """One command run requested by the reducer."""

    request_id: int
    command: str


@dataclass(frozen=True)
class CommandCompletion:
    """Completed run delivered back to the loop."""

    request: CommandRequest
    result: ExecutionResult


class CommandScheduler:
    """Single-threaded latest-request-wins command scheduler.

    ``run`` is called as ``run(command, on_spawn=...)`` and must reap its
    process before returning (see ``runner.run_command``).
    """

    def __init__(self, run: Callable[..., ExecutionResult]) -> None:
        self._run = run
        self._lock = threading.Lock()
        self._pending: CommandRequest | None = None
        self._active: tuple[CommandRequest, subprocess.Popen] | None = None
        self._latest_request_id = 0
        self._running = False
        self._worker: threading.Thread | None = None
        self._results: Queue[CommandCompletion] = Queue()

    def _kill_active_locked(self) -> None:
        if self._active is None:
            return
        request, proc = self._active
        if request.request_id != self._latest_request_id:
            logger.debug("killing superseded run %d: %r", request.request_id, request.command)
            kill_process_group(proc)

    def _on_spawn(self, request: CommandRequest, proc: subprocess.Popen) -> None:
        with self._lock:
            self._active = (request, proc)
            # Superseded between dequeue and spawn.
            self._kill_active_locked()

    def _worker_loop(self) -> None:
        while True:
            with self._lock:
                request = self._pending
                self._pending = None
                if request is None:
                    self._running = False
                    return

            try:
                result = self._run(
                    request.command,
                    on_spawn=lambda proc, request=request: self._on_spawn(request, proc),
                )
            except Exception:
                logger.exception("run %d crashed: %r", request.request_id, request.command)
                result = ExecutionResult(stdout="", stderr=f"failed to run command: {request.command}")
            finally:
                with self._lock:
                    self._active = None

            with self._lock:
                stale = request.request_id != self._latest_request_id
            if stale:
                logger.debug("dropping result of superseded run %d", request.request_id)
                continue
            self._results.put(CommandCompletion(request=request, result=result))

    def schedule(self, request_id: int, command: str) -> None:
        """Queue ``command`` as the newest request, superseding older ones."""
        with self._lock:
            self._latest_request_id = request_id
            self._pending = CommandRequest(request_id=request_id, command=command)
            self._kill_active_locked()
            if self._running:
                return
            self._running = True

        worker = threading.Thread(
            target=self._worker_loop,
            name="pipepreview-command-runner",
            daemon=True,
        )
        self._worker = worker
        worker.start()

    def cancel(self, request_id: int) -> None:
        """Mark every request older than ``request_id`` stale and kill the running one."""
        with self._lock:
            self._latest_request_id = request_id
            self._pending = None
            self._kill_active_locked()

    def drain_results(self) -> list[CommandCompletion]:
        """Drain all completed, still-current results."""
        out: list[CommandCompletion] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out

    def shutdown(self, timeout: float = 1.0) -> None:
        """Cancel outstanding work and wait briefly for the worker to exit."""
        with self._lock:
            self._latest_request_id += 1
            self._pending = None
            self._kill_active_locked()
            worker = self._worker
        if worker is not None:
            worker.join(timeout)


class InlineCommandScheduler:
    """Run each request to completion inside ``schedule`` (blocking the loop)."""

    def __init__(self, run: Callable[..., ExecutionResult]) -> None:
        self._run = run
        self._results: list[CommandCompletion] = []

    def schedule(self, request_id: int, command: str) -> None:
        request = CommandRequest(request_id=request_id, command=command)
        self._results.append(CommandCompletion(request=request, result=self._run(command)))

    def cancel(self, request_id: int) -> None:
        self._results = [c for c in self._results if c.request.request_id >= request_id]

    def drain_results(self) -> list[CommandCompletion]:
        out, self._results = self._results, []
        return out

    def shutdown(self, timeout: float = 1.0) -> None:
        self._results = []


__all__ = [
    "CommandCompletion",
    "CommandRequest",
    "CommandScheduler",
    "InlineCommandScheduler",
]
