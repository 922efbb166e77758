"""Closed sets of events consumed by, and effects produced by, the reducer.

Events describe what happened (a key, a resize, an idle tick, a finished run).
Effects describe side effects the runtime must perform on the reducer's behalf.
"""

from __future__ import annotations

from dataclasses import dataclass

from .runner import ExecutionResult


@dataclass(frozen=True)
class KeyEvent:
    """One decoded key or mouse token from ``read_key``."""

    key: str


@dataclass(frozen=True)
class ResizeEvent:
    width: int
    height: int


@dataclass(frozen=True)
class TickEvent:
    """Idle loop iteration with no input; drives time-based debouncing."""

    now: float


@dataclass(frozen=True)
class CommandCompletedEvent:
    """Result of a run delivered back to the loop."""

    request_id: int
    command: str
    result: ExecutionResult


Event = KeyEvent | ResizeEvent | TickEvent | CommandCompletedEvent


@dataclass(frozen=True)
class RunCommand:
    request_id: int
    command: str


@dataclass(frozen=True)
class CancelRun:
    """Every request older than ``request_id`` is stale and may be killed."""

    request_id: int


@dataclass(frozen=True)
class CopyToClipboard:
    text: str
    label: str


@dataclass(frozen=True)
class Quit:
    pass


Effect = RunCommand | CancelRun | CopyToClipboard | Quit

__all__ = [
    "CancelRun",
    "CommandCompletedEvent",
    "CopyToClipboard",
    "Effect",
    "Event",
    "KeyEvent",
    "Quit",
    "ResizeEvent",
    "RunCommand",
    "TickEvent",
]
