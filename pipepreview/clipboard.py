"""Best-effort clipboard access through platform copy tools.

Copies never block the event loop: ``ClipboardWriter`` hands each one to a
single background thread and only logs the outcome.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from concurrent.futures import ThreadPoolExecutor

logger = logging.getLogger(__name__)


def clipboard_commands() -> list[list[str]]:
    """Return candidate copy commands for the current platform, in preference order."""
    if sys.platform == "darwin":
        return [["pbcopy"]]
    if os.name == "nt":
        return [["clip"]]
    return [
        ["wl-copy"],
        ["xclip", "-selection", "clipboard"],
        ["xsel", "--clipboard", "--input"],
    ]


def copy_text_to_clipboard(text: str) -> bool:
    """Best-effort clipboard copy across macOS, Windows, and common Linux tools."""
    if not text:
        return False

    for command in clipboard_commands():
        if shutil.which(command[0]) is None:
            continue
        try:
            proc = subprocess.run(
                command,
                input=text,
                text=True,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError as exc:
            logger.debug("clipboard command %s failed: %s", command[0], exc)
            continue
        if proc.returncode == 0:
            return True
    return False


class ClipboardWriter:
    """Fire-and-forget clipboard copies on a background thread."""

    def __init__(self) -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pipepreview-clipboard")

    def _copy(self, text: str, label: str) -> None:
        if copy_text_to_clipboard(text):
            logger.info("copied %s to clipboard (%d chars)", label, len(text))
        else:
            logger.warning("could not copy %s to clipboard", label)

    def copy(self, text: str, label: str) -> None:
        self._executor.submit(self._copy, text, label)

    def shutdown(self) -> None:
        # Let a copy already handed to the tool finish so the text is not lost.
        self._executor.shutdown(wait=True)
