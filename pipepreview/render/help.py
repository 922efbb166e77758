"""Usage text shown for ``--help`` and for startup validation failures.

Lists the command-line flags and the keybinding table.
Formatting here is presentation-only and side-effect free.
"""

from __future__ import annotations

DESCRIPTION_LINES: tuple[str, ...] = (
    "pipe preview requires input piped from standard in.",
    "stderr and stdout shown in the preview are flushed upon exit.",
)

KEYBINDING_ROWS: tuple[tuple[str, str], ...] = (
    ("tab", "swap between input and preview"),
    ("ctrl+p", "copy input to clipboard"),
    ("ctrl+o", "copy preview to clipboard"),
    ("esc/ctrl+q/ctrl+c", "exit"),
)


def format_usage(flag_rows: list[tuple[str, str]]) -> str:
    """Return the full usage text for ``flag_rows`` of ``(flag, help)`` pairs."""
    out: list[str] = list(DESCRIPTION_LINES)
    out.append("flags:")
    for flag, help_text in flag_rows:
        out.append(f"{flag}\t{help_text}")
    out.append("keybinds:")
    for key, help_text in KEYBINDING_ROWS:
        out.append(f"- {key}\t{help_text}")
    return "\n".join(out) + "\n"
