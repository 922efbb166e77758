"""Command-line front door for pipepreview.

Validates that standard input is a pipe, buffers it once, runs the
interactive preview, and flushes the final stdout/stderr on exit.
"""

from __future__ import annotations

import argparse
import logging
import os
import stat
import sys
from typing import NoReturn, TextIO

from .config import build_runtime_config
from .logs import configure_logging
from .render.help import format_usage
from .runner import ExecutionResult
from .runtime import run_app
from .runtime.terminal import TerminalStartError
from .ui_theme import available_theme_names

logger = logging.getLogger(__name__)

EXIT_USAGE = 2
EXIT_FAILURE = 1


def _nonnegative_int(value: str) -> int:
    """argparse type for non-negative integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pipepreview",
        description="Interactively preview a shell command against piped standard input.",
        add_help=False,
    )
    parser.add_argument("-h", "--help", action="store_true", help="print help information")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())})",
    )
    parser.add_argument("--no-color", action="store_true", help="disable colors in the UI")
    parser.add_argument(
        "--debounce-ms",
        type=_nonnegative_int,
        default=None,
        help="wait this long after the last edit before running (default: run on every edit)",
    )
    parser.add_argument("--sync", action="store_true", help="run commands in the UI thread")
    parser.add_argument("--log-file", default=None, help="append debug logs to this file")
    return parser


def usage_text(parser: argparse.ArgumentParser) -> str:
    """Render usage with one row per flag, in declaration order."""
    rows: list[tuple[str, str]] = []
    for action in parser._actions:
        flags = ", ".join(action.option_strings)
        if action.metavar is None and action.nargs != 0:
            flags = f"{flags} {action.dest.upper()}"
        rows.append((flags, action.help or ""))
    return format_usage(rows)


def stdin_is_pipe(fd: int) -> bool:
    """Return whether ``fd`` carries redirected data rather than an interactive terminal."""
    return not stat.S_ISCHR(os.fstat(fd).st_mode)


def read_input(stream: TextIO) -> str:
    """Read the whole stream once, decoding UTF-8 with replacement."""
    data = stream.buffer.read()
    return data.decode("utf-8", errors="replace")


def flush_result(result: ExecutionResult, stdout: TextIO, stderr: TextIO) -> None:
    """Write the final stdout then stderr, each exactly once."""
    stdout.write(result.stdout)
    stdout.flush()
    stderr.write(result.stderr)
    stderr.flush()


def _fail_usage(parser: argparse.ArgumentParser, message: str) -> NoReturn:
    sys.stderr.write(f"{message}\n")
    sys.stderr.write(usage_text(parser))
    raise SystemExit(EXIT_USAGE)


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, capture piped input, run the preview, and flush its result."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_file)

    if args.help:
        sys.stdout.write(usage_text(parser))
        return

    try:
        is_pipe = stdin_is_pipe(sys.stdin.fileno())
    except (OSError, ValueError) as exc:
        logger.warning("cannot inspect standard input: %s", exc)
        is_pipe = False
    if not is_pipe:
        _fail_usage(parser, "not a valid pipe")

    try:
        input_text = read_input(sys.stdin)
    except OSError as exc:
        logger.error("failed to read standard input: %s", exc)
        sys.stderr.write(f"failed to read standard input: {exc}\n")
        raise SystemExit(EXIT_FAILURE) from exc

    config = build_runtime_config(
        theme=args.theme,
        no_color=args.no_color,
        debounce_ms=args.debounce_ms,
        synchronous=args.sync,
    )
    try:
        result = run_app(input_text, config)
    except TerminalStartError as exc:
        logger.error("unable to start terminal UI: %s", exc)
        sys.stderr.write(f"unable to start terminal UI: {exc}\n")
        raise SystemExit(EXIT_FAILURE) from exc

    flush_result(result, sys.stdout, sys.stderr)


if __name__ == "__main__":
    main()
