"""Persistent JSON config and runtime settings resolution.

Reads optional defaults (theme, debounce, shell) from the user config dir.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from .ui_theme import normalize_theme_name

logger = logging.getLogger(__name__)

APP_NAME = "pipepreview"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

SHELL_ENV_VAR = "SHELL"
DEFAULT_SHELL = "bash"
# Flag that makes the shell execute a string; not detected per shell.
INVOKE_FLAG = "-c"


@dataclass(frozen=True)
class RuntimeConfig:
    """Settings resolved once at startup and handed to the runtime."""

    shell: str = DEFAULT_SHELL
    invoke_flag: str = INVOKE_FLAG
    theme: str = "default"
    no_color: bool = False
    debounce_seconds: float = 0.0
    synchronous: bool = False


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _coerce_nonnegative_int(value: object) -> int | None:
    """Booleans and non-integers are treated as unset."""
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return max(0, value)


def load_theme_name(data: Mapping[str, object]) -> str | None:
    value = data.get("theme")
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def load_debounce_ms(data: Mapping[str, object]) -> int | None:
    return _coerce_nonnegative_int(data.get("debounce_ms"))


def resolve_shell(data: Mapping[str, object], environ: Mapping[str, str] | None = None) -> str:
    """Pick the shell: ``$SHELL``, then the config ``shell`` key, then ``bash``."""
    if environ is None:
        environ = os.environ
    env_shell = environ.get(SHELL_ENV_VAR, "").strip()
    if env_shell:
        return env_shell
    configured = data.get("shell")
    if isinstance(configured, str) and configured.strip():
        return configured.strip()
    return DEFAULT_SHELL


def build_runtime_config(
    *,
    theme: str | None = None,
    no_color: bool = False,
    debounce_ms: int | None = None,
    synchronous: bool = False,
    environ: Mapping[str, str] | None = None,
) -> RuntimeConfig:
    """Merge CLI overrides over environment, config file, and defaults."""
    data = load_config()
    if debounce_ms is None:
        debounce_ms = load_debounce_ms(data) or 0
    return RuntimeConfig(
        shell=resolve_shell(data, environ),
        invoke_flag=INVOKE_FLAG,
        theme=normalize_theme_name(theme or load_theme_name(data)),
        no_color=no_color,
        debounce_seconds=max(0, debounce_ms) / 1000.0,
        synchronous=synchronous,
    )
