"""Interactive widgets composed into the preview frame."""

from .line_editor import DEFAULT_PROMPT, LineEditor
from .viewport import MOUSE_WHEEL_DELTA, Viewport

__all__ = [
    "DEFAULT_PROMPT",
    "LineEditor",
    "MOUSE_WHEEL_DELTA",
    "Viewport",
]
