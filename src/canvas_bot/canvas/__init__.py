"""Canvas API module for Canvas Bot."""

from canvas_bot.canvas.client import CanvasClient, CanvasDecodeError, CanvasFetchError

__all__ = ["CanvasClient", "CanvasDecodeError", "CanvasFetchError"]
