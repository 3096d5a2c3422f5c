"""Canvas bridge integration."""

from arranger.canvas.client import CanvasClient

__all__ = [
    "CanvasClient",
]
