"""API middleware for Canvas Arranger."""

from arranger.api.middleware.logging import LoggingMiddleware

__all__ = [
    "LoggingMiddleware",
]
