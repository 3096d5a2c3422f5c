"""Canvas Arranger — layout inference and arrangement for flat canvas elements."""

__version__ = "0.3.0"
