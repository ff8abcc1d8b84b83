"""Single-host breadth-first web crawler."""

__version__ = "1.0.0"
