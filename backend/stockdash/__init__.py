"""stockdash: technical-indicator and position-sizing engine."""

__version__ = "0.1.0"
