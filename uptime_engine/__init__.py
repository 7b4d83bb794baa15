"""Service status derivation and uptime reconstruction engine."""

__version__ = "0.1.0"
