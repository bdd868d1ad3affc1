"""Client Information Database service."""

__version__ = "1.0.0"
