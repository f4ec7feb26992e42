"""Arcade Market API: a marketplace for the shops of a physical arcade."""

__version__ = "1.0.0"
