"""Relationship health scoring and predictive response intelligence."""

__version__ = "0.1.0"
