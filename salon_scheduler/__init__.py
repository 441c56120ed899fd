"""Salon appointment scheduling and slot-availability engine."""

__version__ = "0.1.0"
