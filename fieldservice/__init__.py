"""Booking store for an appliance-repair field service."""

__version__ = "0.1.0"
