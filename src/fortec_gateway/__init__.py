"""Fortec AI gateway: model catalog, demo auth and a Pollinations generation proxy."""

__version__ = "1.0.0"
