"""Threaded discussions for book-club topics."""

__version__ = "0.1.0"
