"""Vidnest video-sharing API."""

__version__ = "1.0.0"
