"""Rendering facade for Word Rush."""

from . import messages

__all__ = ["messages"]
