"""Utility modules for the feedback translator backend."""

from .text import safe_truncate

__all__ = ["safe_truncate"]
