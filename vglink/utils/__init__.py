"""Utilities for vglink."""

from .logging import setup_logging

__all__ = ["setup_logging"]
