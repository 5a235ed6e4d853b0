"""Input/output helpers for goapfolio."""

from .logging import StructuredLogger
from .config import load_config

__all__ = ["StructuredLogger", "load_config"]
