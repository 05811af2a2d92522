"""Logging utilities."""

from .utils import redact, setup_file_logger

__all__ = [
    "redact",
    "setup_file_logger",
]
