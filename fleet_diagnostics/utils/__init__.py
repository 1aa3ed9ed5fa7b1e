"""Utility modules for the fleet diagnostics service."""

from .validators import Validators, InputSanitizer, ValidationError, require
from .helpers import truncate_text, display_message, format_file_size

__all__ = [
    "Validators",
    "InputSanitizer",
    "ValidationError",
    "require",
    "truncate_text",
    "display_message",
    "format_file_size",
]
