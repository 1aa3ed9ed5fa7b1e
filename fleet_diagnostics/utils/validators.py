"""
Input validation utilities for uploads and query parameters.
"""

import re
from pathlib import Path
from typing import Any, Iterable, Optional, Tuple

from .helpers import format_file_size
from ..models.log_entry import LogLevel


class ValidationError(Exception):
    """Raised when request input is rejected."""
    pass


class InputSanitizer:
    """Sanitization utilities for user input."""

    @staticmethod
    def sanitize_filename(filename: str) -> str:
        """
        Sanitize a filename to prevent path traversal.

        Args:
            filename: Input filename

        Returns:
            Sanitized filename
        """
        if not filename:
            return ""

        # Remove path separators and null bytes
        filename = re.sub(r'[/\\:\x00]', '', filename)

        # Remove leading/trailing dots and spaces
        filename = filename.strip('. ')

        return filename[:255]


class Validators:
    """Collection of validation functions returning (is_valid, message)."""

    @staticmethod
    def validate_upload_filename(
        filename: Optional[str], allowed_extensions: Iterable[str] = (".txt", ".log")
    ) -> Tuple[bool, str]:
        """
        Validate the name of an uploaded log file.

        Args:
            filename: Client-supplied filename
            allowed_extensions: Accepted suffixes, lower-case with dot

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not filename:
            return False, "No file uploaded"

        allowed = tuple(ext.lower() for ext in allowed_extensions)
        suffix = Path(InputSanitizer.sanitize_filename(filename)).suffix.lower()
        if suffix not in allowed:
            return False, f"File must be one of: {', '.join(allowed)}"

        return True, ""

    @staticmethod
    def validate_upload_size(size_bytes: int, max_bytes: int) -> Tuple[bool, str]:
        """
        Validate an upload against the configured size limit.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if size_bytes > max_bytes:
            return False, f"File is too large (maximum {format_file_size(max_bytes)})"
        return True, ""

    @staticmethod
    def validate_log_content(content: Any) -> Tuple[bool, str]:
        """
        Validate a text blob of log lines.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if content is None:
            return False, "No log content provided"
        if not isinstance(content, str):
            return False, "Log content must be a string"
        if not content.strip():
            return False, "No log content provided"
        return True, ""

    @staticmethod
    def validate_vehicle_id(value: Any) -> Tuple[bool, str]:
        """
        Validate a vehicle id parameter (non-negative integer).

        Returns:
            Tuple of (is_valid, error_message)
        """
        try:
            int_val = int(str(value).strip())
        except (TypeError, ValueError):
            return False, "Vehicle ID must be a valid number"
        if int_val < 0:
            return False, "Vehicle ID must not be negative"
        return True, ""

    @staticmethod
    def validate_level(value: str) -> Tuple[bool, str]:
        """
        Validate a level filter.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if LogLevel.from_token(value) is None:
            return False, f"Level must be one of: {', '.join(level.value for level in LogLevel)}"
        return True, ""

    @staticmethod
    def validate_fault_code(code: str) -> Tuple[bool, str]:
        """
        Validate OBD-II fault code format.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not code:
            return False, "Fault code is required"

        # OBD-II codes are in format: PXXXX, CXXXX, BXXXX, or UXXXX
        if not re.match(r'^[PCBU][0-9A-F]{4}$', code.upper()):
            return False, "Invalid fault code format. Expected format: P0123, C0123, B0123, or U0123"

        return True, ""


def require(result: Tuple[bool, str]) -> None:
    """Raise ValidationError for a failed (is_valid, message) result."""
    is_valid, message = result
    if not is_valid:
        raise ValidationError(message)
