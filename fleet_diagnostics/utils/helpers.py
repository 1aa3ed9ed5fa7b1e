"""
Helper utility functions.
"""

import re


def truncate_text(text: str, max_length: int = 50, suffix: str = "...") -> str:
    """
    Truncate text to a maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to append if truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


def display_message(message: str) -> str:
    """
    Format a stored message for display, removing wrapping brackets.

    Args:
        message: Message as stored

    Returns:
        Message without a surrounding ``[...]`` pair
    """
    if not message:
        return ""
    return re.sub(r"^\[(.*)\]$", r"\1", message.strip()).strip()


def format_file_size(size_bytes: float) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string
    """
    for unit in ["B", "KB", "MB", "GB"]:
        if size_bytes < 1024:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.1f} TB"
