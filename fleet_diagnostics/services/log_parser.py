"""
Diagnostic Log Line Parser.
Turns bracketed vehicle log lines into structured entries.

Line format:
    [<timestamp>] [VEHICLE_ID:<digits>] [<level>] [CODE:<code>] [<message>]
"""

from typing import Optional
import re

import pandas as pd

from ..models.log_entry import LogEntry, LogLevel
from ..utils.helpers import truncate_text
from ..config.logging_config import get_logger

logger = get_logger(__name__)

LINE_PATTERN = re.compile(
    r"\[(?P<timestamp>[^\]]+)\]"
    r" +\[VEHICLE_ID:(?P<vehicle_id>[0-9]+)\]"
    r" +\[(?P<level>[^\]]+)\]"
    r" +\[CODE:(?P<code>[^\]]+)\]"
    r" +\[(?P<message>[^\]]+)\]"
)

CODE_PREFIX_PATTERN = re.compile(r"^\s*(?:CODE:\s*)+", re.IGNORECASE)


def format_iso(ts: pd.Timestamp) -> str:
    """Serialize a UTC timestamp as ISO-8601 with millisecond precision."""
    return ts.strftime("%Y-%m-%dT%H:%M:%S") + f".{ts.microsecond // 1000:03d}Z"


def parse_datetime(value: str) -> Optional[pd.Timestamp]:
    """
    Parse an arbitrary date string into a UTC timestamp.

    Naive values are taken to be UTC; aware values are converted.

    Returns:
        The parsed timestamp, or None when the string is not a date
    """
    try:
        ts = pd.to_datetime(value.strip(), utc=True)
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return ts


def normalize_timestamp(value: str) -> str:
    """
    Convert a date-like string into canonical ISO-8601 (UTC).

    Unparsable input never rejects the line: the current time is
    substituted instead.
    """
    ts = parse_datetime(value) if value else None
    if ts is None:
        logger.warning(f"Invalid timestamp format: {value!r}, using current time")
        ts = pd.Timestamp.now(tz="UTC")
    return format_iso(ts)


def clean_code(code: Optional[str]) -> str:
    """Strip any CODE: prefix and upper-case a trouble code."""
    if not code:
        return ""
    return CODE_PREFIX_PATTERN.sub("", code).strip().upper()


class LogLineParser:
    """
    Parser for single bracketed diagnostic log lines.

    All five bracket groups are mandatory. A line that deviates from the
    grammar yields None and is skipped by ingestion.
    """

    def parse(self, line: str) -> Optional[LogEntry]:
        """
        Parse one log line.

        Args:
            line: A single line of text (no embedded newlines)

        Returns:
            A LogEntry candidate whose level is the line's own level token
            (None when that token is garbled or in the legacy shape), or
            None when the line does not match the grammar
        """
        match = LINE_PATTERN.fullmatch(line.strip())
        if not match:
            logger.warning(f"Could not parse log line: {truncate_text(line.strip(), 120)}")
            return None

        return LogEntry(
            timestamp=normalize_timestamp(match.group("timestamp")),
            vehicle_id=int(match.group("vehicle_id"), 10),
            level=LogLevel.from_token(match.group("level")),
            code=clean_code(match.group("code")),
            message=match.group("message").strip(),
        )
