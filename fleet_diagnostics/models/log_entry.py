"""
Diagnostic log entry models.
Canonical structured records produced by ingestion and served to clients.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any
import re

# Legacy records carry the vehicle id inside the level field
LEGACY_VEHICLE_ID_PATTERN = re.compile(r"VEHICLE_ID:([0-9]+)", re.IGNORECASE)


class LogLevel(str, Enum):
    """Canonical severity levels, most to least urgent."""
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"

    @classmethod
    def from_token(cls, token: Optional[str]) -> Optional["LogLevel"]:
        """
        Map a raw level token to a canonical level.

        Args:
            token: Level text as it appeared in a log line or stored record

        Returns:
            The canonical level, or None for empty, garbled or legacy tokens
        """
        if not token:
            return None
        if LEGACY_VEHICLE_ID_PATTERN.search(token):
            return None

        clean = token.replace("[", "").replace("]", "").strip().upper()
        if clean == "WARN":
            return cls.WARNING
        try:
            return cls(clean)
        except ValueError:
            return None


@dataclass(frozen=True)
class LogEntry:
    """A single parsed and classified diagnostic log line."""
    timestamp: str
    vehicle_id: int
    level: Optional[LogLevel]
    code: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert entry to its wire/storage form."""
        return {
            "timestamp": self.timestamp,
            "vehicleId": self.vehicle_id,
            "level": self.level.value if self.level else None,
            "code": self.code,
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogEntry":
        """Build an entry from an already-canonical stored record."""
        return cls(
            timestamp=data["timestamp"],
            vehicle_id=int(data["vehicleId"]),
            level=LogLevel.from_token(data.get("level")),
            code=data["code"],
            message=data["message"],
        )


@dataclass
class VehicleStats:
    """Per-vehicle aggregate counts by severity level."""
    vehicle_id: int
    total_logs: int = 0
    error_count: int = 0
    warning_count: int = 0
    info_count: int = 0
    debug_count: int = 0
    most_recent: Optional[LogEntry] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vehicleId": self.vehicle_id,
            "totalLogs": self.total_logs,
            "errorCount": self.error_count,
            "warningCount": self.warning_count,
            "infoCount": self.info_count,
            "debugCount": self.debug_count,
            "mostRecent": self.most_recent.to_dict() if self.most_recent else None,
        }


@dataclass
class ApiResponse:
    """Envelope returned by every service operation."""
    success: bool
    message: str
    data: Any = None
    count: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.data is not None:
            result["data"] = self.data
        if self.count is not None:
            result["count"] = self.count
        if self.error is not None:
            result["error"] = self.error
        return result
