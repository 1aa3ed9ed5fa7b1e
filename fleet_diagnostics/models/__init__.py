"""Data models for the fleet diagnostics service."""

from .log_entry import LogLevel, LogEntry, VehicleStats, ApiResponse

__all__ = [
    "LogLevel",
    "LogEntry",
    "VehicleStats",
    "ApiResponse",
]
