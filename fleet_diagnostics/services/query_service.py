"""
Query and Statistics Service.
Filters stored entries and aggregates per-vehicle severity counts.
"""

from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from ..models.log_entry import LogEntry, LogLevel, VehicleStats
from .log_parser import parse_datetime
from .log_store import LogStore
from ..utils.helpers import display_message
from ..config.logging_config import get_logger

logger = get_logger(__name__)

CSV_HEADERS = ["Timestamp", "Vehicle ID", "Level", "Code", "Message"]

LEVEL_COLUMNS = {
    LogLevel.ERROR.value: "error_count",
    LogLevel.WARNING.value: "warning_count",
    LogLevel.INFO.value: "info_count",
    LogLevel.DEBUG.value: "debug_count",
}


def entries_frame(entries: Sequence[LogEntry]) -> pd.DataFrame:
    """Build a DataFrame of entries; the index is the insertion position."""
    df = pd.DataFrame(
        [entry.to_dict() for entry in entries],
        columns=["timestamp", "vehicleId", "level", "code", "message"],
    )
    df["ts"] = pd.to_datetime(df["timestamp"], utc=True, format="ISO8601")
    return df


class QueryService:
    """Read-only queries over a LogStore."""

    def __init__(self, store: LogStore):
        self.store = store

    def search(
        self,
        vehicle: Optional[int] = None,
        code: Optional[str] = None,
        level: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> List[LogEntry]:
        """
        Filter entries, keeping insertion order.

        Args:
            vehicle: Exact vehicle id
            code: Case-insensitive substring of the trouble code
            level: Case-insensitive exact level
            date_from: Inclusive lower bound, any parseable date
            date_to: Inclusive upper bound, any parseable date

        Raises:
            ValueError: If a date bound cannot be parsed
        """
        entries = self.store.entries()
        if not entries:
            return []

        df = entries_frame(entries)
        mask = pd.Series(True, index=df.index)

        if vehicle is not None:
            mask &= df["vehicleId"] == int(vehicle)
        if code:
            mask &= df["code"].str.contains(code, case=False, regex=False)
        if level:
            mask &= df["level"].str.upper() == level.strip().upper()
        if date_from:
            mask &= df["ts"] >= self._bound(date_from)
        if date_to:
            mask &= df["ts"] <= self._bound(date_to)

        return [entries[i] for i in df.index[mask]]

    def all_logs(self) -> List[LogEntry]:
        """All entries, newest first."""
        entries = self.store.entries()
        if not entries:
            return []
        df = entries_frame(entries).sort_values("ts", ascending=False, kind="mergesort")
        return [entries[i] for i in df.index]

    def vehicle_stats(self, vehicle_id: int) -> VehicleStats:
        """Counts by level and the most recent event for one vehicle."""
        entries = [e for e in self.store.entries() if e.vehicle_id == vehicle_id]
        if not entries:
            return VehicleStats(vehicle_id=vehicle_id)
        return self._stats_for(vehicle_id, entries, entries_frame(entries))

    def fleet_stats(self) -> List[VehicleStats]:
        """Stats for every vehicle, ordered by vehicle id."""
        entries = self.store.entries()
        if not entries:
            return []

        df = entries_frame(entries)
        stats = []
        for vehicle_id, group in df.groupby("vehicleId", sort=True):
            stats.append(self._stats_for(int(vehicle_id), entries, group))
        return stats

    def unique_vehicles(self) -> List[int]:
        return sorted({entry.vehicle_id for entry in self.store.entries()})

    def database_info(self) -> Dict[str, Any]:
        return {
            "totalLogs": self.store.count(),
            "lastUpdated": self.store.last_updated,
            "dbPath": str(self.store.path),
        }

    def to_csv(self, entries: Sequence[LogEntry]) -> str:
        """Render entries as CSV for download."""
        df = pd.DataFrame(
            [
                [e.timestamp, e.vehicle_id, e.level.value if e.level else "", e.code,
                 display_message(e.message)]
                for e in entries
            ],
            columns=CSV_HEADERS,
        )
        return df.to_csv(index=False, lineterminator="\n")

    @staticmethod
    def _bound(value: str) -> pd.Timestamp:
        ts = parse_datetime(value)
        if ts is None:
            raise ValueError(f"Invalid date: {value!r}")
        return ts

    @staticmethod
    def _stats_for(vehicle_id: int, entries: Sequence[LogEntry], df: pd.DataFrame) -> VehicleStats:
        counts = df["level"].value_counts()
        stats = VehicleStats(vehicle_id=vehicle_id, total_logs=len(df))
        for level_name, attr in LEVEL_COLUMNS.items():
            setattr(stats, attr, int(counts.get(level_name, 0)))

        # Latest timestamp wins; on ties the later upload wins
        latest = df.sort_values("ts", kind="mergesort").index[-1]
        stats.most_recent = entries[latest]
        return stats
