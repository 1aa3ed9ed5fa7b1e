"""
Batch Ingestion Service.
Converts raw uploaded text into structured, classified log entries.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from ..models.log_entry import LogEntry, LogLevel, LEGACY_VEHICLE_ID_PATTERN
from .log_parser import LogLineParser, clean_code, normalize_timestamp
from .severity_classifier import SeverityClassifier
from ..config.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class IngestionResult:
    """Entries accepted from one blob of log text."""
    accepted: List[LogEntry] = field(default_factory=list)
    skipped: int = 0

    @property
    def count(self) -> int:
        return len(self.accepted)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accepted": [entry.to_dict() for entry in self.accepted],
            "count": self.count,
        }


class LogIngestor:
    """
    Stateless transform from text to entries.

    Unparsable lines are skipped, never stored as partial records. The
    level token of each line is discarded and re-derived by the classifier.
    """

    def __init__(
        self,
        parser: Optional[LogLineParser] = None,
        classifier: Optional[SeverityClassifier] = None,
    ):
        self.parser = parser or LogLineParser()
        self.classifier = classifier or SeverityClassifier()

    def ingest(self, content: Optional[str]) -> IngestionResult:
        """
        Parse and classify every line of a text blob.

        Args:
            content: File content, JSON ``content`` field or webhook body

        Returns:
            IngestionResult with accepted entries in input order
        """
        result = IngestionResult()
        if not content:
            return result

        for line in content.split("\n"):
            if not line.strip():
                continue

            entry = self.parser.parse(line)
            if entry is None:
                result.skipped += 1
                continue

            level = self.classifier.classify(entry.code, entry.message)
            result.accepted.append(replace(entry, level=level))

        logger.info(f"Parsed {result.count} log entries ({result.skipped} lines skipped)")
        return result

    def repair_record(self, record: Dict[str, Any]) -> Optional[LogEntry]:
        """
        Rebuild a canonical entry from a stored record.

        Older data files hold records whose level field carries the vehicle
        id (``VEHICLE_ID:1234 ERROR``), whose code keeps its ``CODE:``
        prefix, or whose vehicle id is missing.

        Args:
            record: Raw dictionary loaded from the data file

        Returns:
            A canonical LogEntry, or None if the record is unrecoverable
        """
        if not isinstance(record, dict):
            return None

        timestamp = record.get("timestamp")
        code = record.get("code")
        message = record.get("message")
        if not timestamp or code is None or not message:
            logger.warning(f"Dropping incomplete stored record: {record!r}")
            return None

        raw_level = record.get("level")
        raw_level = str(raw_level) if raw_level is not None else ""

        vehicle_id = record.get("vehicleId")
        if vehicle_id is None:
            embedded = LEGACY_VEHICLE_ID_PATTERN.search(raw_level)
            vehicle_id = int(embedded.group(1)) if embedded else 0
        try:
            vehicle_id = int(vehicle_id)
        except (TypeError, ValueError):
            vehicle_id = 0
        if vehicle_id < 0:
            vehicle_id = 0

        code = clean_code(str(code))
        message = str(message).strip()

        level = LogLevel.from_token(raw_level)
        if level is None:
            level = self.classifier.classify(code, message)

        return LogEntry(
            timestamp=normalize_timestamp(str(timestamp)),
            vehicle_id=vehicle_id,
            level=level,
            code=code,
            message=message,
        )


def ingest(content: Optional[str], classifier: Optional[SeverityClassifier] = None) -> IngestionResult:
    """Ingest a text blob with the default parser."""
    return LogIngestor(classifier=classifier).ingest(content)
