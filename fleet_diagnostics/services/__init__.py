"""Services module for the fleet diagnostics service."""

from .log_parser import LogLineParser, normalize_timestamp, clean_code
from .severity_classifier import SeverityClassifier, ClassificationRule, describe_code
from .ingestion import LogIngestor, IngestionResult, ingest
from .log_store import LogStore, LogStoreError
from .query_service import QueryService
from .diagnostic_service import DiagnosticService

__all__ = [
    "LogLineParser",
    "normalize_timestamp",
    "clean_code",
    "SeverityClassifier",
    "ClassificationRule",
    "describe_code",
    "LogIngestor",
    "IngestionResult",
    "ingest",
    "LogStore",
    "LogStoreError",
    "QueryService",
    "DiagnosticService",
]
