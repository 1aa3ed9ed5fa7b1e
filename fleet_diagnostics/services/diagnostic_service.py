"""
Diagnostic Logs Service.
Entry point for uploads, webhooks, queries and statistics.
"""

from typing import Optional

from ..models.log_entry import ApiResponse, LogLevel
from ..config.settings import Settings, get_settings
from ..config.logging_config import get_logger, log_performance, log_with_context
from ..utils.validators import InputSanitizer, Validators, ValidationError, require
from .ingestion import LogIngestor
from .log_store import LogStore
from .query_service import QueryService
from .severity_classifier import SeverityClassifier, describe_code

logger = get_logger(__name__)


class DiagnosticService:
    """
    Service for ingesting and querying vehicle diagnostic logs.

    Every upload path (JSON body, file, webhook) funnels into
    ``_ingest_and_store``: the ingestor turns text into entries, the store
    appends and persists them.
    """

    def __init__(
        self,
        store: LogStore,
        classifier: Optional[SeverityClassifier] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.classifier = classifier or store.ingestor.classifier
        self.ingestor = LogIngestor(classifier=self.classifier)
        self.store = store
        self.queries = QueryService(store)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "DiagnosticService":
        """Create the service and load the configured data file."""
        settings = settings or get_settings()
        classifier = SeverityClassifier.from_settings(settings)
        store = LogStore(settings.data_path, ingestor=LogIngestor(classifier=classifier))
        store.load()
        return cls(store, classifier=classifier, settings=settings)

    # ----- Ingestion -----

    def upload_content(self, content) -> ApiResponse:
        """Ingest a JSON ``content`` field."""
        require(Validators.validate_log_content(content))
        count = self._ingest_and_store(content, source="upload")
        return ApiResponse(True, f"Uploaded {count} log entries", count=count)

    def upload_file(self, filename: Optional[str], raw: bytes) -> ApiResponse:
        """Ingest an uploaded .txt/.log file."""
        require(Validators.validate_upload_filename(filename, self.settings.allowed_extensions))
        require(Validators.validate_upload_size(len(raw), self.settings.max_upload_bytes))

        name = InputSanitizer.sanitize_filename(filename)
        content = raw.decode("utf-8", errors="replace")
        count = self._ingest_and_store(content, source="file", filename=name)
        return ApiResponse(
            True, f"Uploaded {count} log entries from file: {name}", count=count
        )

    def process_webhook(self, content) -> ApiResponse:
        """Ingest a raw webhook body."""
        require(Validators.validate_log_content(content))
        count = self._ingest_and_store(content, source="webhook")
        return ApiResponse(
            True, f"Webhook processed successfully. Uploaded {count} log entries", count=count
        )

    def clear_logs(self) -> ApiResponse:
        logger.info("Clearing all logs")
        self.store.clear()
        return ApiResponse(True, "All logs cleared successfully.")

    def _ingest_and_store(self, content: str, **context) -> int:
        with log_performance(logger, "ingest", **context):
            result = self.ingestor.ingest(content)
            if result.accepted:
                self.store.append(result.accepted)
        return result.count

    # ----- Queries -----

    def search(
        self,
        vehicle=None,
        code: Optional[str] = None,
        level: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> ApiResponse:
        entries = self._search_entries(vehicle, code, level, date_from, date_to)
        return ApiResponse(
            True,
            f"Found {len(entries)} logs matching criteria",
            data=[entry.to_dict() for entry in entries],
            count=len(entries),
        )

    def all_logs(self) -> ApiResponse:
        entries = self.queries.all_logs()
        return ApiResponse(
            True,
            f"Retrieved {len(entries)} log entries",
            data=[entry.to_dict() for entry in entries],
            count=len(entries),
        )

    def count(self) -> ApiResponse:
        count = self.store.count()
        return ApiResponse(True, f"Total logs: {count}", count=count)

    def vehicle_stats(self, vehicle_id) -> ApiResponse:
        require(Validators.validate_vehicle_id(vehicle_id))
        vehicle_id = int(vehicle_id)
        log_with_context(logger, vehicle_id=vehicle_id).debug("Vehicle stats requested")
        stats = self.queries.vehicle_stats(vehicle_id)
        return ApiResponse(True, f"Vehicle {vehicle_id} statistics", data=stats.to_dict())

    def fleet_stats(self) -> ApiResponse:
        stats = self.queries.fleet_stats()
        return ApiResponse(
            True,
            f"Statistics for {len(stats)} vehicles",
            data=[s.to_dict() for s in stats],
            count=len(stats),
        )

    def unique_vehicles(self) -> ApiResponse:
        vehicles = self.queries.unique_vehicles()
        return ApiResponse(
            True, f"Found {len(vehicles)} unique vehicles", data=vehicles, count=len(vehicles)
        )

    def database_info(self) -> ApiResponse:
        return ApiResponse(True, "Database information", data=self.queries.database_info())

    def export_csv(
        self,
        vehicle=None,
        code: Optional[str] = None,
        level: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> str:
        """CSV text of the entries matching a search."""
        entries = self._search_entries(vehicle, code, level, date_from, date_to)
        return self.queries.to_csv(entries)

    def code_info(self, code: str) -> ApiResponse:
        """Category and default severity of a trouble code."""
        require(Validators.validate_fault_code(code))
        code = code.upper()
        info = describe_code(code)
        level = self.classifier.classify(code, "")
        return ApiResponse(
            True,
            f"Code {code}",
            data={
                "code": code,
                "category": info["category"],
                "isGeneric": info["is_generic"],
                "level": level.value,
            },
        )

    def _search_entries(self, vehicle, code, level, date_from, date_to):
        if vehicle is not None and str(vehicle).strip() != "":
            require(Validators.validate_vehicle_id(vehicle))
            vehicle = int(vehicle)
        else:
            vehicle = None
        if level:
            require(Validators.validate_level(level))
            level = LogLevel.from_token(level).value

        try:
            return self.queries.search(
                vehicle=vehicle,
                code=code or None,
                level=level,
                date_from=date_from or None,
                date_to=date_to or None,
            )
        except ValueError as e:
            raise ValidationError(str(e)) from e

