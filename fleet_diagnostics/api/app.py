"""
Flask HTTP API for the fleet diagnostics service.

All routes live under the configured prefix (``/api`` by default) and
return the ``{"success", "message", "data", "count"}`` envelope, except
the CSV export.
"""

from typing import Optional

from flask import Blueprint, Flask, Response, current_app, jsonify, request
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from ..config.settings import Settings, get_settings
from ..config.logging_config import get_logger
from ..models.log_entry import ApiResponse
from ..services.diagnostic_service import DiagnosticService
from ..services.log_store import LogStoreError
from ..utils.health_check import HealthChecker, HealthStatus
from ..utils.helpers import format_file_size
from ..utils.validators import ValidationError

logger = get_logger(__name__)

EXTENSION_KEY = "fleet_diagnostics"

api = Blueprint("api", __name__)


def _service() -> DiagnosticService:
    return current_app.extensions[EXTENSION_KEY]["service"]


def _health() -> HealthChecker:
    return current_app.extensions[EXTENSION_KEY]["health"]


def _reply(response: ApiResponse, status: int = 200):
    return jsonify(response.to_dict()), status


def _failure(message: str, error: str, status: int):
    return _reply(ApiResponse(False, message, error=error), status)


def _search_args():
    args = request.args
    return {
        "vehicle": args.get("vehicle"),
        "code": args.get("code"),
        "level": args.get("level"),
        "date_from": args.get("from"),
        "date_to": args.get("to"),
    }


# ----- Logs -----

@api.route("/logs", methods=["GET"])
def search_logs():
    return _reply(_service().search(**_search_args()))


@api.route("/logs/all", methods=["GET"])
def all_logs():
    return _reply(_service().all_logs())


@api.route("/logs/count", methods=["GET"])
def count_logs():
    return _reply(_service().count())


@api.route("/logs/export", methods=["GET"])
def export_logs():
    csv_text = _service().export_csv(**_search_args())
    return Response(
        csv_text,
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=diagnostic-logs.csv"},
    )


@api.route("/logs/upload", methods=["POST"])
def upload_logs():
    payload = request.get_json(silent=True)
    content = payload.get("content") if isinstance(payload, dict) else None
    return _reply(_service().upload_content(content))


@api.route("/logs/upload-file", methods=["POST"])
def upload_log_file():
    uploaded = request.files.get("file")
    if uploaded is None:
        raise ValidationError("No file uploaded")
    return _reply(_service().upload_file(uploaded.filename, uploaded.read()))


@api.route("/logs/webhook", methods=["POST"])
def webhook():
    """Accept a raw text body, or JSON with a ``content`` field."""
    if request.is_json:
        payload = request.get_json(silent=True)
        content = payload.get("content") if isinstance(payload, dict) else None
    else:
        content = request.get_data(as_text=True)
    return _reply(_service().process_webhook(content))


@api.route("/logs", methods=["DELETE"])
def clear_logs():
    return _reply(_service().clear_logs())


# ----- Vehicles -----

@api.route("/vehicles", methods=["GET"])
def unique_vehicles():
    return _reply(_service().unique_vehicles())


@api.route("/vehicles/stats", methods=["GET"])
def fleet_stats():
    return _reply(_service().fleet_stats())


@api.route("/vehicles/<vehicle_id>/stats", methods=["GET"])
def vehicle_stats(vehicle_id):
    return _reply(_service().vehicle_stats(vehicle_id))


# ----- Misc -----

@api.route("/info", methods=["GET"])
def database_info():
    return _reply(_service().database_info())


@api.route("/codes/<code>", methods=["GET"])
def code_info(code):
    return _reply(_service().code_info(code))


@api.route("/health", methods=["GET"])
def health():
    report = _health().check_all()
    status = 503 if report.status == HealthStatus.UNHEALTHY else 200
    return jsonify(report.to_dict()), status


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        logger.info(f"Rejected request to {request.path}: {e}")
        return _failure("Invalid request", str(e), 400)

    @app.errorhandler(LogStoreError)
    def handle_store_error(e):
        logger.error(f"Storage failure on {request.path}: {e}")
        return _failure("Failed to persist logs", str(e), 500)

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(e):
        limit = current_app.config.get("MAX_CONTENT_LENGTH") or 0
        return _failure(
            "Upload too large", f"Maximum upload size is {format_file_size(limit)}", 413
        )

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return _failure(e.name, e.description or e.name, e.code or 500)


def create_app(
    settings: Optional[Settings] = None, service: Optional[DiagnosticService] = None
) -> Flask:
    """
    Create the Flask application.

    Args:
        settings: Configuration (default: the settings singleton)
        service: Pre-built service; built from settings when omitted

    Returns:
        Configured Flask app
    """
    settings = settings or get_settings()
    service = service or DiagnosticService.from_settings(settings)

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = settings.max_upload_bytes
    app.config["DEBUG"] = settings.app_debug
    app.extensions[EXTENSION_KEY] = {
        "service": service,
        "health": HealthChecker(settings, service.store),
        "settings": settings,
    }

    app.register_blueprint(api, url_prefix=settings.api_prefix)
    _register_error_handlers(app)

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = settings.cors_origin
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, DELETE, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return response

    logger.info(f"API ready under {settings.api_prefix} (data file: {service.store.path})")
    return app
