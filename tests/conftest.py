"""
Pytest fixtures and configuration.
"""

import pytest

# Add project root to path
import sys
from pathlib import Path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


SAMPLE_LOGS = """[2025-07-24T14:21:08Z] [VEHICLE_ID:1234] [ERROR] [CODE:U0420] [Steering angle sensor fault]
[2025-07-24T14:22:15Z] [VEHICLE_ID:1234] [WARNING] [CODE:P0171] [System too lean bank 1]
[2025-07-24T14:23:40Z] [VEHICLE_ID:5678] [INFO] [CODE:P0300] [Random misfire detected]
[2025-07-25T09:00:00Z] [VEHICLE_ID:5678] [INFO] [CODE:B1000] [Status check completed]
"""


def _reset_settings_state():
    """Reset the settings singleton so it re-reads the environment."""
    import fleet_diagnostics.config.settings as settings_module
    settings_module._settings = None


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the settings singleton at a temporary data file."""
    monkeypatch.setenv("FLEET_DATA_FILE", str(tmp_path / "data" / "diagnostic-logs.json"))
    _reset_settings_state()
    yield
    _reset_settings_state()


@pytest.fixture
def settings(tmp_path):
    """Settings bound to a temporary data file."""
    from fleet_diagnostics.config.settings import Settings
    return Settings(data_file=str(tmp_path / "data" / "diagnostic-logs.json"))


@pytest.fixture
def sample_logs():
    """Four well-formed log lines across two vehicles."""
    return SAMPLE_LOGS


@pytest.fixture
def log_parser():
    """Get LogLineParser instance."""
    from fleet_diagnostics.services.log_parser import LogLineParser
    return LogLineParser()


@pytest.fixture
def severity_classifier():
    """Get SeverityClassifier instance."""
    from fleet_diagnostics.services.severity_classifier import SeverityClassifier
    return SeverityClassifier()


@pytest.fixture
def log_ingestor():
    """Get LogIngestor instance."""
    from fleet_diagnostics.services.ingestion import LogIngestor
    return LogIngestor()


@pytest.fixture
def data_file(tmp_path):
    """Path of a not-yet-created data file."""
    return tmp_path / "data" / "diagnostic-logs.json"


@pytest.fixture
def log_store(data_file):
    """Empty, loaded LogStore on a temporary file."""
    from fleet_diagnostics.services.log_store import LogStore
    store = LogStore(data_file)
    store.load()
    return store


@pytest.fixture
def diagnostic_service(settings):
    """DiagnosticService backed by a temporary data file."""
    from fleet_diagnostics.services.diagnostic_service import DiagnosticService
    return DiagnosticService.from_settings(settings)


@pytest.fixture
def loaded_service(diagnostic_service, sample_logs):
    """DiagnosticService with the sample logs uploaded."""
    diagnostic_service.upload_content(sample_logs)
    return diagnostic_service


@pytest.fixture
def app(settings, diagnostic_service):
    """Flask app wired to the temporary service."""
    from fleet_diagnostics.api import create_app
    flask_app = create_app(settings, diagnostic_service)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()
