"""
Tests for configuration and health checks.
"""

from dataclasses import fields
from pathlib import Path

from fleet_diagnostics.config.settings import Settings, get_settings
from fleet_diagnostics.utils.health_check import HealthChecker, HealthStatus


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        for name in ("PORT", "APP_HOST", "MAX_UPLOAD_MB", "UNKNOWN_POWERTRAIN_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings()

        assert settings.port == 3000
        assert settings.host == "127.0.0.1"
        assert settings.api_prefix == "/api"
        assert settings.max_upload_bytes == 50 * 1024 * 1024
        assert settings.unknown_powertrain_level == "WARNING"
        assert settings.allowed_extensions == (".txt", ".log")

    def test_fields_are_the_documented_options(self):
        """Every field is a configurable option; nothing else rides along."""
        assert {f.name for f in fields(Settings)} == {
            "data_file", "host", "port", "api_prefix", "cors_origin",
            "max_upload_bytes", "allowed_extensions", "unknown_powertrain_level",
            "manufacturer_powertrain_level", "app_debug", "log_level",
        }

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("MAX_UPLOAD_MB", "2")
        monkeypatch.setenv("UNKNOWN_POWERTRAIN_LEVEL", "info")

        settings = Settings()

        assert settings.port == 8080
        assert settings.max_upload_bytes == 2 * 1024 * 1024
        assert settings.unknown_powertrain_level == "INFO"

    def test_data_file_from_environment(self, tmp_path):
        settings = get_settings()

        assert settings.data_path == tmp_path / "data" / "diagnostic-logs.json"

    def test_relative_data_path_resolves_against_cwd(self):
        settings = Settings(data_file="logs.json")

        assert settings.data_path == Path.cwd() / "logs.json"

    def test_singleton(self):
        assert get_settings() is get_settings()

    def test_validate_ok(self, settings):
        assert settings.validate() == (True, [])

    def test_validate_errors(self):
        settings = Settings(port=0, unknown_powertrain_level="LOUD", max_upload_bytes=0)

        is_valid, errors = settings.validate()

        assert is_valid is False
        assert len(errors) == 3


class TestHealthChecker:
    """Tests for component health reporting."""

    def test_storage_healthy_after_load(self, settings, log_store):
        checker = HealthChecker(settings, log_store)

        result = checker.check_storage()

        assert result.status == HealthStatus.HEALTHY
        assert result.details["entries"] == 0

    def test_storage_missing_directory(self, tmp_path):
        settings = Settings(data_file=str(tmp_path / "missing" / "logs.json"))

        result = HealthChecker(settings).check_storage()

        assert result.status == HealthStatus.UNHEALTHY

    def test_storage_file_not_created(self, tmp_path):
        settings = Settings(data_file=str(tmp_path / "logs.json"))

        result = HealthChecker(settings).check_storage()

        assert result.status == HealthStatus.DEGRADED

    def test_configuration_problems_degrade(self):
        settings = Settings(port=70000)

        result = HealthChecker(settings).check_configuration()

        assert result.status == HealthStatus.DEGRADED
        assert result.details["errors"]

    def test_check_all(self, settings, log_store):
        report = HealthChecker(settings, log_store).check_all()

        data = report.to_dict()
        assert len(data["components"]) == 2
        assert data["status"] == HealthStatus.HEALTHY.value

    def test_check_all_reports_worst_status(self, tmp_path):
        settings = Settings(data_file=str(tmp_path / "logs.json"), port=0)

        report = HealthChecker(settings).check_all()

        assert report.status == HealthStatus.DEGRADED
