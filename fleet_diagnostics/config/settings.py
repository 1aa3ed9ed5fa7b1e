"""
Application settings and configuration management.
Loads configuration from environment variables and .env file.
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Tuple, List
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

VALID_LEVELS = ("ERROR", "WARNING", "INFO", "DEBUG")


@dataclass
class Settings:
    """Application configuration settings."""

    # Storage
    data_file: str = field(
        default_factory=lambda: os.getenv(
            "FLEET_DATA_FILE", "./data/diagnostic-logs.json"
        )
    )

    # HTTP server
    host: str = field(default_factory=lambda: os.getenv("APP_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "3000")))
    api_prefix: str = "/api"
    cors_origin: str = field(
        default_factory=lambda: os.getenv("CORS_ORIGIN", "http://localhost:4200")
    )

    # Uploads
    max_upload_bytes: int = field(
        default_factory=lambda: int(os.getenv("MAX_UPLOAD_MB", "50")) * 1024 * 1024
    )
    allowed_extensions: Tuple[str, ...] = (".txt", ".log")

    # Severity classifier variants
    unknown_powertrain_level: str = field(
        default_factory=lambda: os.getenv("UNKNOWN_POWERTRAIN_LEVEL", "WARNING").upper()
    )
    manufacturer_powertrain_level: str = field(
        default_factory=lambda: os.getenv("MANUFACTURER_POWERTRAIN_LEVEL", "WARNING").upper()
    )

    # Application Settings
    app_debug: bool = field(
        default_factory=lambda: os.getenv("APP_DEBUG", "false").lower() == "true"
    )
    log_level: str = field(
        default_factory=lambda: os.getenv("APP_LOG_LEVEL", "INFO")
    )

    @property
    def data_path(self) -> Path:
        """Resolved path of the JSON data file."""
        path = Path(self.data_file)
        if not path.is_absolute():
            path = Path.cwd() / path
        return path

    def validate(self) -> Tuple[bool, List[str]]:
        """Validate configured values."""
        errors = []

        if self.unknown_powertrain_level not in VALID_LEVELS:
            errors.append(
                f"UNKNOWN_POWERTRAIN_LEVEL must be one of {', '.join(VALID_LEVELS)}"
            )
        if self.manufacturer_powertrain_level not in VALID_LEVELS:
            errors.append(
                f"MANUFACTURER_POWERTRAIN_LEVEL must be one of {', '.join(VALID_LEVELS)}"
            )
        if not 0 < self.port < 65536:
            errors.append("PORT must be between 1 and 65535")
        if self.max_upload_bytes <= 0:
            errors.append("MAX_UPLOAD_MB must be positive")

        return len(errors) == 0, errors


# Singleton instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the application settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
