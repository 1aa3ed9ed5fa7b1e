"""
Health check for the fleet diagnostics service: data file and configuration.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
import os

from ..config.settings import Settings, get_settings


class HealthStatus(Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    name: str
    status: HealthStatus
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "details": self.details,
        }


@dataclass
class SystemHealth:
    components: List[ComponentHealth]

    @property
    def status(self) -> HealthStatus:
        """Worst component status."""
        statuses = {c.status for c in self.components}
        for status in (HealthStatus.UNHEALTHY, HealthStatus.DEGRADED):
            if status in statuses:
                return status
        return HealthStatus.HEALTHY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "components": [c.to_dict() for c in self.components],
        }


class HealthChecker:
    """Reports whether the data file is usable and the configuration valid."""

    def __init__(self, settings: Optional[Settings] = None, store=None):
        self.settings = settings or get_settings()
        self.store = store

    def check_all(self) -> SystemHealth:
        return SystemHealth([self.check_storage(), self.check_configuration()])

    def check_storage(self) -> ComponentHealth:
        path = self.store.path if self.store is not None else self.settings.data_path
        details: Dict[str, Any] = {"path": str(path)}
        if self.store is not None:
            details["entries"] = self.store.count()

        if not os.access(path.parent, os.W_OK):
            status, message = HealthStatus.UNHEALTHY, "Data directory missing or not writable"
        elif not path.exists():
            status, message = HealthStatus.DEGRADED, "Data file has not been created yet"
        elif not os.access(path, os.R_OK):
            status, message = HealthStatus.UNHEALTHY, "Data file is not readable"
        else:
            status, message = HealthStatus.HEALTHY, "Data file accessible"
        return ComponentHealth("storage", status, message, details)

    def check_configuration(self) -> ComponentHealth:
        is_valid, errors = self.settings.validate()
        if is_valid:
            return ComponentHealth("configuration", HealthStatus.HEALTHY, "Configuration valid")
        return ComponentHealth(
            "configuration", HealthStatus.DEGRADED, "Configuration has problems", {"errors": errors}
        )
