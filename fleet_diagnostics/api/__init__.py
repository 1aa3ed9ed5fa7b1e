"""HTTP API for the fleet diagnostics service."""

from .app import create_app

__all__ = ["create_app"]
