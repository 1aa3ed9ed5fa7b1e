"""Configuration for the fleet diagnostics service."""
