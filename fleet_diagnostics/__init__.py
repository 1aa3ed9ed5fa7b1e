"""Vehicle fleet diagnostic log ingestion and query service."""

__version__ = "1.0.0"
