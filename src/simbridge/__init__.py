"""simbridge: forward flight-simulator telemetry to an ingestion service."""

__version__ = "0.1.0"
