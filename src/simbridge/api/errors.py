"""Exception hierarchy shared by the API, auth and simulator layers."""

from __future__ import annotations


class SimBridgeError(Exception):
    """Base class for all simbridge errors."""


class ConfigError(SimBridgeError):
    """Missing or invalid configuration."""


class AuthError(SimBridgeError):
    """Authentication could not produce a verified bearer token."""

    def __init__(self, message: str = "", *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ApiError(SimBridgeError):
    """The ingestion service answered with a non-success status."""

    def __init__(self, message: str = "", *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NetworkError(SimBridgeError):
    """The ingestion service could not be reached."""


class SimConnectError(SimBridgeError):
    """The simulator connection failed and cannot recover."""

    def __init__(self, message: str = "", *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class SchemaError(SimBridgeError):
    """A record schema is malformed or conflicts with a registered one."""


class DecodeError(SimBridgeError):
    """A payload does not match the schema it was requested with."""


class AircraftResolutionError(SimBridgeError):
    """No aircraft id could be obtained, so telemetry cannot be attributed."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Aircraft id for {name!r} could not be resolved")
        self.name = name
