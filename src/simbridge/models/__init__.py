from __future__ import annotations

from simbridge.models.auth import (
    CALLBACK_PATH,
    DEFAULT_API_URL,
    DEFAULT_LOGIN_URL,
    DEFAULT_PORT,
    TokenSource,
    UserInfo,
)
from simbridge.models.config import AppSettings
from simbridge.models.telemetry import INVALID_AIRCRAFT_ID, PositionReport

__all__ = [
    # auth
    "CALLBACK_PATH",
    "DEFAULT_API_URL",
    "DEFAULT_LOGIN_URL",
    "DEFAULT_PORT",
    "TokenSource",
    "UserInfo",
    # config
    "AppSettings",
    # telemetry
    "INVALID_AIRCRAFT_ID",
    "PositionReport",
]
