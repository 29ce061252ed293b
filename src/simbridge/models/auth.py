from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel

# ---------------------------------------------------------------------------
# Login endpoints
# ---------------------------------------------------------------------------

DEFAULT_LOGIN_URL: str = "http://localhost:3000/ui/login_console"
DEFAULT_API_URL: str = "http://localhost:8080"
DEFAULT_PORT: int = 9999
CALLBACK_PATH: str = "/oauth2/callback"
DEFAULT_TOKEN_FILENAME: str = "token.jwt"

# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class TokenSource(StrEnum):
    """Where the bearer token held by a session came from."""

    CACHED = "cached"
    FRESH = "fresh"


class UserInfo(BaseModel):
    """Response body of ``GET /api/user/me``."""

    id: int
    name: str | None = None
    email: str | None = None
