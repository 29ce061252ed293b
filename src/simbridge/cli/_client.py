"""Shared helpers for building settings, the token store and an authenticated session."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from simbridge.auth.session import AuthSession
from simbridge.auth.token_store import TokenStore
from simbridge.models.config import AppSettings

if TYPE_CHECKING:
    from simbridge.cli.main import AppContext
    from simbridge.session import BridgeSession


def get_settings(app_ctx: AppContext, **overrides: Any) -> AppSettings:
    """Build :class:`AppSettings`; global and command options beat the environment."""
    values: dict[str, Any] = dict(app_ctx.settings_overrides())
    values.update({k: v for k, v in overrides.items() if v is not None})
    return AppSettings(**values)


def get_token_store(settings: AppSettings) -> TokenStore:
    return TokenStore(settings.token_path)


def get_auth_session(app_ctx: AppContext, settings: AppSettings) -> AuthSession:
    """Build an :class:`AuthSession` that tells the user before opening the browser."""
    formatter = app_ctx.formatter

    def _prompt(url: str) -> None:
        if formatter.format == "json":
            return
        formatter.rich.info("[cyan]You will now be taken to your browser for authentication[/cyan]")
        formatter.rich.info(f"[dim]If the browser doesn't open, visit:[/dim] {url}")

    return AuthSession(settings, get_token_store(settings), on_prompt=_prompt)


async def authenticate(app_ctx: AppContext, settings: AppSettings) -> BridgeSession:
    """Run the auth state machine and show who we are signed in as."""
    session = await get_auth_session(app_ctx, settings).authenticate()
    formatter = app_ctx.formatter
    if formatter.format != "json" and session.user is not None:
        formatter.rich.user_info(session.user, source=session.source.value)
    return session
