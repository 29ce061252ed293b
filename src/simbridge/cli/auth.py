"""CLI commands for authentication (login, status, logout)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from simbridge._internal.async_utils import run_async
from simbridge.auth.oauth import verify_token
from simbridge.cli._client import get_auth_session, get_settings, get_token_store

if TYPE_CHECKING:
    from simbridge.cli.main import AppContext

auth_group = click.Group("auth", help="Authentication commands")


@auth_group.command("login")
@click.option("--port", type=int, default=None, help="Local callback port")
@click.pass_obj
def login_cmd(app_ctx: AppContext, port: int | None) -> None:
    """Sign in through the browser and cache the token."""
    run_async(_cmd_login(app_ctx, port))


async def _cmd_login(app_ctx: AppContext, port: int | None) -> None:
    formatter = app_ctx.formatter
    settings = get_settings(app_ctx, callback_port=port)
    session = await get_auth_session(app_ctx, settings).login()

    if formatter.format == "json":
        formatter.output(
            {"status": "logged_in", "user": session.user, "token_file": str(settings.token_path)},
            command="auth.login",
        )
    else:
        formatter.rich.info("[bold green]Login successful![/bold green]")
        if session.user is not None:
            formatter.rich.user_info(session.user, source=session.source.value)
        formatter.rich.info(f"[dim]Token saved to {settings.token_path}[/dim]")


@auth_group.command("status")
@click.pass_obj
def status_cmd(app_ctx: AppContext) -> None:
    """Check the cached token against the service."""
    run_async(_cmd_status(app_ctx))


async def _cmd_status(app_ctx: AppContext) -> None:
    formatter = app_ctx.formatter
    settings = get_settings(app_ctx)
    token = get_token_store(settings).load()

    user = None
    if token:
        user = await verify_token(settings.api_url, token, timeout=settings.request_timeout)

    if formatter.format == "json":
        formatter.output(
            {
                "authenticated": user is not None,
                "cached_token": token is not None,
                "user": user,
                "token_file": str(settings.token_path),
            },
            command="auth.status",
        )
        return

    if token is None:
        formatter.rich.info("Not logged in.")
    elif user is None:
        formatter.rich.info("[yellow]A cached token exists but the service rejected it.[/yellow]")
        formatter.rich.info("Run [cyan]simbridge auth login[/cyan] to sign in again.")
    else:
        formatter.rich.user_info(user, source="cached")


@auth_group.command("logout")
@click.pass_obj
def logout_cmd(app_ctx: AppContext) -> None:
    """Delete the cached token."""
    formatter = app_ctx.formatter
    settings = get_settings(app_ctx)
    removed = get_token_store(settings).clear()

    if formatter.format == "json":
        formatter.output({"status": "logged_out", "removed": removed}, command="auth.logout")
    elif removed:
        formatter.rich.info("Token cleared.")
    else:
        formatter.rich.info("No cached token.")
