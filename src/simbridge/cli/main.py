"""CLI entry-point: Click command group and dispatch."""

from __future__ import annotations

import dataclasses
import logging

import click
from rich.logging import RichHandler

from simbridge.api.errors import (
    AircraftResolutionError,
    AuthError,
    ConfigError,
    SimConnectError,
)
from simbridge.output.formatter import OutputFormatter

# ---------------------------------------------------------------------------
# Application context (stored in ctx.obj)
# ---------------------------------------------------------------------------


@dataclasses.dataclass
class AppContext:
    """Shared state passed to every Click command via ``@click.pass_obj``."""

    output_format: str | None
    verbose: bool
    api_url: str | None = None
    token_file: str | None = None
    _formatter: OutputFormatter | None = dataclasses.field(default=None, repr=False)

    @property
    def formatter(self) -> OutputFormatter:
        if self._formatter is None:
            self._formatter = OutputFormatter(force_format=self.output_format)
        return self._formatter

    def settings_overrides(self) -> dict[str, str]:
        """Global options that take precedence over environment settings."""
        overrides: dict[str, str] = {}
        if self.api_url:
            overrides["api_url"] = self.api_url
        if self.token_file:
            overrides["token_file"] = self.token_file
        return overrides


def configure_logging(verbose: bool) -> None:
    """Route log records through Rich on stderr.

    ``--verbose`` shows DEBUG from simbridge; otherwise only warnings.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(show_path=False, rich_tracebacks=verbose)
    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=[handler])
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


# ---------------------------------------------------------------------------
# Root Click group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["rich", "json", "quiet"]),
    default=None,
    help="Output format (default: auto-detect)",
)
@click.option("--verbose", is_flag=True, default=False, help="Enable verbose logging")
@click.option("--api-url", default=None, help="Ingestion service base URL")
@click.option(
    "--token-file",
    default=None,
    type=click.Path(dir_okay=False),
    help="Where the bearer token is cached",
)
@click.pass_context
def cli(
    ctx: click.Context,
    output_format: str | None,
    verbose: bool,
    api_url: str | None,
    token_file: str | None,
) -> None:
    """Forward Flight Simulator telemetry to an ingestion service."""
    configure_logging(verbose)
    ctx.obj = AppContext(
        output_format=output_format,
        verbose=verbose,
        api_url=api_url,
        token_file=token_file,
    )


# ---------------------------------------------------------------------------
# Register subcommand groups
# ---------------------------------------------------------------------------


def _register_commands() -> None:
    """Import and attach all subcommands to the root CLI."""
    from simbridge.cli.auth import auth_group
    from simbridge.cli.run import run_cmd, schema_cmd, simulate_cmd

    cli.add_command(auth_group)
    cli.add_command(run_cmd)
    cli.add_command(simulate_cmd)
    cli.add_command(schema_cmd)


_register_commands()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """Parse arguments and dispatch to the appropriate command handler."""
    try:
        cli(args=argv, standalone_mode=False)
    except click.exceptions.Exit as exc:
        raise SystemExit(exc.exit_code) from None
    except click.exceptions.Abort:
        raise SystemExit(1) from None
    except click.exceptions.ClickException as exc:
        exc.show()
        raise SystemExit(exc.exit_code) from None
    except KeyboardInterrupt:
        raise SystemExit(130) from None
    except SystemExit:
        raise
    except Exception as exc:
        app_ctx = _extract_app_ctx()
        formatter = app_ctx.formatter if app_ctx else OutputFormatter()
        cmd_name = _get_command_name()

        formatter.output_error(
            code=_error_code(exc),
            message=_error_message(exc),
            command=cmd_name,
        )
        raise SystemExit(1) from exc


# ---------------------------------------------------------------------------
# Helpers for error handling
# ---------------------------------------------------------------------------


def _extract_app_ctx() -> AppContext | None:
    ctx = click.get_current_context(silent=True)
    while ctx is not None:
        if isinstance(ctx.obj, AppContext):
            return ctx.obj
        ctx = ctx.parent
    return None


def _get_command_name() -> str:
    """Reconstruct a dotted command name from the Click context chain."""
    ctx = click.get_current_context(silent=True)
    parts: list[str] = []
    while ctx is not None:
        if ctx.info_name and ctx.info_name != "cli":
            parts.append(ctx.info_name)
        ctx = ctx.parent
    return ".".join(reversed(parts)) or "unknown"


_ERROR_CODES: tuple[tuple[type[Exception], str], ...] = (
    (AuthError, "auth_failed"),
    (SimConnectError, "simconnect_failed"),
    (AircraftResolutionError, "aircraft_unresolved"),
    (ConfigError, "config_error"),
)


def _error_code(exc: Exception) -> str:
    for exc_type, code in _ERROR_CODES:
        if isinstance(exc, exc_type):
            return code
    return type(exc).__name__


def _error_message(exc: Exception) -> str:
    """Append a next step to the messages users can act on."""
    message = str(exc) or type(exc).__name__
    if isinstance(exc, AuthError):
        return f"{message} Run 'simbridge auth login' to sign in again."
    if isinstance(exc, SimConnectError):
        return f"{message} Is Flight Simulator running?"
    return message
