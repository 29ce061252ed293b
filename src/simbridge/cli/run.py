"""CLI commands that move telemetry: ``run``, ``simulate`` and ``schema``."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import click

from simbridge._internal.async_utils import install_stop_signals, run_async
from simbridge.bridge import run_bridge, run_synthetic
from simbridge.cli._client import authenticate, get_settings
from simbridge.simconnect.native import NativeSimConnection
from simbridge.telemetry.schema import REPORT_SCHEMA
from simbridge.telemetry.synthetic import SyntheticFeed

if TYPE_CHECKING:
    from collections.abc import Callable

    from simbridge.bridge import BridgeStats
    from simbridge.cli.main import AppContext
    from simbridge.models.telemetry import PositionReport
    from simbridge.output.formatter import OutputFormatter
    from simbridge.telemetry.report import TelemetryReport


def _report_printer(
    formatter: OutputFormatter,
) -> Callable[[TelemetryReport, PositionReport | None], None]:
    def _print(report: TelemetryReport, payload: PositionReport | None) -> None:
        if formatter.format == "rich":
            formatter.rich.report(report, payload)

    return _print


def _show_stats(formatter: OutputFormatter, stats: BridgeStats, command: str) -> None:
    if formatter.format == "json":
        formatter.output(stats, command=command)
    else:
        formatter.rich.stats(stats)


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


@click.command("run")
@click.option("--interval", type=float, default=None, help="Seconds between polls")
@click.option("--app-name", default=None, help="Name announced to SimConnect")
@click.pass_obj
def run_cmd(app_ctx: AppContext, interval: float | None, app_name: str | None) -> None:
    """Sign in, connect to the simulator and forward positions until interrupted."""
    run_async(_cmd_run(app_ctx, interval, app_name))


async def _cmd_run(app_ctx: AppContext, interval: float | None, app_name: str | None) -> None:
    formatter = app_ctx.formatter
    settings = get_settings(app_ctx, poll_interval=interval, app_name=app_name)
    session = await authenticate(app_ctx, settings)

    connection = NativeSimConnection(settings.app_name, dll_path=settings.simconnect_dll)
    stop = asyncio.Event()
    install_stop_signals(stop)

    if formatter.format != "json":
        formatter.rich.info("[dim]Polling the simulator. Press Ctrl-C to stop.[/dim]")
    stats = await run_bridge(
        connection,
        session,
        settings,
        stop=stop,
        on_report=_report_printer(formatter),
    )
    _show_stats(formatter, stats, "run")


# ---------------------------------------------------------------------------
# simulate
# ---------------------------------------------------------------------------


@click.command("simulate")
@click.option("--count", type=int, default=None, help="Reports to send (default: until Ctrl-C)")
@click.option(
    "--interval", type=float, default=1.0, show_default=True, help="Seconds between reports"
)
@click.option(
    "--title", default="simbridge test aircraft", show_default=True, help="Aircraft title"
)
@click.option("--lat", "latitude", type=float, default=None, help="Fixed latitude")
@click.option("--lon", "longitude", type=float, default=None, help="Fixed longitude")
@click.pass_obj
def simulate_cmd(
    app_ctx: AppContext,
    count: int | None,
    interval: float,
    title: str,
    latitude: float | None,
    longitude: float | None,
) -> None:
    """Send a synthetic position feed without a running simulator."""
    fixed = {"latitude": latitude, "longitude": longitude}
    feed = SyntheticFeed(title=title, **{k: v for k, v in fixed.items() if v is not None})
    run_async(_cmd_simulate(app_ctx, feed, count, interval))


async def _cmd_simulate(
    app_ctx: AppContext, feed: SyntheticFeed, count: int | None, interval: float
) -> None:
    formatter = app_ctx.formatter
    settings = get_settings(app_ctx)
    session = await authenticate(app_ctx, settings)

    stop = asyncio.Event()
    install_stop_signals(stop)
    stats = await run_synthetic(
        feed,
        session,
        settings,
        count=count,
        interval=interval,
        stop=stop,
        on_report=_report_printer(formatter),
    )
    _show_stats(formatter, stats, "simulate")


# ---------------------------------------------------------------------------
# schema
# ---------------------------------------------------------------------------


@click.command("schema")
@click.pass_obj
def schema_cmd(app_ctx: AppContext) -> None:
    """Show the fields polled from the simulator."""
    formatter = app_ctx.formatter
    if formatter.format == "json":
        formatter.output(
            {
                "name": REPORT_SCHEMA.name,
                "size": REPORT_SCHEMA.size,
                "fields": [
                    {
                        "name": entry.spec.name,
                        "sim_var": entry.spec.sim_var,
                        "unit": entry.spec.unit,
                        "type": entry.spec.kind.name,
                        "offset": entry.offset,
                    }
                    for entry in REPORT_SCHEMA.layout
                ],
            },
            command="schema",
        )
    else:
        formatter.rich.schema(REPORT_SCHEMA)
