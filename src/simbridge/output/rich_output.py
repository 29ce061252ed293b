from __future__ import annotations

from typing import TYPE_CHECKING

from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from rich.console import Console

    from simbridge.bridge import BridgeStats
    from simbridge.models.auth import UserInfo
    from simbridge.models.telemetry import PositionReport
    from simbridge.telemetry.report import TelemetryReport
    from simbridge.telemetry.schema import RecordSchema


class RichOutput:
    """Rich-based terminal output helpers for *simbridge*."""

    def __init__(self, console: Console) -> None:
        self._con = console

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def user_info(self, user: UserInfo, *, source: str | None = None) -> None:
        """Print a panel describing the authenticated user."""
        lines = [f"[bold]{user.name or 'unknown'}[/bold]"]
        if user.email:
            lines.append(user.email)
        lines.append(f"[dim]id {user.id}[/dim]")
        if source:
            lines.append(f"[dim]token: {source}[/dim]")
        self._con.print(Panel("\n".join(lines), title="Signed in", expand=False))

    # ------------------------------------------------------------------
    # Telemetry
    # ------------------------------------------------------------------

    def report(self, report: TelemetryReport, payload: PositionReport | None) -> None:
        """Print one line per polled report, marking whether it was sent."""
        mark = "[green]sent[/green]" if payload is not None else "[dim]held[/dim]"
        self._con.print(
            f"{mark}  {report.title}  "
            f"GPS [cyan]{report.latitude:.6f},{report.longitude:.6f}[/cyan]  "
            f"alt {report.altitude:.0f} ft  hdg {report.heading:.0f}°"
        )

    def schema(self, schema: RecordSchema) -> None:
        """Print the field table of *schema*."""
        table = Table(title=f"{schema.name} ({schema.size} bytes)")
        table.add_column("Offset", justify="right")
        table.add_column("Field", style="bold")
        table.add_column("Simulation variable", style="cyan")
        table.add_column("Unit")
        table.add_column("Type")

        for entry in schema.layout:
            spec = entry.spec
            table.add_row(
                str(entry.offset),
                spec.name,
                spec.sim_var,
                spec.unit or "",
                spec.kind.name,
            )

        self._con.print(table)

    def stats(self, stats: BridgeStats) -> None:
        """Print the end-of-run counters."""
        table = Table(title="Run summary")
        table.add_column("Counter", style="bold")
        table.add_column("Value", justify="right")
        for name, value in (
            ("Poll cycles", stats.cycles),
            ("Messages", stats.messages),
            ("Dropped", stats.dropped),
            ("Forwarded", stats.forwarded),
            ("Held (no fix)", stats.filtered),
            ("Failed", stats.failed),
            ("Aircraft", stats.aircraft),
        ):
            table.add_row(name, str(value))
        self._con.print(table)

    # ------------------------------------------------------------------
    # Generic
    # ------------------------------------------------------------------

    def info(self, message: str) -> None:
        self._con.print(message)

    def error(self, message: str) -> None:
        self._con.print(f"[bold red]Error:[/bold red] {message}")
