from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any

from rich.console import Console

from simbridge.output.json_output import format_json_error, format_json_response
from simbridge.output.rich_output import RichOutput

if TYPE_CHECKING:
    from io import TextIOBase


class OutputFormatter:
    """Picks Rich or JSON output.

    *force_format* wins when given; otherwise a TTY gets ``"rich"`` and a
    pipe gets ``"json"``.  ``"quiet"`` sends Rich output to stderr.
    """

    def __init__(
        self,
        *,
        stream: TextIOBase | Any | None = None,
        force_format: str | None = None,
    ) -> None:
        self._stream = stream or sys.stdout
        if force_format is not None:
            self._format = force_format
        elif hasattr(self._stream, "isatty") and self._stream.isatty():
            self._format = "rich"
        else:
            self._format = "json"

        self._console = Console(stderr=True) if self._format == "quiet" else Console()
        self._rich = RichOutput(self._console)

    @property
    def format(self) -> str:  # noqa: A003
        return self._format

    @property
    def rich(self) -> RichOutput:
        return self._rich

    def output(self, data: Any, *, command: str) -> None:
        """Print *data* as a JSON envelope, or as plain text in Rich modes."""
        if self._format == "json":
            print(format_json_response(data=data, command=command))  # noqa: T201
        else:
            self._rich.info(str(data))

    def output_error(self, *, code: str, message: str, command: str) -> None:
        if self._format == "json":
            print(format_json_error(code=code, message=message, command=command))  # noqa: T201
        else:
            self._rich.error(message)
