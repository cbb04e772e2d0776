"""Rich-powered rendering of delivery results and configurations.

Purpose
-------
Give the CLI host a readable summary of what the pipeline did without leaking
Rich into the application layer.

Contents
--------
* :data:`_STATUS_STYLES` - default status-to-style mapping.
* :class:`RichResultReporter` - renders :class:`DeliveryResult` and
  :class:`DeliveryConfig` objects.
"""

from __future__ import annotations

from typing import Mapping

from rich.console import Console
from rich.table import Table

from lib_log_hec.domain.results import DeliveryResult, DeliveryStatus
from lib_log_hec.domain.settings import DeliveryConfig

#: Default Rich styles keyed by :class:`DeliveryStatus`.
_STATUS_STYLES: Mapping[DeliveryStatus, str] = {
    DeliveryStatus.DELIVERED: "green",
    DeliveryStatus.DELIVERED_UNCONFIRMED: "yellow",
    DeliveryStatus.FAILED: "bold red",
}


class RichResultReporter:
    """Print delivery outcomes and settings with Rich."""

    def __init__(self, *, console: Console | None = None, force_color: bool = False, no_color: bool = False) -> None:
        if console is not None:
            self._console = console
        else:
            self._console = Console(force_terminal=force_color, no_color=no_color)
        self._no_color = no_color

    def report(self, result: DeliveryResult, *, records: int) -> None:
        """Print one line summarising ``result``.

        Examples
        --------
        >>> from io import StringIO
        >>> console = Console(file=StringIO(), record=True)
        >>> RichResultReporter(console=console).report(DeliveryResult.delivered(ack_id=3), records=2)
        >>> console.export_text().strip()
        'delivered records=2 ack_id=3'
        """

        style = "" if self._no_color else _STATUS_STYLES[result.status]
        self._console.print(self._format_line(result, records), style=style, highlight=False)

    def show_config(self, config: DeliveryConfig) -> None:
        """Render ``config`` as a two-column table with secrets masked."""

        table = Table(title=f"HEC delivery settings ({config.base_url})", show_header=True)
        table.add_column("option")
        table.add_column("value")
        for key, value in config.to_dict(mask_secrets=True).items():
            table.add_row(key, "" if value is None else repr(value) if isinstance(value, str) else str(value))
        self._console.print(table)

    @staticmethod
    def _format_line(result: DeliveryResult, records: int) -> str:
        parts = [result.status.value, f"records={records}"]
        if result.reason is not None:
            parts.append(f"reason={result.reason.value}")
        if result.ack_id is not None:
            parts.append(f"ack_id={result.ack_id}")
        if result.detail:
            parts.append(f"detail={result.detail}")
        return " ".join(parts)


__all__ = ["RichResultReporter"]
