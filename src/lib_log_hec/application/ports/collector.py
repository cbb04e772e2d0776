"""Port describing the HTTP Event Collector endpoints."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CollectorPort(Protocol):
    """Send payloads to the collector and poll acknowledgement receipts.

    Implementations raise :class:`~lib_log_hec.domain.errors.TransportError`
    or :class:`~lib_log_hec.domain.errors.ProtocolError` instead of returning
    partial responses.
    """

    def send_events(self, payload: str) -> Mapping[str, Any]:
        """POST newline-delimited JSON events to ``/services/collector``."""

    def send_raw(self, payload: str, query: Mapping[str, str]) -> Mapping[str, Any]:
        """POST raw text to ``/services/collector/raw`` with ``query`` parameters."""

    def poll_acks(self, ack_ids: Sequence[Any]) -> Mapping[str, Any]:
        """POST ``{"acks": ack_ids}`` to ``/services/collector/ack``."""

    def close(self) -> None:
        """Release pooled connections."""


__all__ = ["CollectorPort"]
