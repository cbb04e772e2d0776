"""Public package surface for delivering log batches to an HTTP Event Collector.

Hosts call :func:`init` once, hand each buffered batch to :func:`deliver`, and
act on the returned :class:`DeliveryResult`. The pure formatting helpers are
exported for hosts that assemble payloads themselves.
"""

from __future__ import annotations

from .application.use_cases import assemble_payload, format_event, format_raw
from .domain import (
    AckTimeoutError,
    BatchEntry,
    ConfigurationError,
    DeliveryConfig,
    DeliveryError,
    DeliveryResult,
    DeliveryStatus,
    FailureReason,
    ProtocolError,
    SerializationError,
    TransportError,
)
from .runtime import (
    RuntimeSnapshot,
    build_delivery_config,
    build_runtime,
    deliver,
    init,
    inspect_runtime,
    is_initialised,
    shutdown,
    summary_info,
)

__all__ = [
    "AckTimeoutError",
    "BatchEntry",
    "ConfigurationError",
    "DeliveryConfig",
    "DeliveryError",
    "DeliveryResult",
    "DeliveryStatus",
    "FailureReason",
    "ProtocolError",
    "RuntimeSnapshot",
    "SerializationError",
    "TransportError",
    "assemble_payload",
    "build_delivery_config",
    "build_runtime",
    "deliver",
    "format_event",
    "format_raw",
    "init",
    "inspect_runtime",
    "is_initialised",
    "shutdown",
    "summary_info",
]
