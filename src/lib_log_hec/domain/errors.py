"""Error taxonomy for the delivery pipeline.

Purpose
-------
Give every failure path a typed exception so the delivery use case can turn it
into a :class:`~lib_log_hec.domain.results.DeliveryResult` with a
distinguishing reason.

Contents
--------
* :class:`ConfigurationError` - raised at startup, fatal.
* :class:`DeliveryError` and its subclasses - raised during one delivery cycle
  and converted into ``Failed`` results.
"""

from __future__ import annotations

from .results import FailureReason


class ConfigurationError(ValueError):
    """Invalid or missing option combination detected while resolving settings."""


class DeliveryError(Exception):
    """Base class for failures that abort the current delivery cycle."""

    reason: FailureReason = FailureReason.TRANSPORT

    def __init__(self, message: str, *, reason: FailureReason | None = None) -> None:
        super().__init__(message)
        if reason is not None:
            self.reason = reason


class SerializationError(DeliveryError):
    """A record could not be converted to the collector wire format."""

    reason = FailureReason.SERIALIZATION


class TransportError(DeliveryError):
    """Connection refused, timeout, or TLS failure while talking to the collector."""

    reason = FailureReason.TRANSPORT


class ProtocolError(DeliveryError):
    """Unexpected HTTP status, unparsable body, or missing ack identifier."""

    reason = FailureReason.MALFORMED_RESPONSE


class AckTimeoutError(DeliveryError):
    """Acknowledgement retries were exhausted without confirmation."""

    reason = FailureReason.ACK_TIMEOUT


__all__ = [
    "AckTimeoutError",
    "ConfigurationError",
    "DeliveryError",
    "ProtocolError",
    "SerializationError",
    "TransportError",
]
