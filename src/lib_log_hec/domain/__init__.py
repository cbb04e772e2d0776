"""Domain values used by the delivery pipeline."""

from __future__ import annotations

from .ack import AckHandle, AckOutcome, AckState
from .errors import (
    AckTimeoutError,
    ConfigurationError,
    DeliveryError,
    ProtocolError,
    SerializationError,
    TransportError,
)
from .records import Batch, BatchEntry, Record, Timestamp, iter_entries, to_epoch
from .results import DeliveryResult, DeliveryStatus, FailureReason
from .settings import DeliveryConfig

__all__ = [
    "AckHandle",
    "AckOutcome",
    "AckState",
    "AckTimeoutError",
    "Batch",
    "BatchEntry",
    "ConfigurationError",
    "DeliveryConfig",
    "DeliveryError",
    "DeliveryResult",
    "DeliveryStatus",
    "FailureReason",
    "ProtocolError",
    "Record",
    "SerializationError",
    "Timestamp",
    "TransportError",
    "iter_entries",
    "to_epoch",
]
