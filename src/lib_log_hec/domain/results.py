"""Delivery outcome reported back to the host buffering layer.

Purpose
-------
Represent the only value a delivery cycle returns: ``Delivered``,
``DeliveredUnconfirmed`` or ``Failed(reason)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class DeliveryStatus(Enum):
    """Terminal status of one delivery cycle."""

    DELIVERED = "delivered"
    DELIVERED_UNCONFIRMED = "delivered-unconfirmed"
    FAILED = "failed"


class FailureReason(Enum):
    """Distinguishing reasons attached to ``Failed`` results."""

    SERIALIZATION = "serialization"
    TRANSPORT = "transport"
    HTTP_STATUS = "http-status"
    MALFORMED_RESPONSE = "malformed-response"
    ACK_TIMEOUT = "ack-timeout"


@dataclass(slots=True, frozen=True)
class DeliveryResult:
    """Immutable result of one delivery cycle.

    Attributes
    ----------
    status:
        :class:`DeliveryStatus` of the cycle.
    reason:
        :class:`FailureReason` when ``status`` is ``FAILED``, else ``None``.
    detail:
        Human readable explanation, empty for successful cycles.
    ack_id:
        Acknowledgement identifier returned by the collector, when one was
        requested.

    Examples
    --------
    >>> DeliveryResult.delivered().ok
    True
    >>> DeliveryResult.failed(FailureReason.ACK_TIMEOUT, "no receipt").reason.value
    'ack-timeout'
    """

    status: DeliveryStatus
    reason: FailureReason | None = None
    detail: str = ""
    ack_id: Any = None

    def __post_init__(self) -> None:
        if (self.status is DeliveryStatus.FAILED) != (self.reason is not None):
            raise ValueError("reason must be set exactly when status is FAILED")

    @classmethod
    def delivered(cls, *, ack_id: Any = None) -> "DeliveryResult":
        return cls(DeliveryStatus.DELIVERED, ack_id=ack_id)

    @classmethod
    def unconfirmed(cls, *, ack_id: Any = None, detail: str = "") -> "DeliveryResult":
        return cls(DeliveryStatus.DELIVERED_UNCONFIRMED, detail=detail, ack_id=ack_id)

    @classmethod
    def failed(cls, reason: FailureReason, detail: str = "", *, ack_id: Any = None) -> "DeliveryResult":
        return cls(DeliveryStatus.FAILED, reason=reason, detail=detail, ack_id=ack_id)

    @property
    def ok(self) -> bool:
        """Return ``True`` when the collector accepted the payload."""

        return self.status is not DeliveryStatus.FAILED

    def to_dict(self) -> dict[str, Any]:
        """Serialize the result for diagnostics and CLI rendering."""

        data: dict[str, Any] = {"status": self.status.value}
        if self.reason is not None:
            data["reason"] = self.reason.value
        if self.detail:
            data["detail"] = self.detail
        if self.ack_id is not None:
            data["ack_id"] = self.ack_id
        return data


__all__ = ["DeliveryResult", "DeliveryStatus", "FailureReason"]
