"""Acknowledgement handle and tracker states."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class AckState(Enum):
    """States of the acknowledgement tracker."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    ABANDONED = "abandoned"

    @property
    def terminal(self) -> bool:
        return self is not AckState.PENDING


@dataclass(slots=True, frozen=True)
class AckHandle:
    """Opaque identifier returned by the collector for one ingest request.

    Examples
    --------
    >>> AckHandle(42).key
    '42'
    """

    ack_id: Any

    def __post_init__(self) -> None:
        if self.ack_id is None or isinstance(self.ack_id, (bool, dict, list)):
            raise ValueError("ack_id must be a scalar identifier")

    @property
    def key(self) -> str:
        """Return the string form used as key in ack poll responses."""

        return str(self.ack_id)


@dataclass(slots=True, frozen=True)
class AckOutcome:
    """Final tracker state and number of poll requests issued."""

    state: AckState
    attempts: int


__all__ = ["AckHandle", "AckOutcome", "AckState"]
