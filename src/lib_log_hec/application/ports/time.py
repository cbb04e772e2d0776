"""Ports for time and blocking waits."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class ClockPort(Protocol):
    """Provide the current timestamp."""

    def now(self) -> datetime: ...


@runtime_checkable
class SleeperPort(Protocol):
    """Block the calling thread for ``seconds``."""

    def __call__(self, seconds: float) -> None: ...


__all__ = ["ClockPort", "SleeperPort"]
