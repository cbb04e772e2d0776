"""Protocols implemented by adapters."""

from __future__ import annotations

from .collector import CollectorPort
from .time import ClockPort, SleeperPort

__all__ = ["ClockPort", "CollectorPort", "SleeperPort"]
