"""Concrete adapters for the delivery pipeline ports."""

from __future__ import annotations

from .console import RichResultReporter
from .http_collector import HecHttpCollector

__all__ = ["HecHttpCollector", "RichResultReporter"]
