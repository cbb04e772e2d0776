"""Console adapters used by the CLI host."""

from __future__ import annotations

from .rich_report import RichResultReporter

__all__ = ["RichResultReporter"]
