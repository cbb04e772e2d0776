"""Runtime state container and access helpers."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from threading import RLock

from lib_log_hec.application.ports.collector import CollectorPort
from lib_log_hec.application.use_cases.deliver_batch import DeliverCallable
from lib_log_hec.domain.settings import DeliveryConfig


@dataclass(slots=True)
class DeliveryRuntime:
    """Aggregate of live collaborators assembled by the composition root."""

    config: DeliveryConfig
    collector: CollectorPort
    deliver: DeliverCallable
    cancel: threading.Event

    def close(self) -> None:
        """Stop pending ack waits and release the collector session."""
        self.cancel.set()
        self.collector.close()


_STATE: DeliveryRuntime | None = None
_STATE_LOCK = RLock()


def set_runtime(runtime: DeliveryRuntime) -> None:
    """Install ``runtime`` as the active singleton."""

    with _STATE_LOCK:
        global _STATE
        _STATE = runtime


def clear_runtime() -> DeliveryRuntime | None:
    """Remove and return the active runtime if present."""

    with _STATE_LOCK:
        global _STATE
        runtime, _STATE = _STATE, None
        return runtime


def current_runtime() -> DeliveryRuntime:
    """Return the active runtime or raise when uninitialised."""

    with _STATE_LOCK:
        if _STATE is None:
            raise RuntimeError("lib_log_hec.init() must be called before delivering batches")
        return _STATE


def is_initialised() -> bool:
    """Return ``True`` when :func:`lib_log_hec.init` has been called."""

    with _STATE_LOCK:
        return _STATE is not None


__all__ = [
    "DeliveryRuntime",
    "clear_runtime",
    "current_runtime",
    "is_initialised",
    "set_runtime",
]
