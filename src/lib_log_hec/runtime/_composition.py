"""Runtime composition wiring the collector adapter into the delivery use case."""

from __future__ import annotations

import threading
from datetime import datetime, timezone

from lib_log_hec.adapters.http_collector import HecHttpCollector
from lib_log_hec.application.ports.collector import CollectorPort
from lib_log_hec.application.ports.time import ClockPort, SleeperPort
from lib_log_hec.application.use_cases.deliver_batch import DiagnosticHook, create_deliver_batch
from lib_log_hec.domain.settings import DeliveryConfig

from ._state import DeliveryRuntime


class SystemClock(ClockPort):
    """Concrete clock port returning timezone-aware UTC timestamps."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def build_runtime(
    config: DeliveryConfig,
    *,
    collector: CollectorPort | None = None,
    sleeper: SleeperPort | None = None,
    diagnostic: DiagnosticHook = None,
) -> DeliveryRuntime:
    """Assemble a :class:`DeliveryRuntime` from a validated configuration.

    ``collector`` defaults to :class:`HecHttpCollector`; ``sleeper`` defaults to
    a wait on the runtime cancel event so :func:`shutdown` interrupts ack polls.
    """

    cancel = threading.Event()

    def _interruptible_sleep(seconds: float) -> None:
        cancel.wait(seconds)

    resolved_collector = collector if collector is not None else HecHttpCollector(config)
    deliver = create_deliver_batch(
        config=config,
        collector=resolved_collector,
        sleeper=sleeper if sleeper is not None else _interruptible_sleep,
        cancel=cancel,
        diagnostic=diagnostic,
    )
    return DeliveryRuntime(config=config, collector=resolved_collector, deliver=deliver, cancel=cancel)


__all__ = ["SystemClock", "build_runtime"]
