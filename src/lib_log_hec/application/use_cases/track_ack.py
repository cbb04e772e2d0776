"""Acknowledgement tracker polling the collector for indexing receipts.

Purpose
-------
Drive one :class:`AckHandle` from ``PENDING`` to ``CONFIRMED`` or
``ABANDONED`` with a strictly bounded number of poll requests.

Contents
--------
* :func:`is_acknowledged` - read one identifier from an ack poll response.
* :class:`AckTracker` - the bounded poll loop.

System Role
-----------
Invoked by :func:`lib_log_hec.application.use_cases.deliver_batch.create_deliver_batch`
only when acknowledgement is enabled and the collector returned an ``ackId``.
The wait between polls blocks the calling thread.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any

from lib_log_hec.application.ports.collector import CollectorPort
from lib_log_hec.application.ports.time import SleeperPort
from lib_log_hec.domain.ack import AckHandle, AckOutcome, AckState
from lib_log_hec.domain.errors import ProtocolError

logger = logging.getLogger(__name__)


def is_acknowledged(response: Mapping[str, Any], handle: AckHandle) -> bool:
    """Return ``True`` when ``response`` confirms ``handle``.

    Examples
    --------
    >>> is_acknowledged({'acks': {'42': True}}, AckHandle(42))
    True
    >>> is_acknowledged({'acks': {'42': False}}, AckHandle(42))
    False
    >>> is_acknowledged({}, AckHandle(42))
    False
    """

    acks = response.get("acks")
    if acks is None:
        return False
    if not isinstance(acks, Mapping):
        raise ProtocolError(f"ack response field 'acks' must be an object, got {type(acks).__name__}")
    return acks.get(handle.key) is True


class AckTracker:
    """Poll the ack endpoint until confirmation or retry exhaustion.

    ``retry_limit`` counts re-polls, so at most ``retry_limit + 1`` requests are
    issued and ``interval`` seconds elapse between consecutive requests.

    Examples
    --------
    >>> class _Collector:
    ...     def __init__(self):
    ...         self.responses = [{'acks': {'7': False}}, {'acks': {'7': True}}]
    ...     def poll_acks(self, ack_ids):
    ...         return self.responses.pop(0)
    >>> waits = []
    >>> tracker = AckTracker(_Collector(), interval=0.5, retry_limit=3, sleeper=waits.append)
    >>> tracker.track(AckHandle(7))
    AckOutcome(state=<AckState.CONFIRMED: 'confirmed'>, attempts=2)
    >>> waits
    [0.5]
    """

    def __init__(
        self,
        collector: CollectorPort,
        *,
        interval: float,
        retry_limit: int,
        sleeper: SleeperPort,
        cancel: threading.Event | None = None,
    ) -> None:
        if interval < 0:
            raise ValueError("interval must be non negative")
        if retry_limit < 0:
            raise ValueError("retry_limit must be non negative")
        self._collector = collector
        self._interval = interval
        self._retry_limit = retry_limit
        self._sleeper = sleeper
        self._cancel = cancel

    def track(self, handle: AckHandle) -> AckOutcome:
        """Poll for ``handle`` and return the terminal (or cancelled) outcome.

        A set cancellation event stops the loop before the next poll and
        leaves the state ``PENDING``. Pass ``cancel.wait`` as ``sleeper`` to
        also interrupt the pause between polls.
        """

        state = AckState.PENDING
        attempts = 0
        remaining = self._retry_limit
        while not state.terminal:
            if self._cancelled():
                logger.info("ack tracking cancelled ack_id=%s attempts=%d", handle.ack_id, attempts)
                break
            response = self._collector.poll_acks([handle.ack_id])
            attempts += 1
            if is_acknowledged(response, handle):
                state = AckState.CONFIRMED
                logger.info("ack confirmed ack_id=%s attempts=%d", handle.ack_id, attempts)
            elif remaining <= 0:
                state = AckState.ABANDONED
                logger.warning("ack abandoned ack_id=%s attempts=%d", handle.ack_id, attempts)
            else:
                remaining -= 1
                logger.debug("ack pending ack_id=%s remaining=%d", handle.ack_id, remaining)
                self._wait()
        return AckOutcome(state=state, attempts=attempts)

    def _cancelled(self) -> bool:
        return self._cancel is not None and self._cancel.is_set()

    def _wait(self) -> None:
        self._sleeper(self._interval)


__all__ = ["AckTracker", "is_acknowledged"]
