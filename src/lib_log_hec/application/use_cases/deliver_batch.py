"""Use case orchestrating one delivery cycle for a buffered batch.

Purpose
-------
Tie together the batch assembler, the collector port, and the acknowledgement
tracker, returning a :class:`DeliveryResult` for every outcome.

Contents
--------
* :func:`extract_ack_handle` - read ``ackId`` from an ingest response.
* :func:`create_deliver_batch` factory returning the per-batch callable.

System Role
-----------
Application-layer orchestrator invoked by :func:`lib_log_hec.runtime.deliver`.
Retry and requeue of failed batches stay with the host buffering layer.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any

from lib_log_hec.application.ports.collector import CollectorPort
from lib_log_hec.application.ports.time import SleeperPort
from lib_log_hec.domain.ack import AckHandle, AckState
from lib_log_hec.domain.errors import AckTimeoutError, DeliveryError, ProtocolError
from lib_log_hec.domain.records import Batch
from lib_log_hec.domain.results import DeliveryResult, FailureReason
from lib_log_hec.domain.settings import DeliveryConfig

from .assemble_batch import assemble_payload
from .track_ack import AckTracker

logger = logging.getLogger(__name__)

DiagnosticHook = Callable[[str, dict[str, Any]], None] | None
DeliverCallable = Callable[[Batch], DeliveryResult]


def extract_ack_handle(response: Mapping[str, Any]) -> AckHandle:
    """Return the :class:`AckHandle` carried by an ingest response.

    Examples
    --------
    >>> extract_ack_handle({'text': 'Success', 'code': 0, 'ackId': 42}).ack_id
    42
    >>> extract_ack_handle({'text': 'Success'})
    Traceback (most recent call last):
    ...
    lib_log_hec.domain.errors.ProtocolError: collector response is missing 'ackId'
    """

    ack_id = response.get("ackId")
    if ack_id is None:
        raise ProtocolError("collector response is missing 'ackId'")
    try:
        return AckHandle(ack_id)
    except ValueError as exc:
        raise ProtocolError(f"collector returned an invalid 'ackId': {ack_id!r}") from exc


def create_deliver_batch(
    *,
    config: DeliveryConfig,
    collector: CollectorPort,
    sleeper: SleeperPort,
    cancel: threading.Event | None = None,
    diagnostic: DiagnosticHook = None,
) -> DeliverCallable:
    """Build the delivery callable capturing the current dependency wiring.

    Parameters
    ----------
    config:
        Validated :class:`DeliveryConfig`.
    collector:
        Adapter implementing :class:`CollectorPort`.
    sleeper:
        Blocking wait used between acknowledgement polls.
    cancel:
        Optional event stopping the ack poll loop; an interrupted cycle
        resolves ``DELIVERED_UNCONFIRMED``.
    diagnostic:
        Optional callback invoked with pipeline milestones (``payload_built``,
        ``sent``, ``ack_polled``, ``delivered``, ``failed``).

    Returns
    -------
    Callable[[Batch], DeliveryResult]
        Function running one synchronous delivery cycle per call.
    """

    tracker = (
        AckTracker(
            collector,
            interval=config.ack_interval,
            retry_limit=config.ack_retry_limit,
            sleeper=sleeper,
            cancel=cancel,
        )
        if config.use_ack
        else None
    )
    raw_query = config.raw_query() if config.raw else {}

    def _diagnose(name: str, payload: dict[str, Any]) -> None:
        if diagnostic is None:
            return
        try:
            diagnostic(name, payload)
        except Exception:  # noqa: BLE001
            logger.warning("diagnostic hook failed for %s", name, exc_info=True)

    def _send(payload: str) -> Mapping[str, Any]:
        if config.raw:
            return collector.send_raw(payload, raw_query)
        return collector.send_events(payload)

    def _run(batch: Batch) -> DeliveryResult:
        payload = assemble_payload(batch, config)
        if payload is None:
            logger.debug("empty batch, nothing to deliver")
            return DeliveryResult.delivered()
        _diagnose("payload_built", {"bytes": len(payload.encode("utf-8")), "raw": config.raw})

        response = _send(payload)
        _diagnose("sent", {"response": dict(response)})
        if tracker is None:
            return DeliveryResult.delivered()

        handle = extract_ack_handle(response)
        outcome = tracker.track(handle)
        _diagnose("ack_polled", {"ack_id": handle.ack_id, "state": outcome.state.value, "attempts": outcome.attempts})
        if outcome.state is AckState.CONFIRMED:
            return DeliveryResult.delivered(ack_id=handle.ack_id)
        if outcome.state is AckState.ABANDONED:
            raise AckTimeoutError(f"failed to index the data ack_id={handle.ack_id} after {outcome.attempts} polls")
        return DeliveryResult.unconfirmed(ack_id=handle.ack_id, detail="acknowledgement polling cancelled")

    def deliver(batch: Batch) -> DeliveryResult:
        """Run one delivery cycle for ``batch``."""

        try:
            result = _run(batch)
        except DeliveryError as exc:
            reason: FailureReason = exc.reason
            logger.warning("delivery failed reason=%s: %s", reason.value, exc)
            result = DeliveryResult.failed(reason, str(exc))
            _diagnose("failed", result.to_dict())
            return result
        _diagnose("delivered", result.to_dict())
        return result

    return deliver


__all__ = ["DeliverCallable", "DiagnosticHook", "create_deliver_batch", "extract_ack_handle"]
