from __future__ import annotations

import threading
from collections.abc import Mapping, Sequence
from typing import Any

import pytest

from lib_log_hec.application.use_cases.deliver_batch import create_deliver_batch, extract_ack_handle
from lib_log_hec.domain.errors import ProtocolError, TransportError
from lib_log_hec.domain.results import DeliveryStatus, FailureReason
from lib_log_hec.domain.settings import DeliveryConfig


class _Recorder:
    def __init__(self) -> None:
        self.calls: list[tuple[str, dict]] = []

    def record(self, name: str, **payload: Any) -> None:
        self.calls.append((name, payload))

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]


class _FakeCollector:
    def __init__(
        self,
        recorder: _Recorder,
        *,
        send_response: Mapping[str, Any] | Exception | None = None,
        ack_responses: Sequence[Mapping[str, Any]] = (),
    ) -> None:
        self.recorder = recorder
        self.send_response = send_response if send_response is not None else {"text": "Success", "code": 0}
        self.ack_responses = list(ack_responses)

    def _reply(self) -> Mapping[str, Any]:
        if isinstance(self.send_response, Exception):
            raise self.send_response
        return self.send_response

    def send_events(self, payload: str) -> Mapping[str, Any]:
        self.recorder.record("send_events", payload=payload)
        return self._reply()

    def send_raw(self, payload: str, query: Mapping[str, str]) -> Mapping[str, Any]:
        self.recorder.record("send_raw", payload=payload, query=dict(query))
        return self._reply()

    def poll_acks(self, ack_ids: Sequence[Any]) -> Mapping[str, Any]:
        self.recorder.record("poll_acks", ack_ids=list(ack_ids))
        return self.ack_responses.pop(0) if self.ack_responses else {"acks": {}}

    def close(self) -> None:
        self.recorder.record("close")


def _build(config: DeliveryConfig, collector: _FakeCollector, recorder: _Recorder, **kwargs: Any):
    return create_deliver_batch(
        config=config,
        collector=collector,
        sleeper=lambda seconds: recorder.record("sleep", seconds=seconds),
        **kwargs,
    )


def test_empty_batch_is_delivered_without_network_call() -> None:
    recorder = _Recorder()
    deliver = _build(DeliveryConfig(token="T"), _FakeCollector(recorder), recorder)

    result = deliver([])

    assert result.status is DeliveryStatus.DELIVERED
    assert recorder.calls == []


def test_structured_batch_is_posted_once() -> None:
    recorder = _Recorder()
    deliver = _build(DeliveryConfig(token="T"), _FakeCollector(recorder), recorder)

    result = deliver([(1000, {"msg": "hello"})])

    assert result.status is DeliveryStatus.DELIVERED
    assert recorder.calls == [("send_events", {"payload": '{"event":{"msg":"hello"},"time":1000}\n'})]


def test_raw_batch_uses_static_query() -> None:
    recorder = _Recorder()
    config = DeliveryConfig(token="T", raw=True, event_key="msg", channel="C", default_index="main")
    deliver = _build(config, _FakeCollector(recorder), recorder)

    result = deliver([(1, {"msg": "hi", "index": "ignored"})])

    assert result.ok
    assert recorder.calls == [("send_raw", {"payload": "hi\n", "query": {"index": "main"}})]


def test_ack_confirmed_after_retry() -> None:
    recorder = _Recorder()
    collector = _FakeCollector(
        recorder,
        send_response={"text": "Success", "code": 0, "ackId": 42},
        ack_responses=[{"acks": {"42": False}}, {"acks": {"42": True}}],
    )
    config = DeliveryConfig(token="T", use_ack=True, channel="C", ack_interval=0.5, ack_retry_limit=3)

    result = _build(config, collector, recorder)([(1, {"m": 1})])

    assert result.status is DeliveryStatus.DELIVERED
    assert result.ack_id == 42
    assert recorder.names() == ["send_events", "poll_acks", "sleep", "poll_acks"]
    assert ("sleep", {"seconds": 0.5}) in recorder.calls


def test_ack_exhaustion_is_ack_timeout() -> None:
    recorder = _Recorder()
    collector = _FakeCollector(recorder, send_response={"ackId": 1})
    config = DeliveryConfig(token="T", use_ack=True, channel="C", ack_interval=0, ack_retry_limit=2)

    result = _build(config, collector, recorder)([(1, {"m": 1})])

    assert result.status is DeliveryStatus.FAILED
    assert result.reason is FailureReason.ACK_TIMEOUT
    assert recorder.names().count("poll_acks") == 3
    assert recorder.names().count("sleep") == 2


def test_missing_ack_id_is_malformed_response() -> None:
    recorder = _Recorder()
    config = DeliveryConfig(token="T", use_ack=True, channel="C")

    result = _build(config, _FakeCollector(recorder), recorder)([(1, {"m": 1})])

    assert result.reason is FailureReason.MALFORMED_RESPONSE
    assert "ackId" in result.detail
    assert "poll_acks" not in recorder.names()


@pytest.mark.parametrize(
    "error, reason",
    [
        (TransportError("connection refused"), FailureReason.TRANSPORT),
        (ProtocolError("HTTP 503", reason=FailureReason.HTTP_STATUS), FailureReason.HTTP_STATUS),
        (ProtocolError("not json"), FailureReason.MALFORMED_RESPONSE),
    ],
)
def test_client_errors_become_failed_results(error: Exception, reason: FailureReason) -> None:
    recorder = _Recorder()
    deliver = _build(DeliveryConfig(token="T"), _FakeCollector(recorder, send_response=error), recorder)

    result = deliver([(1, {"m": 1})])

    assert result.status is DeliveryStatus.FAILED
    assert result.reason is reason
    assert result.detail == str(error)


def test_serialization_failure_skips_the_network() -> None:
    recorder = _Recorder()
    deliver = _build(DeliveryConfig(token="T"), _FakeCollector(recorder), recorder)

    result = deliver([(1, {"m": object()})])

    assert result.reason is FailureReason.SERIALIZATION
    assert recorder.calls == []


@pytest.mark.parametrize(
    "config",
    [DeliveryConfig(token="T"), DeliveryConfig(token="T", raw=True, event_key="msg", channel="C")],
    ids=["structured", "raw"],
)
def test_unencodable_text_is_a_serialization_failure(config: DeliveryConfig) -> None:
    recorder = _Recorder()
    deliver = _build(config, _FakeCollector(recorder), recorder)

    result = deliver([(1, {"msg": "lone \ud800 surrogate"})])

    assert result.status is DeliveryStatus.FAILED
    assert result.reason is FailureReason.SERIALIZATION
    assert recorder.calls == []


def test_empty_raw_fragments_are_still_posted() -> None:
    recorder = _Recorder()
    config = DeliveryConfig(token="T", raw=True, event_key="msg", channel="C", line_breaker="")
    deliver = _build(config, _FakeCollector(recorder), recorder)

    result = deliver([(1, {}), (2, {"msg": None})])

    assert result.status is DeliveryStatus.DELIVERED
    assert recorder.names() == ["send_raw"]
    assert recorder.calls[0][1]["payload"] == ""


def test_cancelled_ack_poll_is_delivered_unconfirmed() -> None:
    recorder = _Recorder()
    cancel = threading.Event()
    collector = _FakeCollector(recorder, send_response={"ackId": 7}, ack_responses=[{"acks": {"7": False}}])
    config = DeliveryConfig(token="T", use_ack=True, channel="C", ack_retry_limit=5)
    deliver = create_deliver_batch(config=config, collector=collector, sleeper=lambda _s: cancel.set(), cancel=cancel)

    result = deliver([(1, {"m": 1})])

    assert result.status is DeliveryStatus.DELIVERED_UNCONFIRMED
    assert result.ack_id == 7


def test_diagnostic_hook_receives_milestones() -> None:
    recorder = _Recorder()
    events: list[tuple[str, dict[str, Any]]] = []
    deliver = _build(DeliveryConfig(token="T"), _FakeCollector(recorder), recorder, diagnostic=lambda name, payload: events.append((name, payload)))

    deliver([(1, {"m": 1})])

    assert [name for name, _ in events] == ["payload_built", "sent", "delivered"]
    assert events[-1][1] == {"status": "delivered"}


def test_failing_diagnostic_hook_does_not_change_result() -> None:
    recorder = _Recorder()

    def broken_hook(_name: str, _payload: dict[str, Any]) -> None:
        raise RuntimeError("hook broke")

    deliver = _build(DeliveryConfig(token="T"), _FakeCollector(recorder), recorder, diagnostic=broken_hook)

    assert deliver([(1, {"m": 1})]).status is DeliveryStatus.DELIVERED


def test_extract_ack_handle_rejects_structured_values() -> None:
    with pytest.raises(ProtocolError):
        extract_ack_handle({"ackId": {"nested": 1}})
