from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import pytest

import lib_log_hec
from lib_log_hec import runtime
from lib_log_hec.domain.results import DeliveryStatus, FailureReason
from lib_log_hec.domain.settings import DeliveryConfig
from lib_log_hec.runtime import _composition


class _FakeCollector:
    instances: list["_FakeCollector"] = []

    def __init__(self, config: DeliveryConfig) -> None:
        self.config = config
        self.sent: list[str] = []
        self.closed = False
        _FakeCollector.instances.append(self)

    def send_events(self, payload: str) -> Mapping[str, Any]:
        self.sent.append(payload)
        return {"text": "Success", "code": 0, "ackId": 1}

    def send_raw(self, payload: str, query: Mapping[str, str]) -> Mapping[str, Any]:
        self.sent.append(payload)
        return {"text": "Success", "code": 0}

    def poll_acks(self, ack_ids: Sequence[Any]) -> Mapping[str, Any]:
        return {"acks": {str(ack_ids[0]): True}}

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def _fake_collector(monkeypatch: pytest.MonkeyPatch) -> None:
    _FakeCollector.instances.clear()
    monkeypatch.setattr(_composition, "HecHttpCollector", _FakeCollector)
    for name in ("HEC_TOKEN", "HEC_RAW", "HEC_USE_ACK", "HEC_CHANNEL", "HEC_PORT"):
        monkeypatch.delenv(name, raising=False)
    yield
    if runtime.is_initialised():
        runtime.shutdown()


def test_init_deliver_shutdown_cycle() -> None:
    lib_log_hec.init(token="T")

    result = lib_log_hec.deliver([(1000, {"msg": "hello"})])
    lib_log_hec.shutdown()

    assert result.status is DeliveryStatus.DELIVERED
    collector = _FakeCollector.instances[0]
    assert collector.sent == ['{"event":{"msg":"hello"},"time":1000}\n']
    assert collector.closed is True
    assert not runtime.is_initialised()


def test_init_twice_raises() -> None:
    lib_log_hec.init(token="T")

    with pytest.raises(RuntimeError, match="cannot be called twice"):
        lib_log_hec.init(token="T")


def test_deliver_requires_init() -> None:
    with pytest.raises(RuntimeError, match="must be called"):
        lib_log_hec.deliver([])


def test_shutdown_without_runtime_raises() -> None:
    with pytest.raises(RuntimeError):
        lib_log_hec.shutdown()


def test_invalid_configuration_prevents_startup() -> None:
    with pytest.raises(lib_log_hec.ConfigurationError):
        lib_log_hec.init(token="T", raw=True, event_key="msg")

    assert not runtime.is_initialised()
    assert _FakeCollector.instances == []


def test_init_accepts_prebuilt_config() -> None:
    config = DeliveryConfig(token="T", use_ack=True, channel="C", ack_interval=0)
    lib_log_hec.init(config=config)

    snapshot = lib_log_hec.inspect_runtime()

    assert snapshot.use_ack is True
    assert snapshot.channel == "C"
    assert snapshot.base_url == "http://localhost:8088"
    assert lib_log_hec.deliver([(1, {"m": 1})]).ack_id == 1


def test_init_rejects_config_and_options_together() -> None:
    with pytest.raises(ValueError, match="either"):
        lib_log_hec.init(config=DeliveryConfig(token="T"), token="other")


def test_diagnostic_hook_is_wired() -> None:
    seen: list[str] = []
    lib_log_hec.init(token="T", diagnostic_hook=lambda name, _payload: seen.append(name))

    lib_log_hec.deliver([(1, {"m": 1})])

    assert seen[-1] == "delivered"


def test_serialization_failure_surfaces_as_failed_result() -> None:
    lib_log_hec.init(token="T")

    result = lib_log_hec.deliver([(1, {"m": object()})])

    assert result.reason is FailureReason.SERIALIZATION


def test_shutdown_sets_cancel_event() -> None:
    built = _composition.build_runtime(DeliveryConfig(token="T"))

    built.close()

    assert built.cancel.is_set()
    assert _FakeCollector.instances[0].closed
