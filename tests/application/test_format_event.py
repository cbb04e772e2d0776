from __future__ import annotations

import json
import math
from datetime import datetime, timezone

import pytest

from lib_log_hec.application.use_cases.format_event import (
    build_envelope,
    format_entry,
    format_event,
    format_raw,
    resolve_metadata,
)
from lib_log_hec.domain.errors import SerializationError
from lib_log_hec.domain.settings import DeliveryConfig

RECORD = {"msg": "hello", "h": "web07", "s": "/var/log/app.log", "i": "prod", "level": "info"}


def _raw_config(**overrides: object) -> DeliveryConfig:
    options: dict[str, object] = {"token": "T", "raw": True, "event_key": "msg", "channel": "C"}
    options.update(overrides)
    return DeliveryConfig(**options)  # type: ignore[arg-type]


def test_structured_scenario_line() -> None:
    line = format_event(1000, {"msg": "hello"}, DeliveryConfig(token="T", use_ack=False))

    assert line == '{"event":{"msg":"hello"},"time":1000}\n'


def test_event_body_is_whole_record_without_event_key() -> None:
    envelope = build_envelope(1, RECORD, DeliveryConfig(token="T"))

    assert envelope["event"] == RECORD


@pytest.mark.parametrize(
    "record, expected",
    [
        ({"msg": "hi"}, "hi"),
        ({"msg": {"nested": [1, 2]}}, {"nested": [1, 2]}),
        ({"other": "x"}, ""),
        ({"msg": None}, ""),
    ],
)
def test_event_body_uses_event_key_or_empty_string(record: dict, expected: object) -> None:
    envelope = build_envelope(1, record, DeliveryConfig(token="T", event_key="msg", use_caller_time=True))

    assert envelope["event"] == expected


@pytest.mark.parametrize(
    "event_key, use_caller_time, has_time",
    [
        (None, False, True),
        (None, True, True),
        ("msg", True, True),
        ("msg", False, False),
    ],
)
def test_time_inclusion_depends_on_event_key_and_caller_time(event_key: str | None, use_caller_time: bool, has_time: bool) -> None:
    config = DeliveryConfig(token="T", event_key=event_key, use_caller_time=use_caller_time)

    envelope = build_envelope(1000, {"msg": "x"}, config)

    assert ("time" in envelope) is has_time


def test_round_trip_keys_match_configuration() -> None:
    line = format_event(1000, {"msg": "x"}, DeliveryConfig(token="T", sourcetype="access"))

    assert set(json.loads(line)) == {"event", "time", "sourcetype"}


@pytest.mark.parametrize(
    "field, key_option, default_option, record_key",
    [
        ("host", "host_key", "default_host", "h"),
        ("source", "source_key", "default_source", "s"),
        ("index", "index_key", "default_index", "i"),
    ],
)
def test_per_record_metadata_beats_default(field: str, key_option: str, default_option: str, record_key: str) -> None:
    config = DeliveryConfig(token="T", **{key_option: record_key, default_option: "fallback"})

    assert build_envelope(1, RECORD, config)[field] == RECORD[record_key]
    assert build_envelope(1, {"msg": "no key"}, config)[field] == "fallback"


def test_metadata_resolved_independently_and_omitted_when_unset() -> None:
    config = DeliveryConfig(token="T", host_key="h", default_source="src", index_key="missing")

    envelope = build_envelope(1, RECORD, config)

    assert envelope["host"] == "web07"
    assert envelope["source"] == "src"
    assert "index" not in envelope


def test_resolve_metadata_ignores_none_values() -> None:
    assert resolve_metadata({"h": None}, "h", "fallback") == "fallback"
    assert resolve_metadata({"h": ""}, "h", "fallback") == ""
    assert resolve_metadata({}, None, None) is None


def test_envelope_key_order() -> None:
    config = DeliveryConfig(token="T", sourcetype="st", default_host="h", default_source="s", default_index="i")

    assert list(build_envelope(1, {}, config)) == ["event", "time", "sourcetype", "host", "source", "index"]


def test_custom_line_breaker_and_unicode() -> None:
    line = format_event(1, {"msg": "grüße"}, DeliveryConfig(token="T", line_breaker="\r\n"))

    assert line.endswith("\r\n")
    assert "grüße" in line


def test_datetime_timestamp_becomes_epoch_seconds() -> None:
    line = format_event(datetime(1970, 1, 1, 0, 16, 40, tzinfo=timezone.utc), {}, DeliveryConfig(token="T"))

    assert json.loads(line)["time"] == 1000.0


@pytest.mark.parametrize("value", [object(), {1, 2}, math.nan])
def test_non_serialisable_record_raises(value: object) -> None:
    with pytest.raises(SerializationError):
        format_event(1, {"msg": value}, DeliveryConfig(token="T"))


def test_lone_surrogate_is_rejected_in_both_modes() -> None:
    with pytest.raises(SerializationError, match="UTF-8"):
        format_event(1, {"msg": "\udc80"}, DeliveryConfig(token="T"))
    with pytest.raises(SerializationError, match="UTF-8"):
        format_raw({"msg": "\udc80"}, _raw_config())


def test_raw_fragment_and_empty_line_for_missing_field() -> None:
    config = _raw_config()

    assert format_raw({"msg": "hi"}, config) == "hi\n"
    assert format_raw({}, config) == "\n"
    assert format_raw({"msg": b"bytes"}, config) == "bytes\n"


def test_raw_fragment_rejects_non_text() -> None:
    with pytest.raises(SerializationError, match="must be text"):
        format_raw({"msg": 12}, _raw_config())


def test_raw_fragment_ignores_metadata() -> None:
    config = _raw_config(default_host="web01", sourcetype="access")

    assert format_raw({"msg": "hi", "host": "x"}, config) == "hi\n"


def test_format_entry_dispatches_on_mode() -> None:
    assert format_entry(1, {"msg": "hi"}, _raw_config()) == "hi\n"
    assert format_entry(1, {"msg": "hi"}, DeliveryConfig(token="T")).startswith('{"event":')
