"""Event formatter turning records into collector wire fragments.

Purpose
-------
Convert one ``(timestamp, record)`` pair into a line ready for concatenation:
a compact JSON envelope in structured mode or the bare event text in raw mode.

Contents
--------
* :func:`resolve_metadata` - per-record value versus configured default.
* :func:`build_envelope` - ordered envelope dictionary for structured mode.
* :func:`format_event` / :func:`format_raw` / :func:`format_entry`.

System Role
-----------
Pure functions with no I/O; the batch assembler calls them for every entry and
the delivery use case converts :class:`SerializationError` into a ``Failed``
result for the whole batch.
"""

from __future__ import annotations

import json
from typing import Any

from lib_log_hec.domain.errors import SerializationError
from lib_log_hec.domain.records import Record, Timestamp, to_epoch
from lib_log_hec.domain.settings import DeliveryConfig


def _ensure_utf8(fragment: str) -> str:
    """Return ``fragment`` once it is known to encode as UTF-8.

    Lone surrogates (e.g. from ``json.loads('"\\ud800"')``) cannot go on the wire.

    Examples
    --------
    >>> _ensure_utf8("hello\\n")
    'hello\\n'
    >>> _ensure_utf8("\\ud800")
    Traceback (most recent call last):
    ...
    lib_log_hec.domain.errors.SerializationError: event is not encodable as UTF-8: surrogates not allowed
    """

    try:
        fragment.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise SerializationError(f"event is not encodable as UTF-8: {exc.reason}") from exc
    return fragment


def resolve_metadata(record: Record, key: str | None, default: str | None) -> Any:
    """Return the record value for ``key`` when present, else ``default``.

    Examples
    --------
    >>> resolve_metadata({'h': 'web01'}, 'h', 'fallback')
    'web01'
    >>> resolve_metadata({}, 'h', 'fallback')
    'fallback'
    >>> resolve_metadata({'h': 'web01'}, None, None) is None
    True
    """

    if key is not None:
        value = record.get(key)
        if value is not None:
            return value
    return default


def build_envelope(timestamp: Timestamp, record: Record, config: DeliveryConfig) -> dict[str, Any]:
    """Return the structured envelope for one record.

    ``time`` is dropped when an ``event_key`` is configured and
    ``use_caller_time`` is off; the collector then assigns ingestion time.

    Examples
    --------
    >>> build_envelope(1000, {'msg': 'hi'}, DeliveryConfig(token='T', sourcetype='access'))
    {'event': {'msg': 'hi'}, 'time': 1000, 'sourcetype': 'access'}
    >>> build_envelope(1000, {'msg': 'hi'}, DeliveryConfig(token='T', event_key='msg'))
    {'event': 'hi'}
    """

    if config.event_key:
        body = record.get(config.event_key)
        event: Any = "" if body is None else body
    else:
        event = dict(record)

    envelope: dict[str, Any] = {"event": event}
    if not (config.event_key and not config.use_caller_time):
        envelope["time"] = to_epoch(timestamp)

    if config.sourcetype:
        envelope["sourcetype"] = config.sourcetype

    for field, key, default in (
        ("host", config.host_key, config.default_host),
        ("source", config.source_key, config.default_source),
        ("index", config.index_key, config.default_index),
    ):
        value = resolve_metadata(record, key, default)
        if value is not None:
            envelope[field] = value
    return envelope


def format_event(timestamp: Timestamp, record: Record, config: DeliveryConfig) -> str:
    """Serialize the envelope as one compact JSON line.

    Examples
    --------
    >>> format_event(1000, {'msg': 'hello'}, DeliveryConfig(token='T'))
    '{"event":{"msg":"hello"},"time":1000}\\n'
    """

    envelope = build_envelope(timestamp, record, config)
    try:
        line = json.dumps(envelope, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"record is not JSON serialisable: {exc}") from exc
    return _ensure_utf8(line + config.line_breaker)


def format_raw(record: Record, config: DeliveryConfig) -> str:
    """Return the raw event text terminated by the line breaker.

    Missing values produce an empty line rather than being dropped.

    Examples
    --------
    >>> cfg = DeliveryConfig(token='T', raw=True, event_key='msg', channel='C')
    >>> format_raw({'msg': 'hi'}, cfg)
    'hi\\n'
    >>> format_raw({}, cfg)
    '\\n'
    """

    value = record.get(config.event_key) if config.event_key else None
    if value is None:
        text = ""
    elif isinstance(value, str):
        text = value
    elif isinstance(value, bytes):
        try:
            text = value.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SerializationError(f"raw event is not valid UTF-8: {exc}") from exc
    else:
        raise SerializationError(f"raw event field {config.event_key!r} must be text, got {type(value).__name__}")
    return _ensure_utf8(text + config.line_breaker)


def format_entry(timestamp: Timestamp, record: Record, config: DeliveryConfig) -> str:
    """Dispatch to :func:`format_raw` or :func:`format_event` based on ``config.raw``."""

    if config.raw:
        return format_raw(record, config)
    return format_event(timestamp, record, config)


__all__ = ["build_envelope", "format_entry", "format_event", "format_raw", "resolve_metadata"]
