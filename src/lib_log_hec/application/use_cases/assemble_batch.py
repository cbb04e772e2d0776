"""Batch assembler concatenating formatted fragments into one payload."""

from __future__ import annotations

from lib_log_hec.domain.records import Batch, iter_entries
from lib_log_hec.domain.settings import DeliveryConfig

from .format_event import format_entry


def assemble_payload(batch: Batch, config: DeliveryConfig) -> str | None:
    """Format every entry in order and join the fragments without separator.

    Returns ``None`` for an empty batch so the caller can skip the network call.

    Examples
    --------
    >>> cfg = DeliveryConfig(token='T', raw=True, event_key='msg', channel='C')
    >>> assemble_payload([(1, {'msg': 'a'}), (2, {}), (3, {'msg': 'b'})], cfg)
    'a\\n\\nb\\n'
    >>> assemble_payload([], cfg) is None
    True
    """

    fragments = [format_entry(entry.timestamp, entry.record, config) for entry in iter_entries(batch)]
    if not fragments:
        return None
    return "".join(fragments)


__all__ = ["assemble_payload"]
