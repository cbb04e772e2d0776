"""Use cases composing the delivery pipeline."""

from __future__ import annotations

from .assemble_batch import assemble_payload
from .deliver_batch import create_deliver_batch, extract_ack_handle
from .format_event import build_envelope, format_entry, format_event, format_raw, resolve_metadata
from .track_ack import AckTracker, is_acknowledged

__all__ = [
    "AckTracker",
    "assemble_payload",
    "build_envelope",
    "create_deliver_batch",
    "extract_ack_handle",
    "format_entry",
    "format_event",
    "format_raw",
    "is_acknowledged",
    "resolve_metadata",
]
