"""Records and batches handed over by the host buffering layer.

Purpose
-------
Describe the read-only inputs of a delivery cycle: caller-supplied records
paired with their timestamps.

Contents
--------
* :data:`Record` / :data:`Timestamp` type aliases.
* :class:`BatchEntry` frozen pair.
* :func:`iter_entries` normalising tuples and entries.
* :func:`to_epoch` converting timestamps to collector epoch seconds.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Tuple, Union

from .errors import SerializationError

Record = Mapping[str, Any]
Timestamp = Union[int, float, datetime]


@dataclass(slots=True, frozen=True)
class BatchEntry:
    """One ``(timestamp, record)`` pair collected by the host."""

    timestamp: Timestamp
    record: Record


Batch = Iterable[Union[BatchEntry, Tuple[Timestamp, Record]]]


def iter_entries(batch: Batch) -> Iterator[BatchEntry]:
    """Yield :class:`BatchEntry` objects in original order.

    Examples
    --------
    >>> [entry.record for entry in iter_entries([(1, {'a': 1}), BatchEntry(2, {'b': 2})])]
    [{'a': 1}, {'b': 2}]
    """

    for item in batch:
        if isinstance(item, BatchEntry):
            yield item
        else:
            timestamp, record = item
            yield BatchEntry(timestamp, record)


def to_epoch(timestamp: Timestamp) -> int | float:
    """Return ``timestamp`` as epoch seconds.

    Numbers pass through unchanged; datetimes must be timezone-aware.

    Examples
    --------
    >>> to_epoch(1000)
    1000
    >>> from datetime import timezone
    >>> to_epoch(datetime(1970, 1, 1, 0, 16, 40, tzinfo=timezone.utc))
    1000.0
    """

    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None or timestamp.tzinfo.utcoffset(timestamp) is None:
            raise SerializationError("timestamp must be timezone-aware")
        return timestamp.timestamp()
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        raise SerializationError(f"unsupported timestamp type: {type(timestamp).__name__}")
    return timestamp


__all__ = ["Batch", "BatchEntry", "Record", "Timestamp", "iter_entries", "to_epoch"]
