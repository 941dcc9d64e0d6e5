"""Convenience constructors for protocol messages."""

from __future__ import annotations

from typing import Iterable, Optional

from .message import (
    Checkpoint,
    Initialize,
    Message,
    ProcessRecords,
    Record,
    Status,
)


def initialize(shard_id: str, sequence_number: Optional[str] = None, sub_sequence_number: Optional[int] = None) -> Initialize:
    return Initialize(shard_id=shard_id, sequence_number=sequence_number, sub_sequence_number=sub_sequence_number)


def process_records(records: Iterable[Record], millis_behind_latest: Optional[int] = None) -> ProcessRecords:
    return ProcessRecords(records=list(records), millis_behind_latest=millis_behind_latest)


def record(sequence_number: str, partition_key: str, data, **kwargs) -> Record:
    """Build a Record; a str *data* is taken as UTF-8 text."""

    if isinstance(data, str):
        data = data.encode("utf-8")
    return Record(sequence_number=sequence_number, partition_key=partition_key, data=data, **kwargs)


def checkpoint(sequence_number: Optional[str] = None, error: Optional[str] = None) -> Checkpoint:
    return Checkpoint(sequence_number=sequence_number, error=error)


def status_for(msg: Message) -> Status:
    """Create a Status acknowledging that *msg* has been handled."""
    return Status(response_for=msg.kind)
