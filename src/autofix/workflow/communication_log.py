"""Append-only communication log attached to each vehicle record."""

from dataclasses import replace
from datetime import datetime
from typing import Optional

from autofix.database.models import (
    CommunicationLogEntry,
    LogEntryType,
    VehicleRecord,
    new_id,
    utcnow,
)


def append(record: VehicleRecord, entry_type: LogEntryType, message: str,
           now: Optional[datetime] = None) -> VehicleRecord:
    """Return a copy of *record* with one more log entry at the end.

    Timestamps never go backwards within one record, even when *now* is
    supplied or the clock steps back.
    """
    timestamp = now or utcnow()
    previous = last_entry(record)
    if previous is not None and timestamp < previous.timestamp:
        timestamp = previous.timestamp
    entry = CommunicationLogEntry(
        id=new_id(),
        timestamp=timestamp,
        type=LogEntryType(entry_type),
        message=message,
    )
    return replace(record, communication_log=record.communication_log + (entry,))


def entries_of_type(record: VehicleRecord,
                    entry_type: LogEntryType) -> list[CommunicationLogEntry]:
    return [e for e in record.communication_log if e.type == entry_type]


def last_entry(record: VehicleRecord) -> Optional[CommunicationLogEntry]:
    return record.communication_log[-1] if record.communication_log else None
