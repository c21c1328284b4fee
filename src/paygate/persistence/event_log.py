"""Append-only audit log of gateway actions.

Every successful mutating intent appends one immutable event. The log
lives in memory for the lifetime of the owning service; it is an audit
trail, not a durability layer.
"""

from __future__ import annotations

import enum
import hashlib
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional


class EventKind(str, enum.Enum):
    """Classification of gateway events."""
    SETTINGS_UPDATED = "settings_updated"
    SHOP_REGISTERED = "shop_registered"
    PAYMENT_ACCEPTED = "payment_accepted"
    PAYMENTS_PROCESSED = "payments_processed"
    PAYMENTS_COMPLETED = "payments_completed"
    WITHDRAWAL_COMPLETED = "withdrawal_completed"


def _canonical_hash(
    event_id: str,
    event_kind: str,
    timestamp_utc: str,
    payload: dict[str, Any],
) -> str:
    canonical = json.dumps(
        {
            "event_id": event_id,
            "event_kind": event_kind,
            "timestamp_utc": timestamp_utc,
            "payload": payload,
        },
        sort_keys=True,
        ensure_ascii=False,
    ).encode("utf-8")
    return f"sha256:{hashlib.sha256(canonical).hexdigest()}"


@dataclass(frozen=True)
class EventRecord:
    """A single immutable event.

    The payload must be JSON-serialisable; event_hash covers the id,
    kind, timestamp and payload.
    """
    event_id: str
    event_kind: EventKind
    timestamp_utc: str
    payload: dict[str, Any]
    event_hash: str

    @staticmethod
    def create(
        event_id: str,
        event_kind: EventKind,
        payload: dict[str, Any],
        timestamp_utc: Optional[datetime] = None,
    ) -> EventRecord:
        """Create a new event record with computed hash."""
        ts = timestamp_utc or datetime.now(timezone.utc)
        ts_str = ts.strftime("%Y-%m-%dT%H:%M:%SZ")
        return EventRecord(
            event_id=event_id,
            event_kind=event_kind,
            timestamp_utc=ts_str,
            payload=payload,
            event_hash=_canonical_hash(event_id, event_kind.value, ts_str, payload),
        )

    def verify(self) -> bool:
        """True iff the stored hash matches the record contents."""
        expected = _canonical_hash(
            self.event_id, self.event_kind.value, self.timestamp_utc, self.payload
        )
        return expected == self.event_hash


class EventLog:
    """In-memory append-only event log.

    Events can only be appended, never modified or deleted.
    """

    def __init__(self) -> None:
        self._events: list[EventRecord] = []
        self._event_ids: set[str] = set()

    def append(self, event: EventRecord) -> None:
        """Append an event to the log.

        Raises ValueError if event_id is a duplicate.
        """
        if event.event_id in self._event_ids:
            raise ValueError(f"Duplicate event ID: {event.event_id}")
        self._events.append(event)
        self._event_ids.add(event.event_id)

    def record(
        self,
        event_kind: EventKind,
        payload: dict[str, Any],
        timestamp_utc: Optional[datetime] = None,
    ) -> EventRecord:
        """Create and append an event with the next sequential id."""
        event = EventRecord.create(
            event_id=f"evt_{self.count + 1:06d}",
            event_kind=event_kind,
            payload=payload,
            timestamp_utc=timestamp_utc,
        )
        self.append(event)
        return event

    def events(self, kind: Optional[EventKind] = None) -> list[EventRecord]:
        """Return events, optionally filtered by kind."""
        if kind is None:
            return list(self._events)
        return [e for e in self._events if e.event_kind == kind]

    @property
    def count(self) -> int:
        return len(self._events)

    @property
    def last_event(self) -> Optional[EventRecord]:
        return self._events[-1] if self._events else None
