"""
seriesmint.events
=================

Append-only event log persisted next to the registries.

Events are written inside the caller's storage transaction, so an aborted
operation leaves no trace in the log. Subscribers are *not* called at
append time: the engine publishes the returned :class:`Event` objects only
after its transaction committed.

Storage layout
--------------
- key  = EVENTS_PREFIX || u64(seq)   value = cbor({"name": str, "args": map})
- META counter ``b"event_seq"`` holds the next sequence number.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Mapping, Optional

from .store import KeyValue
from .store.buckets import EVENTS_PREFIX, Buckets, compose, from_u64, u64
from .types import Event

log = logging.getLogger(__name__)

_SEQ = b"event_seq"

Subscriber = Callable[[Event], None]


class EventLog:
    def __init__(self, kv: KeyValue) -> None:
        self._b = Buckets(kv)
        self._subscribers: List[Subscriber] = []

    def append(self, name: str, args: Mapping[str, Any]) -> Event:
        seq = self._b.get_counter(_SEQ)
        self._b.put_record(compose(EVENTS_PREFIX, u64(seq)), {"name": name, "args": dict(args)})
        self._b.set_counter(_SEQ, seq + 1)
        return Event(seq=seq, name=name, args=dict(args))

    def subscribe(self, fn: Subscriber) -> Callable[[], None]:
        """Register ``fn``; returns a callable that unsubscribes it."""
        self._subscribers.append(fn)

        def _unsubscribe() -> None:
            if fn in self._subscribers:
                self._subscribers.remove(fn)

        return _unsubscribe

    def publish(self, events: Iterable[Event]) -> None:
        for ev in events:
            for fn in list(self._subscribers):
                try:
                    fn(ev)
                except Exception:
                    # listener errors never propagate
                    log.exception("events: subscriber failed for %s seq=%d", ev.name, ev.seq)

    def __len__(self) -> int:
        return self._b.get_counter(_SEQ)

    def all(self, *, start: int = 0, limit: Optional[int] = None) -> List[Event]:
        out: List[Event] = []
        for k, rec in self._b.iter_records(EVENTS_PREFIX):
            seq = from_u64(k[len(EVENTS_PREFIX) + 4:])
            if seq < start:
                continue
            out.append(Event(seq=seq, name=rec["name"], args=dict(rec["args"])))
            if limit is not None and len(out) >= limit:
                break
        return out

    def by_name(self, name: str) -> List[Event]:
        return [e for e in self.all() if e.name == name]


__all__ = ["EventLog", "Subscriber"]
