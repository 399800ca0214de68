"""
core/events.py

What agents tell the controller.

Two messages only: "I am now linked" and "I am alone again".
Agents do not know who listens. They hand events to a sink.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Hashable, List, Union


class EventKind(Enum):
    """Kinds of connection events."""
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


@dataclass(frozen=True)
class Connected:
    """A receiver heard an emitter and a new connection episode began."""
    receiver_id: Hashable
    emitter_id: Hashable

    @property
    def kind(self) -> EventKind:
        return EventKind.CONNECTED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "receiver_id": self.receiver_id,
            "emitter_id": self.emitter_id,
        }


@dataclass(frozen=True)
class Disconnected:
    """A receiver's connection episode lapsed without renewal."""
    receiver_id: Hashable

    @property
    def kind(self) -> EventKind:
        return EventKind.DISCONNECTED

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "receiver_id": self.receiver_id}


ConnectionEvent = Union[Connected, Disconnected]


class EventSink(ABC):
    """
    Anything that consumes connection events.

    Calls are fire-and-forget. The sink owns its own bookkeeping
    and must tolerate reconnections overwriting stale entries.
    """

    @abstractmethod
    def handle(self, event: ConnectionEvent) -> None:
        """Consume one event."""
        pass


class RecordingSink(EventSink):
    """Keeps every event it sees, in arrival order."""

    def __init__(self):
        self.events: List[ConnectionEvent] = []

    def handle(self, event: ConnectionEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: EventKind) -> List[ConnectionEvent]:
        return [e for e in self.events if e.kind is kind]

    def clear(self) -> None:
        self.events.clear()

    def __len__(self) -> int:
        return len(self.events)
