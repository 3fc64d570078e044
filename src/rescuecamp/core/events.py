"""Event records, the pending-event queue and the simulation context."""

import heapq
import itertools
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from rescuecamp.core.clock import Clock
from rescuecamp.core.entities import EventType


@dataclass(frozen=True)
class Event:
    """Scheduled event.

    Attributes:
        type: Event tag from the closed EventType set.
        time: Simulation time at which the event fires.
    """
    type: EventType
    time: float

    def __post_init__(self) -> None:
        if self.time < 0:
            raise ValueError(f"Event time must be non-negative, got {self.time}")


class EventQueue:
    """Time-ordered pending events.

    Events with equal time are returned in the order they were added,
    which keeps runs with simultaneous events reproducible.
    """

    def __init__(self) -> None:
        self._heap: List[Tuple[float, int, Event]] = []
        self._counter = itertools.count()

    def add(self, event: Event) -> None:
        """Schedule an event."""
        heapq.heappush(self._heap, (event.time, next(self._counter), event))

    def pop_min(self) -> Optional[Event]:
        """Remove and return the earliest event, or None if the queue is empty."""
        if not self._heap:
            return None
        return heapq.heappop(self._heap)[2]

    def peek_min_time(self) -> Optional[float]:
        """Time of the earliest event without removing it, or None if empty."""
        if not self._heap:
            return None
        return self._heap[0][0]

    def pending(self) -> List[Event]:
        """Snapshot of pending events in firing order."""
        return [entry[2] for entry in sorted(self._heap)]

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)


@dataclass
class SimContext:
    """Clock and event queue shared by the components of one run.

    Passed explicitly to every component instead of a global clock, so
    several independent runs can coexist in one process.
    """
    clock: Clock = field(default_factory=Clock)
    events: EventQueue = field(default_factory=EventQueue)

    @property
    def now(self) -> float:
        """Current simulation time."""
        return self.clock.now()

    def schedule(self, event_type: EventType, delay: float) -> Event:
        """Schedule an event `delay` minutes from now.

        Args:
            event_type: Tag of the event.
            delay: Offset from the current time, must be non-negative.

        Returns:
            The scheduled Event.
        """
        if delay < 0:
            raise ValueError(f"Cannot schedule {event_type.name} in the past (delay={delay})")
        event = Event(event_type, self.clock.now() + delay)
        self.events.add(event)
        return event
