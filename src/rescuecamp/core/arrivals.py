"""Survivor arrival process."""

from rescuecamp.core.distributions import RandomVariate
from rescuecamp.core.entities import EventType
from rescuecamp.core.events import Event, SimContext


class ArrivalProcess:
    """Self-perpetuating arrival stream.

    Each call schedules one ARRIVAL event an inter-arrival gap after the
    current time. The model calls it once per arrival consumed; the engine's
    horizon check is what eventually stops the stream.

    Attributes:
        generator: Inter-arrival time sampler.
        context: Simulation context holding the clock and event queue.
        event_type: Tag of the scheduled events.
    """

    def __init__(
        self,
        generator: RandomVariate,
        context: SimContext,
        event_type: EventType = EventType.ARRIVAL,
    ) -> None:
        self.generator = generator
        self.context = context
        self.event_type = event_type

    def generate_next_event(self) -> Event:
        """Sample a gap and schedule the next arrival.

        Returns:
            The scheduled arrival event.
        """
        gap = self.generator.sample()
        return self.context.schedule(self.event_type, gap)
