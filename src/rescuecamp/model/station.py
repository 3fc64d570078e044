"""Single-server service station with a FIFO queue."""

import dataclasses
import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Optional, Tuple

from rescuecamp.core.distributions import RandomVariate
from rescuecamp.core.entities import DurationPolicy, EventType, StationState
from rescuecamp.core.events import SimContext
from rescuecamp.model.survivor import Survivor

logger = logging.getLogger(__name__)

# Smallest duration a station will schedule (minutes)
MIN_SERVICE_DURATION = 1e-6


@dataclass
class StationStats:
    """Per-station performance statistics.

    Attributes:
        name: Station display name.
        served_count: Survivors whose service completed.
        cumulative_service_time: Sum of completed service durations.
        cumulative_wait_time: Sum of waits recorded at service start.
        max_queue_length: Longest queue observed.
        max_wait_observed: Longest single wait recorded.
    """
    name: str
    served_count: int = 0
    cumulative_service_time: float = 0.0
    cumulative_wait_time: float = 0.0
    max_queue_length: int = 0
    max_wait_observed: float = 0.0

    @property
    def average_service_time(self) -> float:
        if self.served_count == 0:
            return 0.0
        return self.cumulative_service_time / self.served_count

    def as_dict(self) -> Dict:
        return {
            "name": self.name,
            "served_count": self.served_count,
            "cumulative_service_time": self.cumulative_service_time,
            "cumulative_wait_time": self.cumulative_wait_time,
            "max_queue_length": self.max_queue_length,
            "max_wait_observed": self.max_wait_observed,
            "average_service_time": self.average_service_time,
        }


class Station:
    """Queue plus a single server.

    The worker count scales the service duration down; it never lets more
    than one survivor be served at a time.

    Attributes:
        name: Display name.
        key: Short identifier used in metric names.
        generator: Service time sampler.
        completion_type: Event tag scheduled when service finishes.
        duration_policy: SAMPLED or FIXED.
        fixed_duration: Base duration used by FIXED stations.
        stats: Accumulated StationStats.
    """

    def __init__(
        self,
        name: str,
        generator: RandomVariate,
        completion_type: EventType,
        workers: int = 1,
        duration_policy: DurationPolicy = DurationPolicy.SAMPLED,
        fixed_duration: Optional[float] = None,
        key: Optional[str] = None,
    ) -> None:
        if duration_policy is DurationPolicy.FIXED and fixed_duration is None:
            raise ValueError(f"{name}: FIXED duration policy requires fixed_duration")
        self.name = name
        self.key = key or name.lower().replace(" ", "_")
        self.generator = generator
        self.completion_type = completion_type
        self.duration_policy = duration_policy
        self.fixed_duration = fixed_duration
        self.stats = StationStats(name=name)

        self._workers = 1
        self._queue: Deque[Survivor] = deque()
        self._in_service: Optional[Survivor] = None
        self._service_start: Optional[float] = None
        self.set_workers(workers)

    @property
    def workers(self) -> int:
        return self._workers

    def set_workers(self, n: int) -> None:
        """Set the worker count, clamping values below 1 to 1."""
        if n < 1:
            logger.warning(f"{self.name}: worker count {n} clamped to 1")
            n = 1
        self._workers = int(n)

    @property
    def state(self) -> StationState:
        return StationState.BUSY if self._in_service is not None else StationState.IDLE

    @property
    def busy(self) -> bool:
        return self._in_service is not None

    @property
    def queue_length(self) -> int:
        return len(self._queue)

    @property
    def in_service(self) -> Optional[Survivor]:
        return self._in_service

    def queued(self) -> Tuple[Survivor, ...]:
        """Snapshot of the waiting survivors, head first."""
        return tuple(self._queue)

    def __len__(self) -> int:
        """Survivors held by the station, queued or in service."""
        return len(self._queue) + (1 if self._in_service is not None else 0)

    def enqueue(self, survivor: Survivor) -> None:
        """Add a survivor to the back of the queue."""
        self._queue.append(survivor)
        if len(self._queue) > self.stats.max_queue_length:
            self.stats.max_queue_length = len(self._queue)

    def service_duration(self) -> float:
        """Scheduled duration for the next service.

        The base duration (sampled, or fixed for FIXED stations) is divided by
        the worker count and floored to MIN_SERVICE_DURATION.
        """
        base = self.generator.sample()
        if self.duration_policy is DurationPolicy.FIXED:
            base = self.fixed_duration
        return max(base / self._workers, MIN_SERVICE_DURATION)

    def begin_service(self, context: SimContext) -> Optional[float]:
        """Start serving the head of the queue (IDLE -> BUSY).

        Polling a busy or empty station does nothing.

        Returns:
            The scheduled service duration, or None if no service started.
        """
        if self._in_service is not None or not self._queue:
            return None

        now = context.now
        survivor = self._queue.popleft()
        duration = self.service_duration()

        wait = now - survivor.arrival_time
        survivor.add_wait(wait)
        survivor.record_service_start(self.name, now)
        self.stats.cumulative_wait_time += wait
        if wait > self.stats.max_wait_observed:
            self.stats.max_wait_observed = wait

        self._in_service = survivor
        self._service_start = now
        context.schedule(self.completion_type, duration)
        logger.debug(
            f"{self.name}: survivor #{survivor.id} service {duration:.3f} min "
            f"(queue {len(self._queue)})"
        )
        return duration

    def complete_service(self, context: SimContext) -> Optional[Survivor]:
        """Finish the current service (BUSY -> IDLE).

        Returns:
            The survivor that was in service, or None if the station was idle.
        """
        survivor = self._in_service
        if survivor is None:
            return None

        self.stats.served_count += 1
        self.stats.cumulative_service_time += context.now - self._service_start
        self._in_service = None
        self._service_start = None
        survivor.record_stage(self.name)
        return survivor

    def snapshot(self) -> StationStats:
        """Copy of the current statistics."""
        return dataclasses.replace(self.stats)

    def __repr__(self) -> str:
        return (
            f"Station({self.name!r}, workers={self._workers}, "
            f"state={self.state.value}, queue={len(self._queue)})"
        )
