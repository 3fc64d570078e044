"""Observer hooks notified by the camp model.

Observers are called synchronously from inside the engine loop. They get
survivors and statistics snapshots, never the clock or event queue, and an
observer that raises is logged and skipped so reporting problems cannot
abort or corrupt a run.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from rescuecamp.model.station import StationStats
from rescuecamp.model.survivor import Survivor

logger = logging.getLogger(__name__)


class CampObserver:
    """Base observer. Every hook is a no-op; override the ones you need."""

    def on_arrival(self, survivor: Survivor) -> None:
        pass

    def on_stage_complete(self, survivor: Survivor, stage_name: str) -> None:
        pass

    def on_service_start(self, station_name: str, queue_length_after_start: int) -> None:
        pass

    def on_settlement(self, survivor: Survivor) -> None:
        pass

    def on_results(
        self,
        clock_time: float,
        total_arrived: int,
        total_processed: int,
        processed_survivors: Sequence[Survivor],
        station_stats: Dict[str, StationStats],
    ) -> None:
        pass


class ObserverSet:
    """Dispatches hook calls to observers, isolating their failures."""

    def __init__(self, observers: Iterable[CampObserver] = ()) -> None:
        self._observers: List[CampObserver] = list(observers)
        self.failures = 0

    def add(self, observer: CampObserver) -> None:
        self._observers.append(observer)

    def __len__(self) -> int:
        return len(self._observers)

    def notify(self, hook: str, *args) -> None:
        """Call `hook` on every observer, logging and skipping errors."""
        for observer in self._observers:
            try:
                getattr(observer, hook)(*args)
            except Exception as e:
                self.failures += 1
                logger.warning(f"Observer error in {type(observer).__name__}.{hook}: {e}")


class LoggingObserver(CampObserver):
    """Console reporter that writes simulation progress through logging.

    Per-survivor messages go out at `level` (INFO by default); pass
    logging.DEBUG to keep them out of normal output.
    """

    def __init__(self, log: Optional[logging.Logger] = None, level: int = logging.INFO) -> None:
        self.log = log or logging.getLogger("rescuecamp.report")
        self.level = level

    def on_arrival(self, survivor: Survivor) -> None:
        self.log.log(
            self.level,
            f"NEW ARRIVAL: Survivor #{survivor.id} arrived at camp at "
            f"{survivor.arrival_time:.2f} minutes - Age: {survivor.age}, "
            f"Health: {survivor.health_condition.name}",
        )

    def on_stage_complete(self, survivor: Survivor, stage_name: str) -> None:
        self.log.log(self.level, f"PROGRESS: Survivor #{survivor.id} completed {stage_name}")

    def on_service_start(self, station_name: str, queue_length_after_start: int) -> None:
        self.log.log(
            self.level,
            f"SERVICE STARTED: {station_name} is now serving a survivor "
            f"(queue length: {queue_length_after_start})",
        )

    def on_settlement(self, survivor: Survivor) -> None:
        self.log.log(
            self.level,
            f"SETTLEMENT COMPLETE: Survivor #{survivor.id} settled in "
            f"{survivor.assigned_outcome} after {survivor.total_time_in_camp():.2f} minutes",
        )

    def on_results(
        self,
        clock_time: float,
        total_arrived: int,
        total_processed: int,
        processed_survivors: Sequence[Survivor],
        station_stats: Dict[str, StationStats],
    ) -> None:
        self.log.info(f"SIMULATION COMPLETE at {clock_time:.2f} minutes")
        self.log.info(f"Total survivors arrived: {total_arrived}")
        self.log.info(f"Total survivors processed: {total_processed}")

        for stats in station_stats.values():
            self.log.info(
                f"{stats.name}: served {stats.served_count}, "
                f"average service {stats.average_service_time:.2f} min, "
                f"max queue {stats.max_queue_length}, "
                f"max wait {stats.max_wait_observed:.2f} min"
            )

        if processed_survivors:
            n = len(processed_survivors)
            mean_time = sum(s.total_time_in_camp() for s in processed_survivors) / n
            mean_wait = sum(s.cumulative_wait_time for s in processed_survivors) / n
            self.log.info(f"Average total time in camp: {mean_time:.2f} minutes")
            self.log.info(f"Average waiting time: {mean_wait:.2f} minutes")
