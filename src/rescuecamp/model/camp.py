"""Rescue camp model: stations wired into a routing pipeline."""

import copy
import itertools
import logging
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import numpy as np

from rescuecamp.core.arrivals import ArrivalProcess
from rescuecamp.core.entities import (
    COMPLETION_EVENTS, STATION_NAMES, EventType, StationId,
)
from rescuecamp.core.events import Event, SimContext
from rescuecamp.core.scenario import Scenario
from rescuecamp.model.engine import Engine, EngineHooks
from rescuecamp.model.observer import CampObserver, ObserverSet
from rescuecamp.model.routing import Pipeline, default_pipeline
from rescuecamp.model.station import Station, StationStats
from rescuecamp.model.survivor import Survivor, SurvivorFactory
from rescuecamp.results.collector import ResultsCollector

logger = logging.getLogger(__name__)


def build_stations(scenario: Scenario, context: SimContext) -> Dict[StationId, Station]:
    """Create one Station per StationId, in polling order."""
    stations = {}
    for sid in sorted(StationId):
        config = scenario.stations[sid]
        stations[sid] = Station(
            name=STATION_NAMES[sid],
            generator=config.distribution.build(scenario.station_seed(sid)),
            completion_type=COMPLETION_EVENTS[sid],
            workers=config.workers,
            duration_policy=config.duration_policy,
            fixed_duration=config.fixed_duration,
            key=sid.name.lower(),
        )
    return stations


class CampModel:
    """Survivor flow through the camp.

    Owns the stations, the arrival stream and survivor bookkeeping, and
    supplies the engine hooks. Every survivor is either in flight (held by
    exactly one station) or in the processed collection.

    Attributes:
        scenario: Run configuration.
        context: Clock and event queue for this run.
        pipeline: Routing table.
        stations: Stations keyed by StationId, in polling order.
        observers: Hook dispatcher.
        collector: KPI accumulator.
        engine: Single-use engine running this model to the horizon.
        results: Metrics dictionary, set when the run finishes.
    """

    def __init__(
        self,
        scenario: Scenario,
        observers: Iterable[CampObserver] = (),
        pipeline: Optional[Pipeline] = None,
    ) -> None:
        self.scenario = scenario
        self.context = SimContext()
        self.pipeline = pipeline or default_pipeline()

        self.stations = build_stations(scenario, self.context)
        self._polling_order: List[Station] = list(self.stations.values())
        self.pipeline.validate(self.stations)

        self.arrival_process = ArrivalProcess(
            scenario.arrival_distribution.build(scenario.arrival_seed), self.context
        )
        self.factory = SurvivorFactory(scenario.survivor_mix, scenario.attribute_rng())
        self._rng_routing: np.random.Generator = scenario.routing_rng()

        self.observers = ObserverSet(observers)
        self.collector = ResultsCollector()
        self.results: Optional[Dict[str, Any]] = None

        self._ids = itertools.count(1)
        self._all: List[Survivor] = []
        self._in_flight: Dict[int, Survivor] = {}
        self._processed: List[Survivor] = []

        self._handlers: Dict[EventType, Callable[[Event], None]] = {
            EventType.ARRIVAL: self._handle_arrival,
        }
        for sid, station in self.stations.items():
            self._handlers[station.completion_type] = partial(self._handle_completion, sid)
        unhandled = [t.name for t in EventType if t not in self._handlers]
        if unhandled:
            raise RuntimeError(f"No handler for event types: {', '.join(unhandled)}")

        self.engine = Engine(self.context, self.hooks(), scenario.run_length)

    # ---- engine hooks ----

    def hooks(self) -> EngineHooks:
        return EngineHooks(
            initialize=self.initialize,
            handle_event=self.handle_event,
            try_c_events=self.try_c_events,
            finalize=self.finalize,
        )

    def initialize(self) -> None:
        """Schedule the first arrival."""
        logger.info(f"Rescue camp simulation starting (horizon {self.scenario.run_length} min)")
        self.arrival_process.generate_next_event()

    def handle_event(self, event: Event) -> None:
        """Dispatch a B-event on its tag.

        Raises:
            ValueError: If the tag has no handler.
        """
        try:
            handler = self._handlers[event.type]
        except KeyError:
            raise ValueError(f"Unhandled event type {event.type!r}") from None
        handler(event)

    def try_c_events(self) -> None:
        """Start service at every idle station with a queue, in fixed order."""
        for station in self._polling_order:
            if station.begin_service(self.context) is not None:
                self.observers.notify("on_service_start", station.name, station.queue_length)

    def finalize(self) -> Dict[str, Any]:
        """Aggregate results and notify observers."""
        now = self.context.now
        stats = self.station_stats()
        self.observers.notify(
            "on_results",
            now,
            self.collector.arrivals,
            self.collector.processed,
            tuple(copy.deepcopy(s) for s in self._processed),
            stats,
        )
        self.results = self.collector.compute_metrics(now, stats)
        self.results["run_length"] = self.scenario.run_length
        self.results["observer_failures"] = self.observers.failures
        logger.info(
            f"Simulation complete at {now:.2f}: {self.collector.arrivals} arrived, "
            f"{self.collector.processed} processed"
        )
        return self.results

    def run(self) -> Dict[str, Any]:
        """Run the engine to the scenario horizon.

        A model runs once. Calling run() again, or from inside an observer
        hook while the run is in progress, raises RuntimeError.
        """
        return self.engine.run()

    # ---- event handlers ----

    def _handle_arrival(self, event: Event) -> None:
        survivor = self.factory.create(next(self._ids), self.context.now)
        self._all.append(survivor)
        self._in_flight[survivor.id] = survivor
        self.collector.record_arrival()
        self._notify_survivor("on_arrival", survivor)

        self._route(survivor, self.pipeline.first_stage(survivor), None)
        self.arrival_process.generate_next_event()

    def _handle_completion(self, sid: StationId, event: Event) -> None:
        station = self.stations[sid]
        survivor = station.complete_service(self.context)
        if survivor is None:
            logger.warning(f"{event.type.name} at {event.time:.3f} but {station.name} is idle")
            return
        self._notify_survivor("on_stage_complete", survivor, station.name)
        self._route(survivor, self.pipeline.next_stage(survivor, sid), sid)

    def _route(
        self, survivor: Survivor, target: Optional[StationId], source: Optional[StationId]
    ) -> None:
        if target is None:
            self._settle(survivor, source)
            return
        logger.debug(f"ROUTING: Survivor #{survivor.id} assigned to {STATION_NAMES[target]}")
        self.stations[target].enqueue(survivor)

    def assign_outcome(self, survivor: Survivor, station: StationId) -> Optional[str]:
        """Draw a home from the station's weight table.

        A survivor that already has a home keeps it and no draw is made.
        Stations without a weight table assign nothing.
        """
        if survivor.assigned_outcome is not None:
            return survivor.assigned_outcome
        weights = self.scenario.outcome_weights.get(station)
        if not weights:
            return None
        names = list(weights)
        probs = np.array([weights[n] for n in names], dtype=float)
        idx = self._rng_routing.choice(len(names), p=probs / probs.sum())
        return survivor.assign_outcome(names[idx])

    def _settle(self, survivor: Survivor, station: Optional[StationId]) -> None:
        if station is not None:
            self.assign_outcome(survivor, station)
        survivor.mark_completed(self.context.now)
        del self._in_flight[survivor.id]
        self._processed.append(survivor)
        self.collector.record_settlement(
            survivor.total_time_in_camp(),
            survivor.cumulative_wait_time,
            survivor.assigned_outcome or "unassigned",
        )
        self._notify_survivor("on_settlement", survivor)

    def _notify_survivor(self, hook: str, survivor: Survivor, *args) -> None:
        # Observers get a copy so they cannot alter the survivor in flight
        if self.observers:
            self.observers.notify(hook, copy.deepcopy(survivor), *args)

    # ---- read-only accessors ----

    def all_survivors(self) -> Tuple[Survivor, ...]:
        return tuple(self._all)

    def processed_survivors(self) -> Tuple[Survivor, ...]:
        return tuple(self._processed)

    def in_flight_survivors(self) -> Tuple[Survivor, ...]:
        return tuple(self._in_flight.values())

    def station_stats(self) -> Dict[str, StationStats]:
        """Statistics snapshots keyed by station key."""
        return {station.key: station.snapshot() for station in self._polling_order}


def run_simulation(
    scenario: Scenario, observers: Optional[Iterable[CampObserver]] = None
) -> Dict[str, Any]:
    """Execute a single simulation run.

    Args:
        scenario: Scenario configuration with all parameters.
        observers: Optional hooks notified during the run.

    Returns:
        Dictionary of results, see ResultsCollector.compute_metrics.
    """
    model = CampModel(scenario, observers or ())
    return model.run()
