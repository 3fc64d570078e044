"""Tests for the camp model and full simulation runs."""

import logging

import pytest

from rescuecamp.core.entities import AgeCategory, EventType, StationId
from rescuecamp.core.events import Event
from rescuecamp.core.scenario import Scenario
from rescuecamp.model import camp
from rescuecamp.model.camp import CampModel, run_simulation
from rescuecamp.model.engine import Engine
from rescuecamp.model.observer import CampObserver, LoggingObserver


class FailingObserver(CampObserver):
    """Observer whose arrival hook always raises."""

    def on_arrival(self, survivor):
        raise RuntimeError("observer broke")


class CountingObserver(CampObserver):
    """Observer that counts hook calls."""

    def __init__(self):
        self.arrivals = 0
        self.settlements = 0
        self.service_starts = 0
        self.results_calls = 0

    def on_arrival(self, survivor):
        self.arrivals += 1

    def on_service_start(self, station_name, queue_length_after_start):
        self.service_starts += 1

    def on_settlement(self, survivor):
        self.settlements += 1

    def on_results(self, clock_time, total_arrived, total_processed, processed, stats):
        self.results_calls += 1


class ShelterAuditObserver(CampObserver):
    """Checks shelter queues hold only the matching age category."""

    def __init__(self):
        self.model = None
        self.violations = 0
        self.checks = 0

    def on_service_start(self, station_name, queue_length_after_start):
        expected = {
            StationId.CHILD_SHELTER: AgeCategory.CHILD,
            StationId.ADULT_SHELTER: AgeCategory.ADULT,
        }
        for sid, category in expected.items():
            station = self.model.stations[sid]
            held = list(station.queued())
            if station.in_service is not None:
                held.append(station.in_service)
            self.violations += sum(1 for s in held if s.age_category is not category)
        self.checks += 1


class TestConservation:
    """Test survivor bookkeeping."""

    def test_every_survivor_accounted_for(self, short_scenario):
        """Arrived survivors are either processed or held by a station."""
        model = CampModel(short_scenario)
        results = model.run()

        held = sum(len(station) for station in model.stations.values())
        assert len(model.all_survivors()) == results["arrivals"]
        assert results["arrivals"] == results["processed"] + results["in_flight"]
        assert len(model.in_flight_survivors()) == held
        assert len(model.processed_survivors()) == results["processed"]

    def test_processed_survivors_complete_after_arrival(self, short_scenario):
        """Settlement strictly follows arrival."""
        model = CampModel(short_scenario)
        model.run()

        processed = model.processed_survivors()
        assert len(processed) > 0
        assert all(s.completion_time > s.arrival_time for s in processed)

    def test_waits_non_negative(self, short_scenario):
        """Cumulative waits are never negative."""
        model = CampModel(short_scenario)
        model.run()
        assert all(s.cumulative_wait_time >= 0 for s in model.all_survivors())

    def test_processed_survivors_have_home(self, short_scenario):
        """Every settled survivor gets a home from the right shelter table."""
        model = CampModel(short_scenario)
        model.run()

        child_homes = set(short_scenario.outcome_weights[StationId.CHILD_SHELTER])
        adult_homes = set(short_scenario.outcome_weights[StationId.ADULT_SHELTER])
        for s in model.processed_survivors():
            homes = child_homes if s.is_child else adult_homes
            assert s.assigned_outcome in homes

    def test_stage_sequences_follow_pipeline(self, short_scenario):
        """Processed survivors visit registration, supplies and accommodation."""
        model = CampModel(short_scenario)
        model.run()

        for s in model.processed_survivors():
            assert "Registration Desk" in s.stages_visited
            assert s.stages_visited[-2] == "Accommodation Center"
            if s.requires_medical:
                assert s.stages_visited[0] == "Medical Treatment Station"
            else:
                assert s.stages_visited[0] == "Registration Desk"


class TestShelterSeparation:
    """Test children and adults never share a shelter queue."""

    def test_large_run_keeps_shelters_separate(self):
        """Over 1000 survivors, shelter queues only hold their category."""
        scenario = Scenario(
            run_length=4500.0, arrival_mean=3.5, random_seed=7,
        ).with_workers(accommodation=4)
        audit = ShelterAuditObserver()
        model = CampModel(scenario, observers=[audit])
        audit.model = model

        results = model.run()

        assert results["arrivals"] >= 1000
        assert audit.checks > 0
        assert audit.violations == 0


class TestOutcomeAssignment:
    """Test home assignment at terminal shelters."""

    def test_assignment_is_idempotent(self, short_scenario):
        """Reassigning keeps the home and draws nothing."""
        model = CampModel(short_scenario)
        model.run()
        survivor = next(s for s in model.processed_survivors() if not s.is_child)
        home = survivor.assigned_outcome
        rng_state = model._rng_routing.bit_generator.state
        stats_before = model.station_stats()
        counts_before = dict(model.collector.outcome_counts)

        assert model.assign_outcome(survivor, StationId.ADULT_SHELTER) == home
        assert model._rng_routing.bit_generator.state == rng_state
        assert model.station_stats() == stats_before
        assert dict(model.collector.outcome_counts) == counts_before

    def test_station_without_table_assigns_nothing(self, short_scenario):
        """Non-shelter stations have no weight table."""
        model = CampModel(short_scenario)
        survivor = model.factory.create(99, 0.0)
        assert model.assign_outcome(survivor, StationId.SUPPLIES) is None
        assert survivor.assigned_outcome is None

    def test_outcome_counts_match_processed(self, short_scenario):
        """Outcome tallies add up to the processed count."""
        results = run_simulation(short_scenario)
        assert sum(results["outcome_counts"].values()) == results["processed"]


class TestDispatch:
    """Test event dispatch table."""

    def test_unhandled_tag_fails_construction(self, short_scenario, monkeypatch):
        """A completion tag without a station is caught at construction."""
        monkeypatch.setitem(camp.COMPLETION_EVENTS, StationId.MEDICAL, EventType.ARRIVAL)
        with pytest.raises(RuntimeError, match="MEDICAL_COMPLETE"):
            CampModel(short_scenario)

    def test_unknown_tag_on_dispatch(self, short_scenario):
        """Dispatching a tag with no handler raises."""
        model = CampModel(short_scenario)
        del model._handlers[EventType.SUPPLIES_COMPLETE]
        with pytest.raises(ValueError, match="Unhandled event type"):
            model.handle_event(Event(EventType.SUPPLIES_COMPLETE, 0.0))

    def test_completion_at_idle_station_warns(self, short_scenario, caplog):
        """A stray completion event is logged and ignored."""
        model = CampModel(short_scenario)
        with caplog.at_level(logging.WARNING, logger="rescuecamp.model.camp"):
            model.handle_event(Event(EventType.MEDICAL_COMPLETE, 0.0))
        assert "is idle" in caplog.text


class TestReproducibility:
    """Test simulation reproducibility."""

    def test_same_seed_same_results(self, short_scenario):
        """Same seed produces identical results."""
        assert run_simulation(short_scenario) == run_simulation(short_scenario)

    def test_same_scenario_reused(self, short_scenario):
        """Running a scenario does not consume its random streams."""
        first = CampModel(short_scenario)
        first.run()
        second = CampModel(short_scenario)
        second.run()
        assert first.processed_survivors() == second.processed_survivors()

    def test_different_seed_different_results(self, short_scenario):
        """Different seeds produce different runs."""
        a = run_simulation(short_scenario)
        b = run_simulation(short_scenario.clone_with_seed(123))
        assert a["mean_system_time"] != b["mean_system_time"]


class TestObservers:
    """Test observer notification and isolation."""

    def test_hooks_called(self, short_scenario):
        """Observers see arrivals, service starts, settlements and results."""
        observer = CountingObserver()
        results = run_simulation(short_scenario, observers=[observer])

        assert observer.arrivals == results["arrivals"]
        assert observer.settlements == results["processed"]
        assert observer.service_starts > 0
        assert observer.results_calls == 1

    def test_failing_observer_does_not_abort_run(self, short_scenario):
        """Exceptions in observers are logged and the run completes."""
        baseline = run_simulation(short_scenario)
        results = run_simulation(short_scenario, observers=[FailingObserver()])

        assert results["observer_failures"] == results["arrivals"]
        assert results["processed"] == baseline["processed"]
        assert results["mean_system_time"] == baseline["mean_system_time"]

    def test_logging_observer_reports(self, short_scenario, caplog):
        """Logging observer writes progress and a summary."""
        with caplog.at_level(logging.INFO, logger="rescuecamp.report"):
            run_simulation(short_scenario, observers=[LoggingObserver()])

        assert "NEW ARRIVAL" in caplog.text
        assert "SETTLEMENT COMPLETE" in caplog.text
        assert "SIMULATION COMPLETE" in caplog.text


class TestMetrics:
    """Test result dictionary contents."""

    def test_station_metrics_present(self, short_scenario):
        """Per-station metrics are keyed by lower-case station id."""
        results = run_simulation(short_scenario)
        for sid in StationId:
            key = sid.name.lower()
            assert f"served_{key}" in results
            assert 0.0 <= results[f"util_{key}"] <= 1.0
        assert len(results["stations"]) == len(StationId)

    def test_run_length_recorded(self, short_scenario):
        """Results carry the configured horizon and stop time."""
        results = run_simulation(short_scenario)
        assert results["run_length"] == short_scenario.run_length
        assert results["sim_time"] >= short_scenario.run_length


class ReentrantObserver(CampObserver):
    """Observer that tries to restart the run from inside a hook."""

    def __init__(self):
        self.model = None
        self.errors = []

    def on_arrival(self, survivor):
        try:
            self.model.run()
        except RuntimeError as e:
            self.errors.append(e)
            raise


class ClockObserver(CampObserver):
    """Records the model clock at every hook call."""

    def __init__(self):
        self.model = None
        self.times = []

    def _record(self, *args):
        self.times.append(self.model.context.now)

    on_arrival = _record
    on_stage_complete = _record
    on_service_start = _record
    on_settlement = _record
    on_results = _record


class ResultsRecorder(CampObserver):
    """Keeps the on_results totals."""

    def __init__(self):
        self.totals = None

    def on_results(self, clock_time, total_arrived, total_processed, processed, stats):
        self.totals = (clock_time, total_arrived, total_processed)


class TamperingObserver(CampObserver):
    """Overwrites survivor timestamps it is given."""

    def on_arrival(self, survivor):
        survivor.arrival_time = -100.0

    def on_settlement(self, survivor):
        survivor.completion_time = 0.0
        survivor.stages_visited.clear()

    def on_results(self, clock_time, total_arrived, total_processed, processed, stats):
        for s in processed:
            s.assigned_outcome = "Nowhere"


class TestSingleRun:
    """Test a model runs exactly once."""

    def test_second_run_raises(self, short_scenario):
        """Running a finished model again is rejected and leaves results intact."""
        model = CampModel(short_scenario)
        first = model.run()
        now = model.context.now

        with pytest.raises(RuntimeError):
            model.run()

        assert model.context.now == now
        assert model.results is first
        assert len(model.all_survivors()) == first["arrivals"]

    def test_run_from_observer_rejected(self, short_scenario):
        """An observer cannot re-enter the loop while the run is in progress."""
        baseline = run_simulation(short_scenario)
        observer = ReentrantObserver()
        model = CampModel(short_scenario, observers=[observer])
        observer.model = model

        results = model.run()

        assert len(observer.errors) == results["arrivals"]
        assert results["observer_failures"] == results["arrivals"]
        assert results["arrivals"] == baseline["arrivals"]
        assert results["processed"] == baseline["processed"]
        assert results["sim_time"] == baseline["sim_time"]


class TestClockAcrossRun:
    """Test clock behaviour over full model runs."""

    def test_zero_horizon_reports_nothing(self, short_scenario):
        """A zero horizon reports no arrivals and no settlements."""
        recorder = ResultsRecorder()
        model = CampModel(short_scenario, observers=[recorder])

        Engine(model.context, model.hooks(), 0.0).run()

        assert recorder.totals == (0.0, 0, 0)

    @pytest.mark.parametrize("seed", [1, 42, 2024])
    def test_clock_never_decreases(self, seed):
        """Clock seen by observers is non-decreasing over the run."""
        observer = ClockObserver()
        model = CampModel(
            Scenario(run_length=240.0, arrival_mean=4.0, random_seed=seed),
            observers=[observer],
        )
        observer.model = model

        model.run()

        assert len(observer.times) > 10
        assert all(b >= a for a, b in zip(observer.times, observer.times[1:]))


class TestObserverCopies:
    """Test observers cannot alter survivors held by the model."""

    def test_tampering_has_no_effect(self, short_scenario):
        """Edits made by an observer do not reach the run or its results."""
        baseline = CampModel(short_scenario)
        expected = baseline.run()
        model = CampModel(short_scenario, observers=[TamperingObserver()])

        results = model.run()

        assert results["mean_system_time"] == expected["mean_system_time"]
        assert results["outcome_counts"] == expected["outcome_counts"]
        assert model.processed_survivors() == baseline.processed_survivors()
        assert all(s.arrival_time >= 0 for s in model.all_survivors())
        assert all(s.stages_visited for s in model.processed_survivors())
