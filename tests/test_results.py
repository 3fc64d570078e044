"""Tests for results collection and export."""

import pandas as pd
import pytest

from rescuecamp.model.camp import CampModel
from rescuecamp.model.station import StationStats
from rescuecamp.results.collector import ResultsCollector
from rescuecamp.results.export import (
    SURVIVOR_COLUMNS,
    station_stats_to_dataframe,
    survivors_to_dataframe,
    write_survivors_csv,
)


class TestResultsCollector:
    """Test KPI computation."""

    def test_empty_run(self):
        """No settlements gives zero KPIs."""
        metrics = ResultsCollector().compute_metrics(60.0, {})
        assert metrics["arrivals"] == 0
        assert metrics["mean_system_time"] == 0.0
        assert metrics["mean_wait_time"] == 0.0
        assert metrics["throughput_per_hour"] == 0.0

    def test_known_values(self):
        """KPIs computed from recorded settlements."""
        collector = ResultsCollector()
        for _ in range(3):
            collector.record_arrival()
        collector.record_settlement(10.0, 2.0, "Riverside Hall")
        collector.record_settlement(20.0, 4.0, "Riverside Hall")

        metrics = collector.compute_metrics(120.0, {})

        assert metrics["arrivals"] == 3
        assert metrics["processed"] == 2
        assert metrics["in_flight"] == 1
        assert metrics["mean_system_time"] == 15.0
        assert metrics["mean_wait_time"] == 3.0
        assert metrics["max_wait_time"] == 4.0
        assert metrics["throughput_per_hour"] == 1.0
        assert metrics["outcome_counts"] == {"Riverside Hall": 2}

    def test_station_metrics(self):
        """Per-station keys are generated from station stats."""
        stats = StationStats(
            name="Registration Desk",
            served_count=4,
            cumulative_service_time=30.0,
            max_queue_length=3,
        )
        metrics = ResultsCollector().compute_metrics(60.0, {"registration": stats})

        assert metrics["served_registration"] == 4
        assert metrics["util_registration"] == 0.5
        assert metrics["mean_service_registration"] == 7.5
        assert metrics["max_queue_registration"] == 3
        assert metrics["stations"][0]["key"] == "registration"

    def test_utilisation_capped(self):
        """Utilisation never exceeds 1."""
        stats = StationStats(name="Desk", served_count=1, cumulative_service_time=90.0)
        metrics = ResultsCollector().compute_metrics(60.0, {"desk": stats})
        assert metrics["util_desk"] == 1.0


class TestExport:
    """Test tabular export."""

    @pytest.fixture
    def finished_model(self, short_scenario):
        model = CampModel(short_scenario)
        model.run()
        return model

    def test_survivor_dataframe_columns(self, finished_model):
        """One row per survivor with the export columns."""
        df = survivors_to_dataframe(finished_model.all_survivors())
        assert list(df.columns) == SURVIVOR_COLUMNS
        assert len(df) == len(finished_model.all_survivors())

    def test_in_flight_rows_have_no_completion(self, finished_model):
        """Unsettled survivors export empty completion fields."""
        df = survivors_to_dataframe(finished_model.all_survivors())
        unsettled = df[df["CompletionTime"].isna()]
        assert len(unsettled) == len(finished_model.in_flight_survivors())

    def test_empty_dataframe(self):
        """No survivors gives an empty frame with the columns."""
        df = survivors_to_dataframe([])
        assert df.empty
        assert list(df.columns) == SURVIVOR_COLUMNS

    def test_station_dataframe(self, finished_model):
        """Station stats are indexed by key."""
        df = station_stats_to_dataframe(finished_model.station_stats())
        assert df.index.name == "key"
        assert "medical" in df.index
        assert "served_count" in df.columns

    def test_write_csv(self, finished_model, tmp_path):
        """CSV export writes every processed survivor."""
        path = tmp_path / "survivors.csv"
        n = write_survivors_csv(path, finished_model.processed_survivors())

        df = pd.read_csv(path)
        assert n == len(finished_model.processed_survivors())
        assert len(df) == n
        assert list(df.columns) == SURVIVOR_COLUMNS
