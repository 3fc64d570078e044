"""KPI collection during simulation runs."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np

from rescuecamp.model.station import StationStats


@dataclass
class ResultsCollector:
    """Collect and compute simulation metrics.

    This class accumulates events during a simulation run and computes
    summary metrics after the run completes.

    Attributes:
        arrivals: Total count of survivor arrivals.
        processed: Total count of settled survivors.
        wait_times: Cumulative wait of each settled survivor (minutes).
        system_times: Time in camp of each settled survivor (minutes).
        outcome_counts: Settled survivors per assigned home.
    """

    arrivals: int = 0
    processed: int = 0
    wait_times: List[float] = field(default_factory=list)
    system_times: List[float] = field(default_factory=list)
    outcome_counts: Counter = field(default_factory=Counter)

    def record_arrival(self) -> None:
        """Record a survivor arrival."""
        self.arrivals += 1

    def record_settlement(self, system_time: float, wait_time: float, outcome: str) -> None:
        """Record a settled survivor.

        Args:
            system_time: Arrival to settlement (minutes).
            wait_time: Cumulative waiting time (minutes).
            outcome: Assigned home.
        """
        self.processed += 1
        self.system_times.append(system_time)
        self.wait_times.append(wait_time)
        self.outcome_counts[outcome] += 1

    def compute_metrics(
        self, sim_time: float, station_stats: Dict[str, StationStats]
    ) -> Dict[str, Any]:
        """Compute all KPIs from collected data.

        Args:
            sim_time: Clock value when the run stopped (minutes).
            station_stats: Statistics keyed by station key.

        Returns:
            Dictionary containing:
            - arrivals, processed, in_flight: Counts
            - mean_system_time, p95_system_time
            - mean_wait_time, max_wait_time
            - throughput_per_hour: Settlements per hour
            - outcome_counts: Settlements per home
            - served_<key>, util_<key>, mean_service_<key>, max_queue_<key>
            - stations: List of per-station stat dicts
        """
        if self.system_times:
            system_times = np.array(self.system_times)
            mean_system = float(np.mean(system_times))
            p95_system = float(np.percentile(system_times, 95))
        else:
            mean_system = p95_system = 0.0

        if self.wait_times:
            wait_times = np.array(self.wait_times)
            mean_wait = float(np.mean(wait_times))
            max_wait = float(np.max(wait_times))
        else:
            mean_wait = max_wait = 0.0

        throughput = self.processed / (sim_time / 60) if sim_time > 0 else 0.0

        metrics: Dict[str, Any] = {
            "arrivals": self.arrivals,
            "processed": self.processed,
            "in_flight": self.arrivals - self.processed,
            "sim_time": sim_time,
            "mean_system_time": mean_system,
            "p95_system_time": p95_system,
            "mean_wait_time": mean_wait,
            "max_wait_time": max_wait,
            "throughput_per_hour": throughput,
            "outcome_counts": dict(self.outcome_counts),
        }

        for key, stats in station_stats.items():
            metrics[f"served_{key}"] = stats.served_count
            metrics[f"util_{key}"] = self._compute_utilisation(stats, sim_time)
            metrics[f"mean_service_{key}"] = stats.average_service_time
            metrics[f"max_queue_{key}"] = stats.max_queue_length

        metrics["stations"] = [
            dict(stats.as_dict(), key=key) for key, stats in station_stats.items()
        ]
        return metrics

    @staticmethod
    def _compute_utilisation(stats: StationStats, sim_time: float) -> float:
        """Fraction of the run the server spent on completed services."""
        if sim_time <= 0:
            return 0.0
        return min(stats.cumulative_service_time / sim_time, 1.0)
