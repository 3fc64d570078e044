"""Confidence intervals, precision control and staffing sweeps."""

from dataclasses import dataclass
from typing import Dict, List

import numpy as np
import pandas as pd
from scipy import stats

from rescuecamp.core.scenario import Scenario
from rescuecamp.experiment.runner import multiple_replications
from rescuecamp.model.camp import run_simulation


def compute_ci(values: List[float], confidence: float = 0.95) -> Dict:
    """Student-t confidence interval over replication values.

    Fewer than two values give a zero-width interval at the single value
    (or at 0.0 when there are none).

    Returns:
        Dict with keys mean, std, se, ci_lower, ci_upper, ci_half_width, n.
    """
    n = len(values)
    if n < 2:
        mean = float(values[0]) if n == 1 else 0.0
        return {
            "mean": mean,
            "std": 0.0,
            "se": 0.0,
            "ci_lower": mean,
            "ci_upper": mean,
            "ci_half_width": 0.0,
            "n": n,
        }

    arr = np.array(values, dtype=float)
    mean = float(np.mean(arr))
    std = float(np.std(arr, ddof=1))
    se = float(stats.sem(arr))

    t_crit = stats.t.ppf((1 + confidence) / 2, df=n - 1)
    half_width = float(t_crit * se)

    return {
        "mean": mean,
        "std": std,
        "se": se,
        "ci_lower": mean - half_width,
        "ci_upper": mean + half_width,
        "ci_half_width": half_width,
        "n": n,
    }


def run_until_precision(
    scenario: Scenario,
    target_metric: str = "mean_system_time",
    target_half_width: float = 5.0,
    max_reps: int = 200,
    min_reps: int = 10,
    batch_size: int = 5,
    confidence: float = 0.95,
) -> Dict:
    """Add replications until the CI of `target_metric` is narrow enough.

    Precision is checked every `batch_size` replications once `min_reps`
    have run.

    Returns:
        Dict with converged (bool), n_reps, values and ci (see compute_ci).
    """
    values: List[float] = []

    for rep in range(max_reps):
        rep_scenario = scenario.clone_with_seed(scenario.random_seed + rep)
        values.append(run_simulation(rep_scenario)[target_metric])

        if rep >= min_reps - 1 and (rep + 1) % batch_size == 0:
            ci = compute_ci(values, confidence)
            if ci["ci_half_width"] <= target_half_width:
                return {"converged": True, "n_reps": rep + 1, "values": values, "ci": ci}

    return {
        "converged": False,
        "n_reps": max_reps,
        "values": values,
        "ci": compute_ci(values, confidence),
    }


def estimate_required_reps(
    pilot_values: List[float],
    target_half_width: float,
    confidence: float = 0.95,
) -> int:
    """Project the replication count for a CI half-width from pilot values.

    Never returns fewer than the pilot size.
    """
    if len(pilot_values) < 2:
        return 100

    n = len(pilot_values)
    std = float(np.std(pilot_values, ddof=1))
    t_crit = stats.t.ppf((1 + confidence) / 2, df=n - 1)

    if target_half_width <= 0:
        return 1000

    required_n = (t_crit * std / target_half_width) ** 2
    return max(int(np.ceil(required_n)), n)


@dataclass
class SweepResult:
    """Result of a staffing sweep.

    Attributes:
        station: Station key whose worker count was varied.
        values: Worker counts tested.
        metric: Results key that was measured.
        results: DataFrame with columns: workers, mean, std, ci_lower, ci_upper, n_reps.
    """
    station: str
    values: List[int]
    metric: str
    results: pd.DataFrame

    def to_dataframe(self) -> pd.DataFrame:
        return self.results

    def best(self, minimise: bool = True) -> int:
        """Worker count with the lowest (or highest) mean metric."""
        column = self.results["mean"]
        idx = column.idxmin() if minimise else column.idxmax()
        return int(self.results.loc[idx, "workers"])


def staffing_sweep(
    base_scenario: Scenario,
    station: str,
    worker_counts: List[int],
    metric: str = "mean_system_time",
    n_reps: int = 10,
    confidence: float = 0.95,
) -> SweepResult:
    """Replicate the scenario at each worker count of one station.

    Args:
        base_scenario: Scenario the sweep starts from.
        station: Lower-case station key, e.g. 'medical'.
        worker_counts: Worker counts to test.
        metric: Metric to measure (e.g. 'mean_wait_time').
        n_reps: Replications per worker count.
        confidence: Confidence level for intervals.

    Returns:
        SweepResult with a DataFrame of mean, std and CI per worker count.

    Example:
        >>> result = staffing_sweep(scenario, 'medical', [1, 2, 4, 6])
        >>> print(result.to_dataframe())
    """
    rows = []
    for workers in worker_counts:
        scenario = base_scenario.with_workers(**{station: workers})
        values = multiple_replications(scenario, n_reps, [metric])[metric]
        ci = compute_ci(values, confidence)
        rows.append({
            "workers": workers,
            "mean": ci["mean"],
            "std": ci["std"],
            "ci_lower": ci["ci_lower"],
            "ci_upper": ci["ci_upper"],
            "n_reps": ci["n"],
        })

    return SweepResult(
        station=station,
        values=list(worker_counts),
        metric=metric,
        results=pd.DataFrame(rows),
    )
