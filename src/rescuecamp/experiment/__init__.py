"""Experiment runners and analysis."""

from rescuecamp.experiment.analysis import (
    SweepResult,
    compute_ci,
    estimate_required_reps,
    run_until_precision,
    staffing_sweep,
)
from rescuecamp.experiment.comparison import ComparisonResult, compare_scenarios
from rescuecamp.experiment.runner import multiple_replications, run_scenario_comparison

__all__ = [
    "ComparisonResult",
    "SweepResult",
    "compare_scenarios",
    "compute_ci",
    "estimate_required_reps",
    "multiple_replications",
    "run_scenario_comparison",
    "run_until_precision",
    "staffing_sweep",
]
