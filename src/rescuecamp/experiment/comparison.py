"""Scenario comparison with statistical testing.

Runs two camp configurations over the same seed sequence and reports, per
metric, whether the difference between them is larger than replication
noise.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import numpy as np
import pandas as pd
from scipy import stats

from rescuecamp.core.scenario import Scenario
from rescuecamp.model.camp import run_simulation

# Metrics where a larger value is the better outcome; all others improve downwards
HIGHER_IS_BETTER = frozenset({"processed", "throughput_per_hour"})
HIGHER_IS_BETTER_PREFIXES = ("served_",)

COMPARISON_COLUMNS = [
    "metric",
    "mean_a",
    "std_a",
    "mean_b",
    "std_b",
    "difference",
    "pct_difference",
    "p_value",
    "significant",
    "effect_size",
    "effect_magnitude",
]


@dataclass
class ComparisonResult:
    """Result of comparing two scenarios.

    Attributes:
        scenario_a_name: Display name for scenario A.
        scenario_b_name: Display name for scenario B.
        metrics: DataFrame with detailed comparison for each metric.
        summary: Plain language summary of the comparison.
    """
    scenario_a_name: str
    scenario_b_name: str
    metrics: pd.DataFrame
    summary: str

    def significant_differences(self, alpha: float = 0.05) -> pd.DataFrame:
        """Return only metrics with p_value < alpha."""
        return self.metrics[self.metrics["p_value"] < alpha]


def _run_replications(scenario: Scenario, n_reps: int) -> List[Dict]:
    return [
        run_simulation(scenario.clone_with_seed(scenario.random_seed + i))
        for i in range(n_reps)
    ]


def _effect_magnitude(d: float) -> str:
    """Interpret Cohen's d effect size."""
    d = abs(d)
    if d < 0.2:
        return "negligible"
    elif d < 0.5:
        return "small"
    elif d < 0.8:
        return "medium"
    else:
        return "large"


def _is_higher_better(metric: str, higher_is_better: Iterable[str]) -> bool:
    return metric in higher_is_better or metric.startswith(HIGHER_IS_BETTER_PREFIXES)


def _change_line(row: pd.Series) -> str:
    direction = "increase" if row["difference"] > 0 else "reduction"
    return (
        f"- **{row['metric']}**: {abs(row['pct_difference']):.1f}% {direction} "
        f"({row['effect_magnitude']} effect)\n"
    )


def _generate_summary(
    df: pd.DataFrame,
    name_a: str,
    name_b: str,
    higher_is_better: Iterable[str] = HIGHER_IS_BETTER,
) -> str:
    """Markdown summary, labelling each significant change by metric direction."""
    higher_is_better = set(higher_is_better)
    lines = [f"## Comparison: {name_a} vs {name_b}\n"]
    if df.empty:
        lines.append("\nNo comparable metrics.\n")
        return "".join(lines)

    significant = df["significant"].astype(bool)
    higher = df["metric"].map(lambda m: _is_higher_better(m, higher_is_better))
    improved = (df["difference"] > 0) == higher
    sig_improvements = df[significant & (df["difference"] != 0) & improved]
    sig_degradations = df[significant & (df["difference"] != 0) & ~improved]

    if len(sig_improvements) > 0:
        lines.append(f"### Significant Improvements ({name_b} is better):\n")
        for _, row in sig_improvements.iterrows():
            lines.append(_change_line(row))

    if len(sig_degradations) > 0:
        lines.append(f"\n### Significant Degradations ({name_b} is worse):\n")
        for _, row in sig_degradations.iterrows():
            lines.append(_change_line(row))

    no_change = df[~significant]
    if len(no_change) > 0:
        lines.append("\n### No Significant Change:\n")
        for _, row in no_change.iterrows():
            lines.append(f"- {row['metric']}\n")

    return "".join(lines)


def compare_scenarios(
    scenario_a: Scenario,
    scenario_b: Scenario,
    metrics: List[str],
    n_reps: int = 30,
    scenario_a_name: str = "Scenario A",
    scenario_b_name: str = "Scenario B",
    alpha: float = 0.05,
    higher_is_better: Optional[Iterable[str]] = None,
) -> ComparisonResult:
    """Compare two scenarios with statistical testing.

    Runs both scenarios n_reps times and uses a two-sided Mann-Whitney U
    test per metric. Metrics missing from the results are skipped.

    The summary treats a decrease as an improvement except for metrics in
    `higher_is_better` (default HIGHER_IS_BETTER) and `served_<key>` counts.

    Example:
        >>> current = Scenario()
        >>> proposed = current.with_workers(medical=8)
        >>> result = compare_scenarios(current, proposed, ['mean_wait_time'])
        >>> print(result.summary)
    """
    results_a = _run_replications(scenario_a, n_reps)
    results_b = _run_replications(scenario_b, n_reps)

    rows = []
    for metric in metrics:
        values_a = [r[metric] for r in results_a if metric in r]
        values_b = [r[metric] for r in results_b if metric in r]
        if not values_a or not values_b:
            continue

        mean_a = float(np.mean(values_a))
        mean_b = float(np.mean(values_b))
        std_a = float(np.std(values_a, ddof=1)) if len(values_a) > 1 else 0.0
        std_b = float(np.std(values_b, ddof=1)) if len(values_b) > 1 else 0.0

        try:
            _, p_value = stats.mannwhitneyu(values_a, values_b, alternative="two-sided")
            p_value = float(p_value)
        except ValueError:
            p_value = 1.0
        if np.isnan(p_value):
            p_value = 1.0

        pooled_std = np.sqrt((std_a ** 2 + std_b ** 2) / 2)
        diff = mean_b - mean_a
        effect_size = float(diff / pooled_std) if pooled_std > 0 else 0.0
        pct_diff = (diff / mean_a * 100) if mean_a != 0 else 0.0

        rows.append({
            "metric": metric,
            "mean_a": mean_a,
            "std_a": std_a,
            "mean_b": mean_b,
            "std_b": std_b,
            "difference": diff,
            "pct_difference": pct_diff,
            "p_value": p_value,
            "significant": p_value < alpha,
            "effect_size": effect_size,
            "effect_magnitude": _effect_magnitude(effect_size),
        })

    df = pd.DataFrame(rows, columns=COMPARISON_COLUMNS)
    return ComparisonResult(
        scenario_a_name=scenario_a_name,
        scenario_b_name=scenario_b_name,
        metrics=df,
        summary=_generate_summary(
            df, scenario_a_name, scenario_b_name,
            HIGHER_IS_BETTER if higher_is_better is None else higher_is_better,
        ),
    )
