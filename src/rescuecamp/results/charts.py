"""Plotly figures for run and experiment results.

Builders return figures and never render them, so they work the same in a
notebook, a script writing HTML, or a dashboard.
"""

from typing import Dict, List, Mapping

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

UTILISATION_TARGET = 0.85


def utilisation_chart(results: Mapping, target: float = UTILISATION_TARGET) -> go.Figure:
    """Bar chart of station utilisation with a target line.

    Args:
        results: Output of run_simulation (uses the `stations` list and
            the util_<key> entries).
        target: Utilisation drawn as a dashed reference line.
    """
    util_data = pd.DataFrame({
        "Station": [s["name"] for s in results["stations"]],
        "Utilisation": [results[f"util_{s['key']}"] for s in results["stations"]],
    })

    fig = px.bar(
        util_data,
        x="Station",
        y="Utilisation",
        title="Station Utilisation",
        color="Station",
    )
    fig.update_layout(showlegend=False, yaxis_tickformat=".0%")
    fig.add_hline(
        y=target, line_dash="dash", line_color="red",
        annotation_text=f"Target ({target:.0%})",
    )
    return fig


def outcome_chart(outcome_counts: Dict[str, int]) -> go.Figure:
    """Pie chart of settled survivors per home."""
    data = pd.DataFrame({
        "Home": list(outcome_counts),
        "Survivors": list(outcome_counts.values()),
    })
    return px.pie(data, values="Survivors", names="Home", title="Settlements by Home")


def replication_histogram(values: List[float], label: str, nbins: int = 20) -> go.Figure:
    """Distribution of one metric across replications."""
    fig = px.histogram(
        np.asarray(values, dtype=float),
        nbins=nbins,
        labels={"value": label, "count": "Frequency"},
        title=f"Distribution of {label}",
    )
    fig.update_layout(showlegend=False)
    return fig


def sweep_chart(sweep) -> go.Figure:
    """Line chart of a staffing sweep with confidence interval error bars.

    Args:
        sweep: SweepResult from staffing_sweep.
    """
    df = sweep.to_dataframe()

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=df["workers"],
        y=df["mean"],
        error_y=dict(
            type="data",
            symmetric=False,
            array=df["ci_upper"] - df["mean"],
            arrayminus=df["mean"] - df["ci_lower"],
        ),
        mode="lines+markers",
        name=sweep.metric,
        line=dict(color="#636efa"),
    ))
    fig.add_hline(
        y=df["mean"].iloc[0],
        line_dash="dash",
        line_color="gray",
        annotation_text="Baseline",
    )
    fig.update_layout(
        title=f"Effect of {sweep.station} workers on {sweep.metric}",
        xaxis_title=f"{sweep.station} workers",
        yaxis_title=sweep.metric,
    )
    return fig
