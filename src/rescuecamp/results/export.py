"""Tabular export of survivors and station statistics."""

import logging
from pathlib import Path
from typing import Dict, Iterable, Union

import pandas as pd

from rescuecamp.model.station import StationStats
from rescuecamp.model.survivor import Survivor

logger = logging.getLogger(__name__)

SURVIVOR_COLUMNS = [
    "ID",
    "Age",
    "AgeCategory",
    "HealthCondition",
    "RequiresMedicalTreatment",
    "RequestsCommunicationService",
    "AssignedHome",
    "ArrivalTime",
    "CompletionTime",
    "TotalWaitingTime",
    "TotalTimeInCamp",
    "Stages",
]


def survivors_to_dataframe(survivors: Iterable[Survivor]) -> pd.DataFrame:
    """One row per survivor.

    Survivors still in flight have empty AssignedHome, CompletionTime and
    TotalTimeInCamp.
    """
    rows = []
    for s in survivors:
        rows.append({
            "ID": s.id,
            "Age": s.age,
            "AgeCategory": s.age_category.name,
            "HealthCondition": s.health_condition.name,
            "RequiresMedicalTreatment": s.requires_medical,
            "RequestsCommunicationService": s.requests_communication,
            "AssignedHome": s.assigned_outcome,
            "ArrivalTime": s.arrival_time,
            "CompletionTime": s.completion_time,
            "TotalWaitingTime": s.cumulative_wait_time,
            "TotalTimeInCamp": s.total_time_in_camp() if s.processed else None,
            "Stages": " > ".join(s.stages_visited),
        })
    return pd.DataFrame(rows, columns=SURVIVOR_COLUMNS)


def station_stats_to_dataframe(station_stats: Dict[str, StationStats]) -> pd.DataFrame:
    """One row per station, indexed by station key."""
    df = pd.DataFrame([stats.as_dict() for stats in station_stats.values()])
    df.index = pd.Index(list(station_stats), name="key")
    return df


def write_survivors_csv(path: Union[str, Path], survivors: Iterable[Survivor]) -> int:
    """Write survivors to a CSV file.

    Returns:
        Number of survivors written.
    """
    df = survivors_to_dataframe(survivors)
    df.to_csv(path, index=False)
    logger.info(f"Exported {len(df)} survivors to {path}")
    return len(df)
