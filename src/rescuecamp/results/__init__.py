"""Results layer: KPI computation, tabular export and charts."""

from rescuecamp.results.collector import ResultsCollector
from rescuecamp.results.export import (
    station_stats_to_dataframe,
    survivors_to_dataframe,
    write_survivors_csv,
)

__all__ = [
    "ResultsCollector",
    "station_stats_to_dataframe",
    "survivors_to_dataframe",
    "write_survivors_csv",
]
