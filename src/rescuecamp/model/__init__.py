"""Model layer: survivors, stations, engine loop, routing, camp model."""

from rescuecamp.model.camp import CampModel, run_simulation
from rescuecamp.model.engine import Engine, EngineHooks, run_engine
from rescuecamp.model.observer import CampObserver, LoggingObserver
from rescuecamp.model.routing import Branch, Pipeline, default_pipeline
from rescuecamp.model.station import Station, StationStats
from rescuecamp.model.survivor import Survivor, SurvivorFactory

__all__ = [
    "CampModel",
    "run_simulation",
    "Engine",
    "EngineHooks",
    "run_engine",
    "CampObserver",
    "LoggingObserver",
    "Branch",
    "Pipeline",
    "default_pipeline",
    "Station",
    "StationStats",
    "Survivor",
    "SurvivorFactory",
]
