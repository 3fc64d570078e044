"""Core foundation layer: clock, events, distributions, arrivals, scenario."""

from rescuecamp.core.clock import Clock, ClockOrderError
from rescuecamp.core.events import Event, EventQueue, SimContext
from rescuecamp.core.arrivals import ArrivalProcess
from rescuecamp.core.distributions import (
    Constant,
    DistributionConfig,
    NegativeExponential,
    Normal,
    Uniform,
)
from rescuecamp.core.scenario import Scenario, StationConfig, SurvivorMix

__all__ = [
    "Clock",
    "ClockOrderError",
    "Event",
    "EventQueue",
    "SimContext",
    "ArrivalProcess",
    "Constant",
    "DistributionConfig",
    "NegativeExponential",
    "Normal",
    "Uniform",
    "Scenario",
    "StationConfig",
    "SurvivorMix",
]
