"""Scenario configuration dataclasses."""

import copy
import dataclasses
from dataclasses import dataclass, field
from typing import Dict, Optional

import numpy as np

from rescuecamp.core.distributions import (
    DistributionConfig, negexp, normal, uniform,
)
from rescuecamp.core.entities import DurationPolicy, StationId


# Seed offsets for the independent random streams of a run
ARRIVAL_SEED_OFFSET = 0
ATTRIBUTE_SEED_OFFSET = 1
ROUTING_SEED_OFFSET = 2
STATION_SEED_OFFSET = 10


@dataclass
class StationConfig:
    """Configuration for a single service station.

    Attributes:
        distribution: Service time distribution (minutes).
        workers: Worker count, divides the service duration. Values below 1
            are clamped to 1 by the station, not rejected here.
        duration_policy: SAMPLED draws from `distribution`, FIXED uses
            `fixed_duration` instead.
        fixed_duration: Base duration for FIXED stations (minutes).
    """
    distribution: DistributionConfig
    workers: int = 1
    duration_policy: DurationPolicy = DurationPolicy.SAMPLED
    fixed_duration: Optional[float] = None

    def __post_init__(self) -> None:
        if self.duration_policy is DurationPolicy.FIXED and self.fixed_duration is None:
            raise ValueError("FIXED duration policy requires fixed_duration")


@dataclass
class SurvivorMix:
    """Attribute mix for generated survivors.

    Attributes:
        min_age: Youngest possible age (years, inclusive).
        max_age: Oldest possible age (years, inclusive).
        child_age_limit: Survivors younger than this are children.
        p_injured: Probability a survivor arrives injured.
        p_communication: Probability an adult requests the communication
            service.
    """
    min_age: int = 1
    max_age: int = 80
    child_age_limit: int = 18
    p_injured: float = 0.2
    p_communication: float = 0.4

    def __post_init__(self) -> None:
        if self.min_age > self.max_age:
            raise ValueError("min_age must not exceed max_age")
        for name in ("p_injured", "p_communication"):
            p = getattr(self, name)
            if not 0.0 <= p <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {p}")


def default_stations() -> Dict[StationId, StationConfig]:
    """Default camp stations with the baseline staffing."""
    return {
        StationId.MEDICAL: StationConfig(uniform(10.0, 15.0), workers=6),
        StationId.REGISTRATION: StationConfig(uniform(3.0, 5.0), workers=3),
        StationId.COMMUNICATION: StationConfig(uniform(3.0, 6.0), workers=2),
        StationId.SUPPLIES: StationConfig(uniform(4.0, 7.0), workers=2),
        StationId.ACCOMMODATION: StationConfig(normal(6.0, 1.0), workers=2),
        StationId.CHILD_SHELTER: StationConfig(
            normal(5.0, 1.0), workers=2,
            duration_policy=DurationPolicy.FIXED, fixed_duration=5.0,
        ),
        StationId.ADULT_SHELTER: StationConfig(
            normal(5.0, 1.0), workers=2,
            duration_policy=DurationPolicy.FIXED, fixed_duration=5.0,
        ),
    }


def default_outcome_weights() -> Dict[StationId, Dict[str, float]]:
    """Home assignment weights for each terminal shelter station."""
    return {
        StationId.CHILD_SHELTER: {
            "Maple House": 0.40,
            "Willow House": 0.35,
            "Harbour Children's Centre": 0.25,
        },
        StationId.ADULT_SHELTER: {
            "North Barracks": 0.30,
            "Riverside Hall": 0.45,
            "Hillside Cabins": 0.25,
        },
    }


@dataclass
class Scenario:
    """Configuration for a rescue camp simulation run.

    Contains all parameters needed to run a simulation, including
    horizon, station staffing, service time parameters, survivor mix,
    and random seed for reproducibility.

    Attributes:
        run_length: Simulation horizon in minutes (default 480 = 8 hours).
        arrival_mean: Mean inter-arrival time in minutes.
        stations: Per-station configuration keyed by StationId.
        survivor_mix: Attribute probabilities for generated survivors.
        outcome_weights: Home weights per terminal station, each summing to 1.
        random_seed: Master seed for reproducibility.
    """

    # Horizon settings
    run_length: float = 480.0

    # Arrivals
    arrival_mean: float = 20.0

    stations: Dict[StationId, StationConfig] = field(default_factory=default_stations)
    survivor_mix: SurvivorMix = field(default_factory=SurvivorMix)
    outcome_weights: Dict[StationId, Dict[str, float]] = field(
        default_factory=default_outcome_weights
    )

    # Reproducibility
    random_seed: int = 42

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.run_length <= 0:
            raise ValueError(f"run_length must be positive, got {self.run_length}")
        if self.arrival_mean <= 0:
            raise ValueError(f"arrival_mean must be positive, got {self.arrival_mean}")

        missing = [sid.name for sid in StationId if sid not in self.stations]
        if missing:
            raise ValueError(f"Missing station configuration for: {', '.join(missing)}")

        for sid, weights in self.outcome_weights.items():
            if not weights:
                raise ValueError(f"Outcome weights for {sid.name} are empty")
            if any(w < 0 for w in weights.values()):
                raise ValueError(f"Outcome weights for {sid.name} must be non-negative")
            total = sum(weights.values())
            if abs(total - 1.0) > 0.001:
                raise ValueError(
                    f"Outcome weights for {sid.name} must sum to 1.0, got {total}"
                )

    @property
    def arrival_distribution(self) -> DistributionConfig:
        """Inter-arrival time distribution."""
        return negexp(self.arrival_mean)

    @property
    def arrival_seed(self) -> int:
        return self.random_seed + ARRIVAL_SEED_OFFSET

    def station_seed(self, station: StationId) -> int:
        """Seed for a station's service time stream."""
        return self.random_seed + STATION_SEED_OFFSET + int(station)

    def attribute_rng(self) -> np.random.Generator:
        """Fresh stream for survivor attribute draws."""
        return np.random.default_rng(self.random_seed + ATTRIBUTE_SEED_OFFSET)

    def routing_rng(self) -> np.random.Generator:
        """Fresh stream for home assignment draws."""
        return np.random.default_rng(self.random_seed + ROUTING_SEED_OFFSET)

    def clone_with_seed(self, new_seed: int) -> "Scenario":
        """Create a copy of this scenario with a different seed.

        Args:
            new_seed: The new random seed to use.

        Returns:
            A new Scenario instance with the updated seed.
        """
        return dataclasses.replace(
            self,
            stations=copy.deepcopy(self.stations),
            survivor_mix=copy.deepcopy(self.survivor_mix),
            outcome_weights=copy.deepcopy(self.outcome_weights),
            random_seed=new_seed,
        )

    def with_workers(self, **counts: int) -> "Scenario":
        """Create a copy with different worker counts.

        Args:
            **counts: Worker counts keyed by lower-case station name,
                e.g. ``medical=4, registration=2``.

        Returns:
            A new Scenario with the given staffing.
        """
        scenario = self.clone_with_seed(self.random_seed)
        for key, workers in counts.items():
            try:
                sid = StationId[key.upper()]
            except KeyError:
                raise ValueError(f"Unknown station '{key}'") from None
            scenario.stations[sid].workers = workers
        return scenario
