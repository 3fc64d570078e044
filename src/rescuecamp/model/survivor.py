"""Survivor entity definition."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from rescuecamp.core.entities import AgeCategory, HealthCondition
from rescuecamp.core.scenario import SurvivorMix


@dataclass
class Survivor:
    """Survivor entity tracking a journey through the camp.

    Attributes:
        id: Unique survivor identifier (monotonic within a run).
        arrival_time: Simulation time of arrival at the camp.
        age: Age in years.
        age_category: CHILD or ADULT.
        health_condition: HEALTHY or INJURED.
        wants_communication: Outcome of the communication coin flip. Only
            adults act on it, see `requests_communication`.
        completion_time: Settlement time, set once at the terminal stage.
        cumulative_wait_time: Total waiting recorded at service starts.
        assigned_outcome: Home assigned at the terminal shelter stage.
        stages_visited: Station names in the order they were completed.
        service_starts: Service start time keyed by station name.
    """

    id: int
    arrival_time: float
    age: int
    age_category: AgeCategory
    health_condition: HealthCondition
    wants_communication: bool = False

    # Filled during simulation
    completion_time: Optional[float] = None
    cumulative_wait_time: float = 0.0
    assigned_outcome: Optional[str] = None
    stages_visited: List[str] = field(default_factory=list)
    service_starts: Dict[str, float] = field(default_factory=dict)

    @property
    def is_child(self) -> bool:
        return self.age_category is AgeCategory.CHILD

    @property
    def requires_medical(self) -> bool:
        """Children and injured survivors are seen by medical staff first."""
        return self.is_child or self.health_condition is HealthCondition.INJURED

    @property
    def requests_communication(self) -> bool:
        """Adults who asked for the communication service."""
        return not self.is_child and self.wants_communication

    @property
    def processed(self) -> bool:
        """Whether the survivor has settled."""
        return self.completion_time is not None

    def total_time_in_camp(self, now: Optional[float] = None) -> float:
        """Time from arrival to settlement, or to `now` while still in flight."""
        if self.completion_time is not None:
            return self.completion_time - self.arrival_time
        if now is None:
            return 0.0
        return now - self.arrival_time

    def add_wait(self, wait: float) -> None:
        """Accumulate waiting time.

        Raises:
            ValueError: If wait is negative.
        """
        if wait < 0:
            raise ValueError(f"Wait time must be non-negative, got {wait}")
        self.cumulative_wait_time += wait

    def record_service_start(self, stage: str, time: float) -> None:
        """Record when service started at a station."""
        self.service_starts[stage] = time

    def record_stage(self, stage: str) -> None:
        """Record a completed station."""
        self.stages_visited.append(stage)

    def assign_outcome(self, outcome: str) -> str:
        """Assign the settlement home. Later calls keep the first value.

        Returns:
            The outcome held by the survivor after the call.
        """
        if self.assigned_outcome is None:
            self.assigned_outcome = outcome
        return self.assigned_outcome

    def mark_completed(self, time: float) -> None:
        """Stamp the settlement time.

        Raises:
            RuntimeError: If the survivor was already completed.
        """
        if self.completion_time is not None:
            raise RuntimeError(f"Survivor {self.id} already completed at {self.completion_time}")
        self.completion_time = time


class SurvivorFactory:
    """Create survivors with random attributes from a seeded stream.

    Attributes:
        mix: Attribute probabilities.
        rng: NumPy random generator for attribute draws.
    """

    def __init__(self, mix: SurvivorMix, rng: np.random.Generator) -> None:
        self.mix = mix
        self.rng = rng

    def sample_age(self) -> int:
        return int(self.rng.integers(self.mix.min_age, self.mix.max_age + 1))

    def create(self, survivor_id: int, arrival_time: float) -> Survivor:
        """Create a survivor arriving at `arrival_time`.

        Draw order is fixed (age, injury, communication) so a seed always
        produces the same survivor sequence.
        """
        age = self.sample_age()
        category = AgeCategory.CHILD if age < self.mix.child_age_limit else AgeCategory.ADULT
        injured = self.rng.random() < self.mix.p_injured
        wants_communication = self.rng.random() < self.mix.p_communication

        return Survivor(
            id=survivor_id,
            arrival_time=arrival_time,
            age=age,
            age_category=category,
            health_condition=HealthCondition.INJURED if injured else HealthCondition.HEALTHY,
            wants_communication=bool(wants_communication),
        )
