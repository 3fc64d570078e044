"""Random variate generators with explicit seeds.

Every generator owns a NumPy random stream created from the seed it is
given, so a scenario seed fully determines a run.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

import numpy as np


class RandomVariate:
    """Base class for seeded samplers.

    Attributes:
        seed: Seed used to create the stream (None only for Constant).
        rng: NumPy random generator.
    """

    def __init__(self, seed: Optional[int]) -> None:
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def sample(self) -> float:
        raise NotImplementedError


class Uniform(RandomVariate):
    """Uniform distribution on [low, high]."""

    def __init__(self, low: float, high: float, seed: int) -> None:
        if low > high:
            raise ValueError(f"Uniform low ({low}) must not exceed high ({high})")
        super().__init__(seed)
        self.low = low
        self.high = high

    def sample(self) -> float:
        return float(self.rng.uniform(self.low, self.high))

    def __repr__(self) -> str:
        return f"Uniform({self.low}, {self.high})"


class Normal(RandomVariate):
    """Normal distribution.

    Samples are not clamped and may be negative; callers using them as
    durations must apply their own floor.
    """

    def __init__(self, mean: float, sd: float, seed: int) -> None:
        if sd < 0:
            raise ValueError(f"Normal sd must be non-negative, got {sd}")
        super().__init__(seed)
        self.mean = mean
        self.sd = sd

    def sample(self) -> float:
        return float(self.rng.normal(self.mean, self.sd))

    def __repr__(self) -> str:
        return f"Normal({self.mean}, {self.sd})"


class NegativeExponential(RandomVariate):
    """Negative exponential distribution, used for inter-arrival gaps."""

    def __init__(self, mean: float, seed: int) -> None:
        if mean <= 0:
            raise ValueError(f"NegativeExponential mean must be positive, got {mean}")
        super().__init__(seed)
        self.mean = mean

    def sample(self) -> float:
        value = float(self.rng.exponential(self.mean))
        # Strictly positive gaps
        while value <= 0.0:
            value = float(self.rng.exponential(self.mean))
        return value

    def __repr__(self) -> str:
        return f"NegativeExponential({self.mean})"


class Constant(RandomVariate):
    """Degenerate distribution that always returns the same value."""

    def __init__(self, value: float, seed: Optional[int] = None) -> None:
        super().__init__(seed)
        self.value = value

    def sample(self) -> float:
        return float(self.value)

    def __repr__(self) -> str:
        return f"Constant({self.value})"


_BUILDERS = {
    "uniform": lambda p, seed: Uniform(p["low"], p["high"], seed),
    "normal": lambda p, seed: Normal(p["mean"], p["sd"], seed),
    "negexp": lambda p, seed: NegativeExponential(p["mean"], seed),
    "constant": lambda p, seed: Constant(p["value"], seed),
}


@dataclass
class DistributionConfig:
    """Distribution family plus fixed parameters.

    Attributes:
        kind: One of 'uniform', 'normal', 'negexp', 'constant'.
        params: Parameters for the family, e.g. {'low': 3, 'high': 5}.
    """
    kind: str
    params: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.kind not in _BUILDERS:
            raise ValueError(
                f"Unknown distribution '{self.kind}', expected one of {sorted(_BUILDERS)}"
            )

    def build(self, seed: int) -> RandomVariate:
        """Create a generator with the given seed."""
        try:
            return _BUILDERS[self.kind](self.params, seed)
        except KeyError as e:
            raise ValueError(f"Missing parameter {e} for {self.kind} distribution") from e


def uniform(low: float, high: float) -> DistributionConfig:
    return DistributionConfig("uniform", {"low": low, "high": high})


def normal(mean: float, sd: float) -> DistributionConfig:
    return DistributionConfig("normal", {"mean": mean, "sd": sd})


def negexp(mean: float) -> DistributionConfig:
    return DistributionConfig("negexp", {"mean": mean})


def constant(value: float) -> DistributionConfig:
    return DistributionConfig("constant", {"value": value})
