"""
Value objects for censored (non-detect) estimation.

- Observation: one measured concentration or one detection limit.
- AnalyteGroup: the observations of one analyte, the scope of one fit.
- FittedDistribution: lognormal (mu, sigma) on the natural-log axis.
- EstimateResult: per-observation output, same order as the group.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Iterator, Tuple, Union

import numpy as np

from ..exceptions import FitDivergedError, InvalidObservationError

OBSERVED = "observed"
CONDITIONAL_MEAN = "conditional_mean"


@dataclass(frozen=True)
class Observation:
    value: float
    is_censored: bool = False

    def __post_init__(self):
        v = float(self.value)
        if not math.isfinite(v) or v <= 0:
            kind = "detection limit" if self.is_censored else "concentration"
            raise InvalidObservationError(f"{kind} must be finite and > 0, got {self.value!r}")
        object.__setattr__(self, "value", v)
        object.__setattr__(self, "is_censored", bool(self.is_censored))


PairLike = Union[Observation, Tuple[float, bool]]


def _as_observation(item: PairLike) -> Observation:
    if isinstance(item, Observation):
        return item
    value, is_censored = item
    return Observation(value, is_censored)


@dataclass(frozen=True)
class AnalyteGroup:
    """Ordered observations for a single analyte."""
    observations: Tuple[Observation, ...]
    analyte: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "observations", tuple(_as_observation(o) for o in self.observations))

    @classmethod
    def from_pairs(cls, pairs: Iterable[PairLike], analyte: str | None = None) -> "AnalyteGroup":
        return cls(tuple(pairs), analyte=analyte)

    @classmethod
    def from_arrays(cls, values, censored_flags, analyte: str | None = None) -> "AnalyteGroup":
        values = list(values)
        flags = list(censored_flags)
        if len(values) != len(flags):
            raise ValueError(f"values and censored_flags differ in length ({len(values)} vs {len(flags)})")
        return cls(tuple(Observation(v, c) for v, c in zip(values, flags)), analyte=analyte)

    def __len__(self) -> int:
        return len(self.observations)

    def __iter__(self) -> Iterator[Observation]:
        return iter(self.observations)

    @property
    def values(self) -> np.ndarray:
        return np.array([o.value for o in self.observations], dtype=float)

    @property
    def censored(self) -> np.ndarray:
        return np.array([o.is_censored for o in self.observations], dtype=bool)

    @property
    def n_censored(self) -> int:
        return sum(o.is_censored for o in self.observations)

    @property
    def has_censored(self) -> bool:
        return any(o.is_censored for o in self.observations)


@dataclass(frozen=True)
class FittedDistribution:
    """
    Lognormal model for one analyte group.

    mu and sigma describe the normal distribution of log(value). `method` records
    how the parameters were obtained: "mle", "mle_fixed_sigma" or "seeded".
    """
    mu: float
    sigma: float
    n_observations: int = 0
    n_censored: int = 0
    method: str = "mle"
    iterations: int = 0

    def __post_init__(self):
        if not math.isfinite(self.mu):
            raise FitDivergedError(f"non-finite location mu={self.mu!r}", iterations=self.iterations)
        if not math.isfinite(self.sigma) or self.sigma <= 0:
            raise FitDivergedError(f"invalid scale sigma={self.sigma!r}", iterations=self.iterations)

    @property
    def median(self) -> float:
        return math.exp(self.mu)

    @property
    def mean(self) -> float:
        return math.exp(self.mu + 0.5 * self.sigma ** 2)


@dataclass(frozen=True)
class EstimateResult:
    value: float
    is_censored: bool
    estimated_value: float
    method: str = OBSERVED
