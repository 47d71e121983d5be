"""
Data classes for the kinematics engine.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple

from .. import config
from .constants import NUCLEON_MASS
from .exceptions import KinematicsError


@dataclass(frozen=True)
class Interval:
    """Closed interval ``[lo, hi]`` of a kinematic variable (empty if lo > hi)."""

    lo: float
    hi: float

    @property
    def width(self) -> float:
        return self.hi - self.lo

    @property
    def is_empty(self) -> bool:
        return self.lo > self.hi

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.lo) and math.isfinite(self.hi)

    def contains(self, value: float) -> bool:
        return self.lo <= value <= self.hi

    def intersect(self, other: "Interval") -> "Interval":
        return Interval(max(self.lo, other.lo), min(self.hi, other.hi))


@dataclass
class Kinematics:
    """Mutable kinematics sub-object owned by an ``InteractionContext``.

    ``values`` holds the sampled variables (trial values while an event is
    being generated, the accepted ones afterwards), ``derived`` holds
    quantities computed from them (e.g. Bjorken x and inelasticity y).
    """

    values: Dict[str, float] = field(default_factory=dict)
    derived: Dict[str, float] = field(default_factory=dict)
    diff_xsec: Optional[float] = None

    def set(self, name: str, value: float) -> None:
        self.values[name] = value

    def get(self, name: str, default: Optional[float] = None) -> Optional[float]:
        if name in self.values:
            return self.values[name]
        return self.derived.get(name, default)

    def clear(self) -> None:
        self.values.clear()
        self.derived.clear()
        self.diff_xsec = None


@dataclass
class InteractionContext:
    """Incident-particle and target state of one simulated interaction.

    Attributes
    ----------
    probe_energy : float
        Incident particle energy in the hit-nucleon rest frame (GeV).
    process : str
        Process identifier (e.g. ``"dis"``, ``"qel"``); part of the cache key.
    target : str
        Target identifier; part of the cache key.
    hit_nucleon_mass : float
        Mass of the struck nucleon (GeV).
    final_lepton_mass : float
        Mass of the outgoing primary lepton (GeV).
    quantum_numbers : dict
        Any further process-specific inputs needed by bounds or models.
    kinematics : Kinematics
        Trial / accepted kinematics written by the sampler.
    """

    probe_energy: float
    process: str = "dis"
    target: str = "nucleon"
    hit_nucleon_mass: float = NUCLEON_MASS
    final_lepton_mass: float = 0.0
    quantum_numbers: Dict[str, Any] = field(default_factory=dict)
    kinematics: Kinematics = field(default_factory=Kinematics)

    def __post_init__(self):
        if not math.isfinite(self.probe_energy) or self.probe_energy <= 0.0:
            raise ValueError(f"probe_energy must be positive, got {self.probe_energy}")


@dataclass
class KinematicsPoint:
    """Ordered set of named kinematic variables."""

    values: Dict[str, float] = field(default_factory=dict)

    def __getitem__(self, name: str) -> float:
        return self.values[name]

    def __contains__(self, name: str) -> bool:
        return name in self.values

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def get(self, name: str, default: Optional[float] = None) -> Optional[float]:
        return self.values.get(name, default)

    def set(self, name: str, value: float) -> None:
        self.values[name] = value

    def names(self) -> Tuple[str, ...]:
        return tuple(self.values)

    def as_tuple(self) -> Tuple[float, ...]:
        return tuple(self.values.values())

    def copy(self) -> "KinematicsPoint":
        return KinematicsPoint(dict(self.values))


@dataclass(frozen=True)
class CacheKey:
    """Cache key: process, target, energy bucket and sampler fingerprint.

    ``sampler`` identifies the sampling setup (variables, cuts, acceptance
    measure, grid) the maximum was computed for, so samplers sharing one
    cache never read each other's entries.
    """

    process: str
    target: str
    energy_bin: float
    sampler: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class CacheEntry:
    """Immutable cached maximum; a refresh replaces the whole entry."""

    key: CacheKey
    max_xsec: float
    serial: int
    energy: Optional[float] = None


class SamplingStatus(Enum):
    ACCEPTED = "accepted"
    INFEASIBLE = "infeasible_phase_space"
    BUDGET_EXHAUSTED = "rejection_budget_exhausted"


@dataclass
class SamplingResult:
    """Outcome of one kinematics selection.

    Attributes
    ----------
    status : SamplingStatus
        Whether a point was accepted or which failure ended the event.
    point : KinematicsPoint or None
        Accepted kinematics (None on failure).
    xsec : float
        Differential cross-section at the accepted point.
    max_xsec : float
        Maximum cross-section used by the acceptance test.
    attempts : int
        Number of rejected candidates before the outcome.
    cache_hit : bool
        Whether the maximum came from the cache.
    consistency_violations : int
        Number of cache consistency violations recovered during the event.
    error : KinematicsError or None
        Exception describing a failed event.
    """

    status: SamplingStatus
    point: Optional[KinematicsPoint] = None
    xsec: float = 0.0
    max_xsec: float = 0.0
    attempts: int = 0
    cache_hit: bool = False
    consistency_violations: int = 0
    error: Optional[KinematicsError] = None

    @property
    def accepted(self) -> bool:
        return self.status is SamplingStatus.ACCEPTED

    def unwrap(self) -> "SamplingResult":
        """Return self if accepted, otherwise raise the stored error."""
        if self.error is not None:
            raise self.error
        return self


@dataclass
class SamplerConfig:
    """Options consumed by the rejection sampler and the grid search.

    ``user_ranges`` maps a variable name to a ``(lo, hi)`` cut; cuts can only
    narrow the physical interval of that variable.
    """

    grid_points_per_dimension: int = config.GRID_POINTS_PER_DIMENSION
    safety_factor: float = config.MAX_XSEC_SAFETY_FACTOR
    max_rejection_attempts: int = config.MAX_REJECTION_ATTEMPTS
    user_ranges: Dict[str, Tuple[float, float]] = field(default_factory=dict)
    boundary_epsilon: float = config.BOUNDARY_EPSILON
    max_cache_refreshes: int = config.MAX_CACHE_REFRESHES
    energy_bucket_fraction: float = config.ENERGY_BUCKET_FRACTION
    include_jacobian: bool = config.INCLUDE_JACOBIAN
    diagnostic_history: int = config.DIAGNOSTIC_HISTORY

    def __post_init__(self):
        if self.grid_points_per_dimension < 1:
            raise ValueError("grid_points_per_dimension must be at least 1")
        if not math.isfinite(self.safety_factor) or self.safety_factor < 1.0:
            raise ValueError("safety_factor must be a finite number >= 1")
        if self.max_rejection_attempts < 1:
            raise ValueError("max_rejection_attempts must be at least 1")
        if self.max_cache_refreshes < 0:
            raise ValueError("max_cache_refreshes must be non-negative")
        if self.boundary_epsilon < 0.0:
            raise ValueError("boundary_epsilon must be non-negative")
        if self.energy_bucket_fraction < 0.0:
            raise ValueError("energy_bucket_fraction must be non-negative")
        for name, (lo, hi) in self.user_ranges.items():
            if lo > hi:
                raise ValueError(f"user range for {name!r} is empty: [{lo}, {hi}]")

    def user_range(self, variable: str) -> Optional[Interval]:
        cut = self.user_ranges.get(variable)
        if cut is None:
            return None
        return Interval(float(cut[0]), float(cut[1]))
