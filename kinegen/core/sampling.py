"""
Random sampling utilities: uniform variate sources and log-uniform draws.
"""

from __future__ import annotations

import math
from typing import Callable, List, Optional, Union

import numpy as np

from .data_classes import Interval
from .ranges import log_limits

# Zero-argument callable returning a float in [0, 1)
UniformSource = Callable[[], float]

SeedLike = Union[None, int, np.random.SeedSequence, np.random.Generator]


def numpy_uniform_source(seed: SeedLike = None) -> UniformSource:
    """Build a uniform variate source backed by a numpy ``Generator``.

    Parameters
    ----------
    seed : int, SeedSequence, Generator or None
        Seed material, or an existing generator to draw from.

    Returns
    -------
    callable
        A function returning one uniform float in [0, 1) per call.
    """
    rng = seed if isinstance(seed, np.random.Generator) else np.random.default_rng(seed)

    def uniform() -> float:
        return float(rng.random())

    return uniform


def spawn_uniform_sources(seed: Optional[int], n: int) -> List[UniformSource]:
    """Create ``n`` statistically independent sources from one master seed.

    Each event gets its own stream, so results for a fixed seed do not depend
    on how events are distributed over worker threads.
    """
    children = np.random.SeedSequence(seed).spawn(n)
    return [numpy_uniform_source(np.random.default_rng(child)) for child in children]


def sample_log_uniform(interval: Interval, uniform: UniformSource, epsilon: float) -> float:
    """Draw ``x = exp(log(lo+eps) + U * (log(hi-eps) - log(lo+eps)))``.

    A degenerate interval returns its midpoint; one variate is consumed either
    way so that fixed variate sequences stay aligned.
    """
    log_lo, log_hi = log_limits(interval, epsilon)
    return math.exp(log_lo + uniform() * (log_hi - log_lo))


def sample_probe_energy(
    mean_gev: float,
    relative_spread: float = 0.0,
    rng: Optional[np.random.Generator] = None,
) -> float:
    """Sample a probe energy from a Gaussian of relative width ``relative_spread``.

    Non-positive energies are rejected and resampled.
    """
    if relative_spread <= 0.0:
        return float(mean_gev)
    rng = rng or np.random.default_rng()
    energy = rng.normal(mean_gev, relative_spread * mean_gev)
    while energy <= 0.0:
        energy = rng.normal(mean_gev, relative_spread * mean_gev)
    return float(energy)
