"""
Kinematic range handling: bounds-provider interface, user cuts and log-space
limits shared by the grid search and the rejection sampler.
"""

from __future__ import annotations

import logging
import math
from typing import Mapping, Optional, Protocol, Tuple

import numpy as np

from .data_classes import InteractionContext, Interval
from .exceptions import InfeasiblePhaseSpace

logger = logging.getLogger(__name__)


class BoundsProvider(Protocol):
    """Physically allowed interval of one kinematic variable.

    ``prior`` holds the values already drawn for variables earlier in the
    sampling order. Implementations must be deterministic for fixed inputs.
    """

    def range(
        self,
        variable: str,
        context: InteractionContext,
        prior: Mapping[str, float],
    ) -> Interval:
        ...


def apply_cuts_to_limits(physical: Interval, cut: Optional[Interval]) -> Interval:
    """Narrow a physical interval with a user cut.

    The cut is intersected with the physical interval, so it can never extend
    the range into an unphysical region.
    """
    if cut is None:
        return physical
    return physical.intersect(cut)


def check_log_range(variable: str, interval: Interval) -> Interval:
    """Raise ``InfeasiblePhaseSpace`` unless ``interval`` can be sampled in log space."""
    if not interval.is_finite:
        raise InfeasiblePhaseSpace(
            f"{variable} range [{interval.lo}, {interval.hi}] is not finite",
            variable=variable, interval=interval,
        )
    if interval.lo <= 0.0:
        raise InfeasiblePhaseSpace(
            f"{variable} range [{interval.lo}, {interval.hi}] has a non-positive lower limit",
            variable=variable, interval=interval,
        )
    if interval.is_empty:
        raise InfeasiblePhaseSpace(
            f"{variable} range [{interval.lo}, {interval.hi}] is empty",
            variable=variable, interval=interval,
        )
    return interval


def resolve_range(
    bounds: BoundsProvider,
    variable: str,
    context: InteractionContext,
    prior: Mapping[str, float],
    user_cut: Optional[Interval] = None,
) -> Interval:
    """Physical range of ``variable`` intersected with ``user_cut`` and validated."""
    physical = bounds.range(variable, context, prior)
    interval = apply_cuts_to_limits(physical, user_cut)
    logger.debug(
        "%s range: physical [%g, %g], (physical && user) [%g, %g]",
        variable, physical.lo, physical.hi, interval.lo, interval.hi,
    )
    return check_log_range(variable, interval)


def log_limits(interval: Interval, epsilon: float) -> Tuple[float, float]:
    """Return ``(log(lo + eps), log(hi - eps))``.

    An interval no wider than ``2 * eps`` collapses onto its midpoint, so the
    span is zero and every draw returns the same value.
    """
    if interval.hi - interval.lo <= 2.0 * epsilon:
        mid = math.log(0.5 * (interval.lo + interval.hi))
        return mid, mid
    return math.log(interval.lo + epsilon), math.log(interval.hi - epsilon)


def log_grid(interval: Interval, n_points: int, epsilon: float) -> np.ndarray:
    """``n_points`` log-uniformly spaced values spanning ``interval`` (limits included)."""
    log_lo, log_hi = log_limits(interval, epsilon)
    if n_points == 1:
        return np.array([math.exp(0.5 * (log_lo + log_hi))])
    return np.exp(np.linspace(log_lo, log_hi, n_points))
