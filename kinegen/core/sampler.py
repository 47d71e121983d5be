"""
Cached rejection sampling of event kinematics.

For every event the sampler obtains a safe maximum of the differential
cross-section (from the cache, or through a grid search on a miss), then
draws log-uniform candidates inside the allowed phase space and accepts one
with probability ``xsec / max``. The loop is an explicit bounded state
machine:

    COMPUTE_MAX -> DRAW_CANDIDATE -> EVALUATE -> ACCEPT_OR_RETRY -> ACCEPTED
                        ^                               |
                        +-------- rejected -------------+--> FAILED

An evaluated cross-section above the cached maximum is a cache consistency
violation: it is counted, the maximum is recomputed and re-cached, and the
candidate is redrawn.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple

from .cache import MaxXSecCache, make_cache_key
from .data_classes import (
    CacheKey,
    InteractionContext,
    Interval,
    KinematicsPoint,
    SamplerConfig,
    SamplingResult,
    SamplingStatus,
)
from .exceptions import (
    CacheConsistencyViolation,
    InfeasiblePhaseSpace,
    ModelError,
    RejectionBudgetExhausted,
)
from .grid_search import DeriveHook, PhaseSpaceGridSearch
from .models import CrossSectionModel, acceptance_weight, evaluate_cross_section
from .ranges import BoundsProvider, resolve_range
from .sampling import UniformSource, numpy_uniform_source, sample_log_uniform

logger = logging.getLogger(__name__)


class SamplerState(Enum):
    COMPUTE_MAX = "compute_max"
    DRAW_CANDIDATE = "draw_candidate"
    EVALUATE = "evaluate"
    ACCEPT_OR_RETRY = "accept_or_retry"
    ACCEPTED = "accepted"
    FAILED = "failed"


@dataclass
class SamplerStatistics:
    """Counters accumulated over all events handled by one sampler."""

    events: int = 0
    accepted: int = 0
    infeasible: int = 0
    exhausted: int = 0
    attempts: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    grid_searches: int = 0
    consistency_violations: int = 0

    @property
    def acceptance_rate(self) -> float:
        """Accepted events per evaluated candidate."""
        candidates = self.accepted + self.attempts
        return self.accepted / candidates if candidates else 0.0


class RejectionSampler:
    """Select kinematics with the rejection method and a shared max-xsec cache.

    Parameters
    ----------
    variables : sequence of str
        Kinematic variables in sampling order (e.g. ``("W", "Q2")``).
    bounds : BoundsProvider
        Physical limits of every variable.
    model : CrossSectionModel
        Differential cross-section to sample from.
    cache : MaxXSecCache
        Cache shared with other samplers / threads.
    config : SamplerConfig, optional
        Sampling options; defaults from ``kinegen.config``.
    uniform : callable, optional
        Default uniform variate source, used when ``sample`` gets none.
    derive : callable, optional
        Called with ``(point, context)`` after each candidate is drawn to
        fill derived kinematics on ``context.kinematics``.
    name : str
        Label used in log messages and in the cache key fingerprint.
    """

    def __init__(
        self,
        variables: Sequence[str],
        bounds: BoundsProvider,
        model: CrossSectionModel,
        cache: MaxXSecCache,
        config: Optional[SamplerConfig] = None,
        uniform: Optional[UniformSource] = None,
        derive: Optional[DeriveHook] = None,
        name: str = "kinematics",
    ):
        if not variables:
            raise ValueError("At least one kinematic variable is required")
        self.variables = tuple(variables)
        self.bounds = bounds
        self.model = model
        self.cache = cache
        self.config = config or SamplerConfig()
        self.uniform = uniform or numpy_uniform_source()
        self.derive = derive
        self.name = name
        self.grid_search = PhaseSpaceGridSearch(self.variables, bounds, model, self.config, derive)
        self.fingerprint = self._fingerprint()
        self.statistics = SamplerStatistics()
        self._stats_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Maximum cross-section
    # ------------------------------------------------------------------

    def cache_key(self, context: InteractionContext) -> CacheKey:
        return make_cache_key(context, self.config.energy_bucket_fraction, self.fingerprint)

    def _fingerprint(self) -> Tuple:
        """Everything besides the context that the cached maximum depends on.

        Bounds and model enter by type only; give samplers that use different
        instances of the same type distinct names.
        """
        cfg = self.config
        cuts = tuple(sorted(
            (name, (float(lo), float(hi))) for name, (lo, hi) in cfg.user_ranges.items()
        ))
        return (
            self.name,
            self.variables,
            type(self.bounds).__qualname__,
            type(self.model).__qualname__,
            cuts,
            cfg.include_jacobian,
            cfg.grid_points_per_dimension,
            cfg.safety_factor,
            cfg.boundary_epsilon,
        )

    def max_xsec(self, context: InteractionContext, key: Optional[CacheKey] = None) -> Tuple[float, bool]:
        """Return ``(max_xsec, cache_hit)`` for ``context``, searching on a miss."""
        key = key or self.cache_key(context)
        cached = self.cache.lookup(key)
        if cached is not None:
            return cached, True
        return self._refresh_max(context, key), False

    def _refresh_max(self, context: InteractionContext, key: CacheKey, observed: float = 0.0) -> float:
        result = self.grid_search.search(context)
        max_xsec = max(result.max_xsec, observed * self.config.safety_factor)
        # a concurrent refresh may already have published a larger maximum
        entry = self.cache.store(key, max_xsec, energy=context.probe_energy, raise_only=True)
        context.kinematics.clear()
        with self._stats_lock:
            self.statistics.grid_searches += 1
        return entry.max_xsec

    # ------------------------------------------------------------------
    # Event loop
    # ------------------------------------------------------------------

    def sample(self, context: InteractionContext, uniform: Optional[UniformSource] = None) -> SamplingResult:
        """Select kinematics for one event.

        Infeasible phase space and an exhausted rejection budget are returned
        as failed results; ``ModelError`` and a consistency violation beyond
        ``max_cache_refreshes`` are raised. ``context.kinematics`` holds the
        accepted values and cross-section on success and is cleared otherwise.
        """
        uniform = uniform or self.uniform
        cfg = self.config
        key = self.cache_key(context)
        context.kinematics.clear()

        state = SamplerState.COMPUTE_MAX
        attempts = 0
        violations = 0
        cache_hit = False
        max_xsec = 0.0
        point: Optional[KinematicsPoint] = None
        xsec = 0.0
        weight = 0.0
        bounds: Dict[str, Interval] = {}
        history = deque(maxlen=cfg.diagnostic_history)
        error = None

        try:
            while state not in (SamplerState.ACCEPTED, SamplerState.FAILED):
                if state is SamplerState.COMPUTE_MAX:
                    max_xsec, cache_hit = self.max_xsec(context, key)
                    state = SamplerState.DRAW_CANDIDATE

                elif state is SamplerState.DRAW_CANDIDATE:
                    point = self._draw_candidate(context, uniform, bounds)
                    if point is None:
                        attempts += 1
                        state = self._after_rejection(attempts)
                    else:
                        state = SamplerState.EVALUATE

                elif state is SamplerState.EVALUATE:
                    xsec = evaluate_cross_section(self.model, point, context)
                    weight = acceptance_weight(xsec, point, cfg.include_jacobian)
                    history.append((dict(point.values), xsec))
                    logger.debug("%s: xsec(%s) = %.6g, max = %.6g", self.name, point.values, xsec, max_xsec)
                    try:
                        self._check_consistency(weight, max_xsec, point, key)
                    except CacheConsistencyViolation as exc:
                        violations += 1
                        self._count(consistency_violations=1)
                        if violations > cfg.max_cache_refreshes:
                            raise
                        logger.warning("%s: %s; recomputing the maximum", self.name, exc)
                        max_xsec = self._refresh_max(context, key, observed=weight)
                        state = SamplerState.DRAW_CANDIDATE
                    else:
                        state = SamplerState.ACCEPT_OR_RETRY

                elif state is SamplerState.ACCEPT_OR_RETRY:
                    t = max_xsec * uniform()
                    if t < weight:
                        state = SamplerState.ACCEPTED
                    else:
                        attempts += 1
                        state = self._after_rejection(attempts)

        except InfeasiblePhaseSpace as exc:
            logger.warning("%s: infeasible phase space at E = %.6g GeV: %s",
                           self.name, context.probe_energy, exc)
            context.kinematics.clear()
            self._count(events=1, infeasible=1, attempts=attempts, **self._cache_counts(cache_hit))
            return SamplingResult(
                status=SamplingStatus.INFEASIBLE,
                max_xsec=max_xsec,
                attempts=attempts,
                cache_hit=cache_hit,
                consistency_violations=violations,
                error=exc,
            )
        except (ModelError, CacheConsistencyViolation):
            context.kinematics.clear()
            self._count(events=1, attempts=attempts, **self._cache_counts(cache_hit))
            raise

        if state is SamplerState.FAILED:
            error = RejectionBudgetExhausted(
                attempts=attempts,
                energy=context.probe_energy,
                bounds=bounds,
                max_xsec=max_xsec,
                last_candidates=list(history),
            )
            logger.error("%s: %s", self.name, error)
            context.kinematics.clear()
            self._count(events=1, exhausted=1, attempts=attempts, **self._cache_counts(cache_hit))
            return SamplingResult(
                status=SamplingStatus.BUDGET_EXHAUSTED,
                max_xsec=max_xsec,
                attempts=attempts,
                cache_hit=cache_hit,
                consistency_violations=violations,
                error=error,
            )

        context.kinematics.diff_xsec = xsec
        logger.debug("%s: selected %s (xsec = %.6g) after %d rejections",
                     self.name, point.values, xsec, attempts)
        self._count(events=1, accepted=1, attempts=attempts, **self._cache_counts(cache_hit))
        return SamplingResult(
            status=SamplingStatus.ACCEPTED,
            point=point.copy(),
            xsec=xsec,
            max_xsec=max_xsec,
            attempts=attempts,
            cache_hit=cache_hit,
            consistency_violations=violations,
        )

    def generate(self, context: InteractionContext, uniform: Optional[UniformSource] = None) -> SamplingResult:
        """Like ``sample`` but raise the failure exception of a failed event."""
        return self.sample(context, uniform).unwrap()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _draw_candidate(
        self,
        context: InteractionContext,
        uniform: UniformSource,
        bounds: Dict[str, Interval],
    ) -> Optional[KinematicsPoint]:
        """Draw every variable in order; None if an inner range is infeasible."""
        cfg = self.config
        point = KinematicsPoint()
        for depth, variable in enumerate(self.variables):
            try:
                interval = resolve_range(self.bounds, variable, context, dict(point.values),
                                         cfg.user_range(variable))
            except InfeasiblePhaseSpace:
                if depth == 0:
                    raise
                logger.debug("%s: no allowed %s range for %s", self.name, variable, point.values)
                return None
            bounds[variable] = interval
            value = sample_log_uniform(interval, uniform, cfg.boundary_epsilon)
            point.set(variable, value)
            context.kinematics.set(variable, value)

        if self.derive is not None:
            try:
                self.derive(point, context)
            except InfeasiblePhaseSpace as exc:
                logger.debug("%s: candidate %s outside physical region: %s", self.name, point.values, exc)
                return None
        return point

    def _after_rejection(self, attempts: int) -> SamplerState:
        if attempts >= self.config.max_rejection_attempts:
            return SamplerState.FAILED
        return SamplerState.DRAW_CANDIDATE

    @staticmethod
    def _check_consistency(weight: float, max_xsec: float, point: KinematicsPoint, key: CacheKey) -> None:
        if weight > max_xsec:
            raise CacheConsistencyViolation(weight, max_xsec, point.values, key)

    @staticmethod
    def _cache_counts(cache_hit: bool) -> Dict[str, int]:
        return {'cache_hits': int(cache_hit), 'cache_misses': int(not cache_hit)}

    def _count(self, **increments: int) -> None:
        with self._stats_lock:
            for name, value in increments.items():
                setattr(self.statistics, name, getattr(self.statistics, name) + value)
