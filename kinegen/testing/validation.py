"""
Validation utilities for the kinematics engine.

This module provides statistical checks (Kolmogorov-Smirnov tests against
closed-form densities) and a quick self-test that exercises the sampler,
the grid search and the cache on synthetic inputs before they are used
with real cross-section models.
"""

from __future__ import annotations

import math
from typing import Callable, List, Optional, Tuple

import numpy as np
from scipy import stats

from ..core.cache import MaxXSecCache
from ..core.data_classes import InteractionContext, SamplerConfig, SamplingStatus
from ..core.exceptions import InfeasiblePhaseSpace
from ..core.sampler import RejectionSampler
from ..core.sampling import numpy_uniform_source
from .synthetic import BoxBounds, ConstantCrossSection, PowerLawCrossSection, scenario_w_q2_bounds


def power_law_cdf(exponent: float, lo: float, hi: float) -> Callable[[np.ndarray], np.ndarray]:
    """CDF of the density proportional to ``x ** exponent`` on ``[lo, hi]``."""
    if math.isclose(exponent, -1.0):
        def cdf(x):
            x = np.clip(x, lo, hi)
            return np.log(x / lo) / math.log(hi / lo)
        return cdf

    p = exponent + 1.0

    def cdf(x):
        x = np.clip(x, lo, hi)
        return (x ** p - lo ** p) / (hi ** p - lo ** p)
    return cdf


def ks_no_bias_test(
    sampler: RejectionSampler,
    context: InteractionContext,
    variable: str,
    cdf: Callable[[np.ndarray], np.ndarray],
    n_samples: int = 2000,
    seed: Optional[int] = None,
) -> Tuple[float, float, np.ndarray]:
    """Compare accepted samples of ``variable`` with an analytic CDF.

    Returns
    -------
    statistic : float
        Kolmogorov-Smirnov statistic.
    pvalue : float
        Two-sided p-value.
    samples : np.ndarray
        The accepted values.
    """
    uniform = numpy_uniform_source(seed)
    samples = np.array([
        sampler.generate(context, uniform).point[variable] for _ in range(n_samples)
    ])
    result = stats.kstest(samples, cdf)
    return float(result.statistic), float(result.pvalue), samples


def acceptance_rate(
    sampler: RejectionSampler,
    context: InteractionContext,
    n_candidates: int = 10000,
    seed: Optional[int] = None,
) -> float:
    """Fraction of candidates accepted over at least ``n_candidates`` trials."""
    uniform = numpy_uniform_source(seed)
    accepted = 0
    candidates = 0
    while candidates < n_candidates:
        result = sampler.generate(context, uniform)
        accepted += 1
        candidates += result.attempts + 1
    return accepted / candidates


def validate_sampler_module(seed: int = 2024) -> Tuple[bool, List[tuple]]:
    """Validate the sampler, grid search and cache on synthetic inputs.

    Returns
    -------
    success : bool
        True if all checks pass.
    results : list
        ``(name, passed, message)`` tuples.
    """
    results = []
    all_passed = True
    context = InteractionContext(probe_energy=5.0, process="synthetic")

    # Reference scenario: constant 2.0 on W in [1.0, 1.2], Q2 in [0.1, 0.5]
    try:
        cache = MaxXSecCache()
        sampler = RejectionSampler(("W", "Q2"), scenario_w_q2_bounds(), ConstantCrossSection(2.0), cache)
        rate = acceptance_rate(sampler, context, seed=seed)
        cached = cache.entry(sampler.cache_key(context)).max_xsec
        passed = abs(rate - 0.8) <= 0.02 and math.isclose(cached, 2.5)
        results.append(("Constant scenario", passed, f"acceptance = {rate:.4f}, cached max = {cached:.4f}"))
        all_passed &= passed
    except Exception as e:
        results.append(("Constant scenario", False, str(e)))
        all_passed = False

    # No bias with the Jacobian-weighted acceptance: density x^-2 on [1, 10]
    try:
        cfg = SamplerConfig(include_jacobian=True)
        sampler = RejectionSampler(("x",), BoxBounds({"x": (1.0, 10.0)}),
                                   PowerLawCrossSection({"x": -2.0}), MaxXSecCache(), cfg)
        statistic, pvalue, _ = ks_no_bias_test(sampler, context, "x", power_law_cdf(-2.0, 1.0, 10.0), seed=seed)
        passed = pvalue > 0.001
        results.append(("KS test (linear measure)", passed, f"D = {statistic:.4f}, p = {pvalue:.4f}"))
        all_passed &= passed
    except Exception as e:
        results.append(("KS test (linear measure)", False, str(e)))
        all_passed = False

    # Log measure: xsec = x accepted against a log-uniform proposal is flat
    try:
        sampler = RejectionSampler(("x",), BoxBounds({"x": (1.0, 10.0)}),
                                   PowerLawCrossSection({"x": 1.0}), MaxXSecCache())
        statistic, pvalue, _ = ks_no_bias_test(sampler, context, "x", power_law_cdf(0.0, 1.0, 10.0), seed=seed)
        passed = pvalue > 0.001
        results.append(("KS test (log measure)", passed, f"D = {statistic:.4f}, p = {pvalue:.4f}"))
        all_passed &= passed
    except Exception as e:
        results.append(("KS test (log measure)", False, str(e)))
        all_passed = False

    # Non-positive lower limit must fail before any logarithm is taken
    try:
        sampler = RejectionSampler(("x",), BoxBounds({"x": (0.0, 1.0)}), ConstantCrossSection(), MaxXSecCache())
        result = sampler.sample(context, numpy_uniform_source(seed))
        passed = result.status is SamplingStatus.INFEASIBLE and isinstance(result.error, InfeasiblePhaseSpace)
        results.append(("Zero lower limit", passed, result.status.value))
        all_passed &= passed
    except Exception as e:
        results.append(("Zero lower limit", False, str(e)))
        all_passed = False

    # Rejection budget: a zero model exhausts exactly max_rejection_attempts
    try:
        cfg = SamplerConfig(max_rejection_attempts=5)
        sampler = RejectionSampler(("x",), BoxBounds({"x": (1.0, 2.0)}), ConstantCrossSection(0.0),
                                   MaxXSecCache(), cfg)
        result = sampler.sample(context, numpy_uniform_source(seed))
        passed = result.status is SamplingStatus.BUDGET_EXHAUSTED and result.attempts == 5
        results.append(("Rejection budget", passed, f"{result.status.value} after {result.attempts} attempts"))
        all_passed &= passed
    except Exception as e:
        results.append(("Rejection budget", False, str(e)))
        all_passed = False

    return all_passed, results


def run_quick_test(verbose: bool = True) -> bool:
    """Run the quick validation and print results.

    Example
    -------
    >>> from kinegen.testing import run_quick_test
    >>> success = run_quick_test()
    """
    if verbose:
        print("=" * 70)
        print("KINEMATICS ENGINE VALIDATION")
        print("=" * 70)

    success, results = validate_sampler_module()

    if verbose:
        for test_name, passed, message in results:
            status = "✓" if passed else "✗"
            print(f"{status} {test_name}: {message}")

        print()
        print("=" * 70)
        if success:
            print("ALL TESTS PASSED ✓")
        else:
            print("SOME TESTS FAILED ✗")
        print("=" * 70)

    return success
