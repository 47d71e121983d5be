"""
Generated kinematics visualization.

This module provides visualization functions for sampling results,
including variable histograms, 2D phase-space scatter plots, comparisons
with analytic densities and statistical summaries.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

import numpy as np
import matplotlib.pyplot as plt
import pandas as pd

from .. import config
from ..core.cache import MaxXSecCache
from ..core.data_classes import SamplingResult, SamplingStatus
from ..core.sampler import SamplerStatistics


def load_event_data(csv_file: Union[str, Path], accepted_only: bool = True) -> pd.DataFrame:
    """Load an exported event table.

    Parameters
    ----------
    csv_file : str or Path
        CSV written by ``export_sampling_results_to_csv``.
    accepted_only : bool
        Drop events whose kinematics selection failed.

    Returns
    -------
    pd.DataFrame
        One row per event.
    """
    events = pd.read_csv(csv_file)
    if accepted_only:
        events = events[events['status'] == SamplingStatus.ACCEPTED.value].reset_index(drop=True)
    return events


def _accepted_values(results: List[SamplingResult], variable: str) -> np.ndarray:
    return np.array([r.point[variable] for r in results if r.accepted and variable in r.point])


def visualize_kinematics(
    results: List[SamplingResult],
    variables: Sequence[str],
    save_path: Optional[str] = None,
):
    """Plot histograms of the accepted variables and their joint distribution.

    Parameters
    ----------
    results : List[SamplingResult]
        Sampling results (failed events are ignored).
    variables : sequence of str
        Variables to plot; the first two also get a log-log scatter plot.
    save_path : str, optional
        Base path for saving the figure.
    """
    accepted = [r for r in results if r.accepted]
    if not accepted:
        print("[warning] No accepted events to visualize.")
        return

    n_panels = len(variables) + (1 if len(variables) >= 2 else 0) + 1
    n_cols = 2
    n_rows = (n_panels + 1) // 2
    fig, axes = plt.subplots(n_rows, n_cols, figsize=config.KINEMATICS_FIGSIZE, squeeze=False)
    axes = axes.ravel()
    panel = 0

    for variable in variables:
        values = _accepted_values(accepted, variable)
        ax = axes[panel]
        if values.max() > values.min() > 0:
            ax.hist(values, bins=np.geomspace(values.min(), values.max(), config.HISTOGRAM_BINS),
                    color='steelblue', alpha=0.7)
            ax.set_xscale('log')
        else:
            ax.hist(values, bins=config.HISTOGRAM_BINS, color='steelblue', alpha=0.7)
        ax.set_xlabel(variable)
        ax.set_ylabel('Events')
        ax.set_title(f'{variable} Distribution')
        ax.grid(True, alpha=0.3)
        panel += 1

    if len(variables) >= 2:
        ax = axes[panel]
        ax.scatter(_accepted_values(accepted, variables[0]), _accepted_values(accepted, variables[1]),
                   s=4, alpha=0.4, color='purple')
        ax.set_xscale('log')
        ax.set_yscale('log')
        ax.set_xlabel(variables[0])
        ax.set_ylabel(variables[1])
        ax.set_title(f'{variables[0]} vs {variables[1]}')
        ax.grid(True, alpha=0.3)
        panel += 1

    ax = axes[panel]
    attempts = np.array([r.attempts for r in results])
    ax.hist(attempts, bins=config.HISTOGRAM_BINS, color='teal', alpha=0.7)
    ax.axvline(np.mean(attempts), color='red', linestyle='--', linewidth=2,
               label=f'Mean: {np.mean(attempts):.2f}')
    ax.set_xlabel('Rejected candidates per event')
    ax.set_ylabel('Events')
    ax.set_title('Rejection Attempts')
    ax.legend()
    ax.grid(True, alpha=0.3)
    panel += 1

    for ax in axes[panel:]:
        ax.set_visible(False)

    plt.tight_layout()
    if save_path:
        output = Path(f"{save_path}_distributions.png")
        output.parent.mkdir(parents=True, exist_ok=True)
        plt.savefig(output, dpi=config.PLOT_DPI)
        print(f"[info] Saved kinematics figure to {output}")
    plt.close(fig)


def plot_density_comparison(
    samples: np.ndarray,
    pdf: Callable[[np.ndarray], np.ndarray],
    variable: str = "x",
    save_path: Optional[str] = None,
):
    """Overlay a normalised histogram of ``samples`` with an analytic density."""
    samples = np.asarray(samples)
    fig, ax = plt.subplots(figsize=(8, 6))
    ax.hist(samples, bins=config.HISTOGRAM_BINS, density=True, alpha=0.6, color='steelblue', label='Sampled')
    grid = np.linspace(samples.min(), samples.max(), 400)
    ax.plot(grid, pdf(grid), color='red', linewidth=2, label='Analytic')
    ax.set_xlabel(variable)
    ax.set_ylabel('Probability density')
    ax.set_title(f'{variable}: sampled vs analytic density')
    ax.legend()
    ax.grid(True, alpha=0.3)
    plt.tight_layout()
    if save_path:
        output = Path(f"{save_path}_density.png")
        output.parent.mkdir(parents=True, exist_ok=True)
        plt.savefig(output, dpi=config.QUICK_PLOT_DPI)
        print(f"[info] Saved density comparison to {output}")
    plt.close(fig)


def print_statistics(
    results: List[SamplingResult],
    n_total: int,
    sampler_stats: Optional[SamplerStatistics] = None,
    cache: Optional[MaxXSecCache] = None,
):
    """Print summary statistics of a generation run.

    Parameters
    ----------
    results : List[SamplingResult]
        List of ALL sampling results.
    n_total : int
        Total number of events requested.
    sampler_stats : SamplerStatistics, optional
        Counters of the sampler used for the run.
    cache : MaxXSecCache, optional
        Cache used for the run.
    """
    if not results:
        print(f"\n[Statistics] No sampling results to display.")
        return

    accepted = [r for r in results if r.accepted]
    n_infeasible = sum(1 for r in results if r.status is SamplingStatus.INFEASIBLE)
    n_exhausted = sum(1 for r in results if r.status is SamplingStatus.BUDGET_EXHAUSTED)

    print("\n" + "="*60)
    print("KINEMATICS GENERATION STATISTICS")
    print("="*60)
    print(f"Total events requested: {n_total}")
    print(f"Accepted: {len(accepted)} ({100*len(accepted)/n_total:.2f}%)")
    print(f"Infeasible phase space: {n_infeasible} ({100*n_infeasible/n_total:.2f}%)")
    print(f"Rejection budget exhausted: {n_exhausted} ({100*n_exhausted/n_total:.2f}%)")
    print()

    if accepted:
        attempts = np.array([r.attempts for r in accepted])
        xsecs = np.array([r.xsec for r in accepted])
        print("Rejected candidates per accepted event:")
        print(f"  Mean: {np.mean(attempts):.3f}, Max: {np.max(attempts)}")
        print(f"  Acceptance efficiency: {len(accepted)/(len(accepted) + attempts.sum()):.4f}")
        print()
        print("Differential cross-section at accepted points:")
        print(f"  Mean: {np.mean(xsecs):.6g}, Std: {np.std(xsecs):.6g}")
        print(f"  Range: [{np.min(xsecs):.6g}, {np.max(xsecs):.6g}]")
        print()

    if sampler_stats is not None:
        print("Sampler counters:")
        print(f"  Grid searches: {sampler_stats.grid_searches}")
        print(f"  Cache hits / misses: {sampler_stats.cache_hits} / {sampler_stats.cache_misses}")
        print(f"  Consistency violations: {sampler_stats.consistency_violations}")
        print()

    if cache is not None:
        stats = cache.statistics()
        print("Max xsec cache:")
        print(f"  Entries: {stats['size']} / {stats['capacity']}")
        print(f"  Lookups: {stats['hits'] + stats['misses']:,} (hits {stats['hits']:,}, misses {stats['misses']:,})")
        print(f"  Stores: {stats['stores']:,}, evictions: {stats['evictions']:,}")
    print("="*60)

    if sampler_stats is not None and sampler_stats.events:
        rate = sampler_stats.consistency_violations / sampler_stats.events
        if rate > 0.01:
            print("⚠️  WARNING: High cache consistency violation rate (>1%)")
            print("   The cached maxima under-cover the cross-section surface:")
            print("   - Increase the safety factor")
            print("   - Use more grid points per dimension")
            print("   - Use narrower energy buckets")
        elif sampler_stats.consistency_violations:
            print("ℹ️  INFO: Occasional cache consistency violations were recovered")
        else:
            print("✓ No cache consistency violations")
    print()
