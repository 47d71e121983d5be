"""
Kinematics Generation Runner Module

This module provides the event-generation runner that can be called from
scripts or imported directly. All events of a run share one max-xsec cache;
each event gets its own random stream spawned from the master seed.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from . import config
from .core.cache import MaxXSecCache
from .core.constants import LEPTON_MASSES
from .core.data_classes import InteractionContext, SamplerConfig, SamplingResult
from .core.generators import PROCESS_KINEMATICS, build_sampler
from .core.io_utils import export_sampling_results_to_csv
from .core.models import MODELS, CrossSectionModel
from .core.sampler import RejectionSampler
from .core.sampling import sample_probe_energy, spawn_uniform_sources
from .plotting import print_statistics, visualize_kinematics

logger = logging.getLogger(__name__)


def build_contexts(
    process: str,
    n_events: int,
    energy_gev: float,
    energy_spread: float = 0.0,
    lepton: str = "mu",
    target: str = "nucleon",
    seed: Optional[int] = None,
) -> List[InteractionContext]:
    """Create one interaction context per event.

    Probe energies are drawn from a Gaussian of relative width
    ``energy_spread`` around ``energy_gev`` (monochromatic if 0).
    """
    rng = np.random.default_rng(seed)
    lepton_mass = LEPTON_MASSES[lepton]
    return [
        InteractionContext(
            probe_energy=sample_probe_energy(energy_gev, energy_spread, rng),
            process=process,
            target=target,
            final_lepton_mass=lepton_mass,
        )
        for _ in range(n_events)
    ]


def generate_events(
    sampler: RejectionSampler,
    contexts: Sequence[InteractionContext],
    seed: Optional[int] = None,
    n_workers: int = 1,
    progress: bool = True,
) -> List[SamplingResult]:
    """Select kinematics for every context.

    Parameters
    ----------
    sampler : RejectionSampler
        Sampler (and through it the shared cache) used for all events.
    contexts : sequence of InteractionContext
        One context per event; each receives its accepted kinematics.
    seed : int, optional
        Master seed of the per-event random streams.
    n_workers : int
        Number of worker threads.
    progress : bool
        Show a tqdm progress bar.

    Returns
    -------
    List[SamplingResult]
        Results in the order of ``contexts``.
    """
    sources = spawn_uniform_sources(seed, len(contexts))
    logger.debug("Generating %d events on %d worker thread(s)", len(contexts), max(n_workers, 1))

    if n_workers <= 1:
        return [
            sampler.sample(context, uniform)
            for context, uniform in tqdm(zip(contexts, sources), total=len(contexts),
                                         desc="Events", disable=not progress)
        ]

    with ThreadPoolExecutor(max_workers=n_workers) as pool:
        futures = [pool.submit(sampler.sample, context, uniform)
                   for context, uniform in zip(contexts, sources)]
        return [future.result()
                for future in tqdm(futures, total=len(futures), desc="Events", disable=not progress)]


def build_model(name: str) -> CrossSectionModel:
    """Instantiate one of the synthetic demonstration models."""
    try:
        return MODELS[name]()
    except KeyError:
        raise KeyError(f"Unknown model {name!r}; expected one of {sorted(MODELS)}") from None


def run_generation(
    process: str = config.DEFAULT_PROCESS,
    energy_gev: float = config.DEFAULT_PROBE_ENERGY_GEV,
    n_events: Optional[int] = None,
    energy_spread: float = config.DEFAULT_ENERGY_SPREAD,
    seed: Optional[int] = config.DEFAULT_SEED,
    n_workers: int = config.DEFAULT_N_WORKERS,
    model: Optional[CrossSectionModel] = None,
    sampler_config: Optional[SamplerConfig] = None,
    cache: Optional[MaxXSecCache] = None,
    output_dir: Optional[Path] = None,
    save_results: bool = True,
    generate_plots: bool = True,
) -> Tuple[List[SamplingResult], List[InteractionContext]]:
    """Generate kinematics for ``n_events`` events of one process.

    This is the main entry point for running generation. It handles:
    1. Building the interaction contexts (with optional energy spread)
    2. Building the process sampler around a shared cache
    3. Running the (optionally multi-threaded) event loop
    4. Exporting results
    5. Generating visualization plots

    Returns
    -------
    results : List[SamplingResult]
        One result per event.
    contexts : List[InteractionContext]
        The contexts, carrying the accepted kinematics.
    """
    output_dir = Path.cwd() if output_dir is None else Path(output_dir)
    if n_events is None:
        n_events = config.DEFAULT_N_EVENTS
    model = model or build_model(config.DEFAULT_MODEL)
    cache = cache or MaxXSecCache()

    sampler = build_sampler(process, model, cache, sampler_config)
    contexts = build_contexts(process, n_events, energy_gev, energy_spread, seed=seed)

    print("\n" + "="*70)
    print("KINEMATICS GENERATION CONFIGURATION")
    print("="*70)
    print(f"Process: {process} (variables: {', '.join(sampler.variables)})")
    print(f"Probe energy: {energy_gev:.4g} GeV (relative spread {energy_spread:.3g})")
    print(f"Model: {type(model).__name__}")
    print(f"Grid points per dimension: {sampler.config.grid_points_per_dimension}")
    print(f"Safety factor: {sampler.config.safety_factor}")
    print(f"Max rejection attempts: {sampler.config.max_rejection_attempts}")
    print(f"Cache capacity: {cache.capacity}, energy bucket: {100*sampler.config.energy_bucket_fraction:.3g}%")
    print(f"Worker threads: {n_workers}")
    print("="*70 + "\n")

    print(f"[info] Generating {n_events} events...")
    results = generate_events(sampler, contexts, seed=seed, n_workers=n_workers)

    print_statistics(results, n_events, sampler.statistics, cache)

    if save_results and results:
        csv_filename = str(output_dir / config.DATA_OUTPUT_DIR / config.EVENT_DATA_CSV)
        export_sampling_results_to_csv(results, contexts, filename=csv_filename, variables=sampler.variables)

    if generate_plots and results:
        print("[info] Generating visualizations...")
        save_base = str(output_dir / config.FIGURES_OUTPUT_DIR / config.KINEMATICS_FIGURE_BASE)
        visualize_kinematics(results, sampler.variables, save_path=save_base)
        print("[info] Visualization complete!")

    return results, contexts


def main(argv: Optional[Sequence[str]] = None):
    """Command-line entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Generate event kinematics with cached rejection sampling")
    parser.add_argument("--process", choices=sorted(PROCESS_KINEMATICS), default=config.DEFAULT_PROCESS,
                        help="Process whose kinematics are generated")
    parser.add_argument("--energy", type=float, default=config.DEFAULT_PROBE_ENERGY_GEV,
                        help="Probe energy in GeV")
    parser.add_argument("--energy-spread", type=float, default=config.DEFAULT_ENERGY_SPREAD,
                        help="Relative Gaussian spread of the probe energy")
    parser.add_argument("-n", "--events", type=int, default=None,
                        help="Number of events to generate")
    parser.add_argument("--seed", type=int, default=config.DEFAULT_SEED,
                        help="Master random seed")
    parser.add_argument("--workers", type=int, default=config.DEFAULT_N_WORKERS,
                        help="Number of worker threads")
    parser.add_argument("--model", choices=sorted(MODELS), default=config.DEFAULT_MODEL,
                        help="Synthetic cross-section model")
    parser.add_argument("--no-save", action="store_true",
                        help="Don't save results to CSV")
    parser.add_argument("--no-plot", action="store_true",
                        help="Don't generate visualization plots")
    parser.add_argument("--output-dir", type=Path, default=None,
                        help="Output directory for results and figures")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    run_generation(
        process=args.process,
        energy_gev=args.energy,
        n_events=args.events,
        energy_spread=args.energy_spread,
        seed=args.seed,
        n_workers=args.workers,
        model=build_model(args.model),
        output_dir=args.output_dir,
        save_results=not args.no_save,
        generate_plots=not args.no_plot,
    )


if __name__ == "__main__":
    main()
