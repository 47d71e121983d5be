"""
Data export utilities for generated kinematics.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from .data_classes import InteractionContext, SamplingResult

logger = logging.getLogger(__name__)


def export_sampling_results_to_csv(
    results: List[SamplingResult],
    contexts: Sequence[InteractionContext],
    filename: str = "kinematics_events.csv",
    variables: Optional[Sequence[str]] = None,
) -> Optional[Path]:
    """Export per-event sampling results to a CSV file.

    Parameters
    ----------
    results : List[SamplingResult]
        One result per generated event.
    contexts : sequence of InteractionContext
        The contexts the results were generated for (same order).
    filename : str
        Output CSV filename.
    variables : sequence of str, optional
        Kinematic variable columns; taken from the first accepted result if
        omitted. Derived kinematics found on the contexts (e.g. x, y) are
        appended.

    Returns
    -------
    Path or None
        Path of the written file, None if there was nothing to export.
    """
    if not results:
        print("[warning] No sampling results to export.")
        return None
    if len(results) != len(contexts):
        raise ValueError(f"Got {len(results)} results for {len(contexts)} contexts")

    if variables is None:
        variables = next((r.point.names() for r in results if r.point is not None), ())
    derived = sorted({name for ctx in contexts for name in ctx.kinematics.derived})

    output_path = Path(filename)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    headers = [
        'event_id',
        'status',
        'process',
        'target',
        'probe_energy_GeV',
        *variables,
        *derived,
        'diff_xsec',
        'max_xsec',
        'attempts',
        'cache_hit',
        'consistency_violations',
    ]

    with open(output_path, 'w', newline='', encoding='utf-8') as csvfile:
        writer = csv.writer(csvfile)
        writer.writerow(headers)

        for idx, (result, ctx) in enumerate(zip(results, contexts), start=1):
            if result.point is not None:
                values = [result.point.get(name, '') for name in variables]
            else:
                values = [''] * len(variables)
            derived_values = [ctx.kinematics.derived.get(name, '') for name in derived]
            writer.writerow([
                idx,
                result.status.value,
                ctx.process,
                ctx.target,
                ctx.probe_energy,
                *values,
                *derived_values,
                result.xsec if result.accepted else '',
                result.max_xsec,
                result.attempts,
                int(result.cache_hit),
                result.consistency_violations,
            ])

    print(f"[info] Exported {len(results)} events to {output_path}")
    logger.debug("Columns: %s", headers)
    return output_path
