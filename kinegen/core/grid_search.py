"""
Coarse log-grid search for the maximum differential cross-section.

The computed maximum does not need to be exact: the value used by the
rejection method is scaled up by a safety factor, and the search has to be
fast, so the grid is deliberately coarse (about 20 points per dimension).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence

from .data_classes import InteractionContext, KinematicsPoint, SamplerConfig
from .exceptions import InfeasiblePhaseSpace
from .models import CrossSectionModel, acceptance_weight, evaluate_cross_section
from .ranges import BoundsProvider, log_grid, resolve_range

logger = logging.getLogger(__name__)

# Hook computing derived kinematics (e.g. x, y) from a drawn point
DeriveHook = Callable[[KinematicsPoint, InteractionContext], None]


@dataclass
class GridSearchResult:
    """Outcome of one grid search.

    Attributes
    ----------
    raw_max : float
        Largest value found on the grid.
    max_xsec : float
        ``raw_max`` multiplied by the safety factor.
    argmax : KinematicsPoint or None
        Grid point where ``raw_max`` was found.
    n_evaluations : int
        Number of cross-section evaluations.
    n_skipped : int
        Inner ranges skipped because they were infeasible for an outer value.
    """

    raw_max: float
    max_xsec: float
    argmax: Optional[KinematicsPoint]
    n_evaluations: int
    n_skipped: int


class PhaseSpaceGridSearch:
    """Deterministic grid scan over nested kinematic variables.

    Parameters
    ----------
    variables : sequence of str
        Variables in sampling order; the range of each may depend on the
        values of the variables before it.
    bounds : BoundsProvider
        Physical limits of every variable.
    model : CrossSectionModel
        Differential cross-section to maximise.
    config : SamplerConfig
        Grid size, safety factor, user cuts and boundary epsilon.
    derive : callable, optional
        Called with ``(point, context)`` before each evaluation.
    """

    def __init__(
        self,
        variables: Sequence[str],
        bounds: BoundsProvider,
        model: CrossSectionModel,
        config: SamplerConfig,
        derive: Optional[DeriveHook] = None,
    ):
        if not variables:
            raise ValueError("At least one kinematic variable is required")
        self.variables = tuple(variables)
        self.bounds = bounds
        self.model = model
        self.config = config
        self.derive = derive

    def search(self, context: InteractionContext) -> GridSearchResult:
        """Scan the allowed phase space of ``context``.

        Raises
        ------
        InfeasiblePhaseSpace
            If the outermost range is infeasible or no grid point is.
        ModelError
            If the model misbehaves at any grid point.
        """
        logger.debug("Computing max xsec in allowed %s phase space", ",".join(self.variables))
        state = {'max': 0.0, 'argmax': None, 'evaluations': 0, 'skipped': 0}
        self._scan(0, context, {}, state)

        if state['evaluations'] == 0:
            raise InfeasiblePhaseSpace(
                f"No feasible {','.join(self.variables)} grid point for E = {context.probe_energy:.6g} GeV"
            )

        raw_max = state['max']
        max_xsec = raw_max * self.config.safety_factor
        if raw_max <= 0.0:
            logger.warning(
                "Grid search found no positive cross-section for %s at E = %.6g GeV",
                context.process, context.probe_energy,
            )
        logger.info(
            "Max xsec in phase space = %.6g (raw %.6g, %d evaluations, %d skipped) for %s at E = %.6g GeV",
            max_xsec, raw_max, state['evaluations'], state['skipped'],
            context.process, context.probe_energy,
        )
        return GridSearchResult(
            raw_max=raw_max,
            max_xsec=max_xsec,
            argmax=state['argmax'],
            n_evaluations=state['evaluations'],
            n_skipped=state['skipped'],
        )

    def _scan(self, depth: int, context: InteractionContext, prior: Dict[str, float], state: dict) -> None:
        variable = self.variables[depth]
        cfg = self.config
        try:
            interval = resolve_range(self.bounds, variable, context, prior, cfg.user_range(variable))
        except InfeasiblePhaseSpace:
            if depth == 0:
                raise
            state['skipped'] += 1
            logger.debug("Skipping infeasible %s range at %s", variable, prior)
            return

        last = depth == len(self.variables) - 1
        for value in log_grid(interval, cfg.grid_points_per_dimension, cfg.boundary_epsilon):
            prior[variable] = float(value)
            context.kinematics.set(variable, float(value))
            if not last:
                self._scan(depth + 1, context, prior, state)
                continue

            point = KinematicsPoint(dict(prior))
            if self.derive is not None:
                try:
                    self.derive(point, context)
                except InfeasiblePhaseSpace:
                    state['skipped'] += 1
                    continue
            xsec = evaluate_cross_section(self.model, point, context)
            weight = acceptance_weight(xsec, point, cfg.include_jacobian)
            state['evaluations'] += 1
            if weight > state['max'] or state['argmax'] is None:
                state['max'] = max(weight, state['max'])
                state['argmax'] = point
        prior.pop(variable, None)
