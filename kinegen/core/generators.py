"""
Process-specific kinematics generators.

Each process is described by a ``ProcessKinematics`` record: the variables it
samples (in order), the bounds provider of those variables and an optional
hook deriving further kinematics from a drawn point. ``build_sampler`` wires
a record, a cross-section model and a shared cache into a ``RejectionSampler``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

from .. import config
from .cache import MaxXSecCache
from .data_classes import InteractionContext, Interval, KinematicsPoint, SamplerConfig
from .grid_search import DeriveHook
from .kinematics import q2_range_at_w, w_q2_to_x_y, w_range
from .models import CrossSectionModel
from .ranges import BoundsProvider
from .sampler import RejectionSampler
from .sampling import UniformSource


class DISBounds:
    """Hadronic invariant mass W, then Q^2 at the drawn W."""

    def __init__(self, w_cut: Optional[float] = None):
        self.w_cut = w_cut

    def range(self, variable: str, context: InteractionContext, prior: Mapping[str, float]) -> Interval:
        if variable == "W":
            w = w_range(context)
            if self.w_cut is not None:
                w = Interval(w.lo, min(w.hi, self.w_cut))
            return w
        if variable == "Q2":
            if "W" not in prior:
                raise KeyError("Q2 range requires W to be drawn first")
            return q2_range_at_w(context, prior["W"])
        raise KeyError(f"Unknown kinematic variable {variable!r}")


class QELBounds:
    """Q^2 of quasi-elastic scattering (the hadronic system is one nucleon)."""

    def range(self, variable: str, context: InteractionContext, prior: Mapping[str, float]) -> Interval:
        if variable != "Q2":
            raise KeyError(f"Unknown kinematic variable {variable!r}")
        final_mass = context.quantum_numbers.get("final_nucleon_mass", context.hit_nucleon_mass)
        return q2_range_at_w(context, final_mass)


def set_kine_x_y(point: KinematicsPoint, context: InteractionContext) -> None:
    """Store Bjorken x and inelasticity y of a (W, Q^2) point on the context."""
    x, y = w_q2_to_x_y(point["W"], point["Q2"], context.probe_energy, context.hit_nucleon_mass)
    context.kinematics.derived["x"] = x
    context.kinematics.derived["y"] = y


@dataclass(frozen=True)
class ProcessKinematics:
    """Variables, bounds and derivation hook of one process."""

    name: str
    variables: Tuple[str, ...]
    bounds: BoundsProvider
    derive: Optional[DeriveHook] = None


PROCESS_KINEMATICS: Dict[str, ProcessKinematics] = {
    "dis": ProcessKinematics("dis", ("W", "Q2"), DISBounds(), set_kine_x_y),
    "res": ProcessKinematics("res", ("W", "Q2"), DISBounds(w_cut=config.RES_W_CUT_GEV), set_kine_x_y),
    "qel": ProcessKinematics("qel", ("Q2",), QELBounds()),
}


def build_sampler(
    process: str,
    model: CrossSectionModel,
    cache: MaxXSecCache,
    sampler_config: Optional[SamplerConfig] = None,
    uniform: Optional[UniformSource] = None,
) -> RejectionSampler:
    """Create the rejection sampler of a registered process.

    Parameters
    ----------
    process : str
        Key of ``PROCESS_KINEMATICS`` (``"dis"``, ``"res"`` or ``"qel"``).
    model : CrossSectionModel
        Differential cross-section of the process.
    cache : MaxXSecCache
        Cache shared by all samplers of the run.
    sampler_config : SamplerConfig, optional
        Sampling options.
    uniform : callable, optional
        Default uniform variate source of the sampler.
    """
    try:
        entry = PROCESS_KINEMATICS[process]
    except KeyError:
        raise KeyError(
            f"Unknown process {process!r}; expected one of {sorted(PROCESS_KINEMATICS)}"
        ) from None
    return RejectionSampler(
        variables=entry.variables,
        bounds=entry.bounds,
        model=model,
        cache=cache,
        config=sampler_config,
        uniform=uniform,
        derive=entry.derive,
        name=f"{entry.name}-kinematics",
    )
