"""
Kinematic limits for neutrino-nucleon scattering.

Energies, masses and momenta are in GeV, Q^2 and W^2 in GeV^2. All functions
work in the rest frame of the struck nucleon.
"""

from __future__ import annotations

import math
from typing import Tuple

from .constants import NEUTRON_MASS, PION_MASS, Q2_MIN_LIMIT
from .data_classes import InteractionContext, Interval
from .exceptions import InfeasiblePhaseSpace


def invariant_mass_squared(probe_energy: float, nucleon_mass: float) -> float:
    """Centre-of-mass energy squared, s = M^2 + 2 M E."""
    return nucleon_mass * nucleon_mass + 2.0 * nucleon_mass * probe_energy


def w_range(context: InteractionContext) -> Interval:
    """Physically allowed hadronic invariant mass W for inelastic scattering.

    The lower limit is the pion production threshold, M_n + m_pi; the upper
    limit is sqrt(s) - m_l.

    Parameters
    ----------
    context : InteractionContext
        Interaction whose probe energy, nucleon and lepton masses are used.

    Returns
    -------
    Interval
        ``[W_min, W_max]`` (empty when below threshold).
    """
    s = invariant_mass_squared(context.probe_energy, context.hit_nucleon_mass)
    w_min = NEUTRON_MASS + PION_MASS
    w_max = math.sqrt(s) - context.final_lepton_mass
    return Interval(w_min, w_max)


def q2_range_at_w(context: InteractionContext, w: float) -> Interval:
    """Allowed momentum transfer Q^2 for a fixed hadronic invariant mass W.

    Two-body kinematics in the centre-of-mass frame give

        Q2 = -m_l^2 + (s - M^2)/(2s) * [(s + m_l^2 - W^2) -/+ sqrt((s + m_l^2 - W^2)^2 - 4 s m_l^2)]

    The lower limit is raised to ``Q2_MIN_LIMIT`` so that a massless lepton
    does not produce Q2_min = 0. The same expression with W set to the
    outgoing nucleon mass gives the quasi-elastic range.

    Returns
    -------
    Interval
        ``[Q2_min, Q2_max]``; empty when W is above the kinematic limit.
    """
    mass = context.hit_nucleon_mass
    ml2 = context.final_lepton_mass ** 2
    s = invariant_mass_squared(context.probe_energy, mass)
    w2 = w * w

    aux_c = 0.5 * (s - mass * mass) / s
    aux1 = s + ml2 - w2
    disc = aux1 * aux1 - 4.0 * s * ml2
    if aux1 <= 0.0 or disc < 0.0:
        return Interval(Q2_MIN_LIMIT, 0.0)
    aux2 = math.sqrt(disc)

    q2_min = -ml2 + aux_c * (aux1 - aux2)
    q2_max = -ml2 + aux_c * (aux1 + aux2)
    return Interval(max(q2_min, Q2_MIN_LIMIT), q2_max)


def w_q2_to_x_y(w: float, q2: float, probe_energy: float, nucleon_mass: float) -> Tuple[float, float]:
    """Convert (W, Q^2) into Bjorken x and inelasticity y.

    Uses W^2 - M^2 = 2 E M y (1 - x) and Q^2 = 2 x y M E.

    Raises
    ------
    InfeasiblePhaseSpace
        If the resulting x or y lies outside (0, 1).
    """
    m2 = nucleon_mass * nucleon_mass
    nu_term = w * w - m2 + q2
    x = q2 / nu_term if nu_term > 0.0 else float('nan')
    y = nu_term / (2.0 * nucleon_mass * probe_energy)
    if not (0.0 < x < 1.0) or not (0.0 < y < 1.0):
        raise InfeasiblePhaseSpace(
            f"(W = {w:.6g}, Q2 = {q2:.6g}) maps to unphysical x = {x:.6g}, y = {y:.6g}"
        )
    return x, y
