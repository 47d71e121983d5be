"""
Error taxonomy of the kinematics engine.

``InfeasiblePhaseSpace`` and ``RejectionBudgetExhausted`` abort a single
event; ``ModelError`` signals a broken cross-section collaborator;
``CacheConsistencyViolation`` is recovered by the sampler (fresh grid search)
until its refresh allowance is used up.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple


class KinematicsError(Exception):
    """Base class of all kinematics-engine errors."""


class InfeasiblePhaseSpace(KinematicsError):
    """The allowed interval of a kinematic variable is empty or non-positive."""

    def __init__(self, message: str, variable: Optional[str] = None, interval: Any = None):
        super().__init__(message)
        self.variable = variable
        self.interval = interval


class ModelError(KinematicsError):
    """The cross-section model returned a negative, non-finite or non-numeric value."""

    def __init__(self, message: str, value: Any = None, point: Optional[Dict[str, float]] = None):
        super().__init__(message)
        self.value = value
        self.point = point


class RejectionBudgetExhausted(KinematicsError):
    """No candidate was accepted within the configured number of attempts.

    Attributes
    ----------
    attempts : int
        Number of rejected candidates.
    energy : float
        Probe energy of the event (GeV).
    bounds : dict
        Variable name -> interval used for the last candidate.
    max_xsec : float
        Maximum cross-section in force when the budget ran out.
    last_candidates : list
        The most recent ``(values, xsec)`` pairs, oldest first.
    """

    def __init__(
        self,
        attempts: int,
        energy: float,
        bounds: Dict[str, Any],
        max_xsec: float,
        last_candidates: List[Tuple[Dict[str, float], float]],
    ):
        bounds_text = ", ".join(f"{name} in [{iv.lo:.6g}, {iv.hi:.6g}]" for name, iv in bounds.items())
        candidates_text = "; ".join(
            "(" + ", ".join(f"{k}={v:.6g}" for k, v in values.items()) + f") -> {xsec:.6g}"
            for values, xsec in last_candidates
        )
        super().__init__(
            f"Could not select kinematics after {attempts} attempts "
            f"(E = {energy:.6g} GeV, max xsec = {max_xsec:.6g}, bounds: {bounds_text or 'n/a'}; "
            f"last candidates: {candidates_text or 'n/a'})"
        )
        self.attempts = attempts
        self.energy = energy
        self.bounds = dict(bounds)
        self.max_xsec = max_xsec
        self.last_candidates = list(last_candidates)


class CacheConsistencyViolation(KinematicsError):
    """An evaluated cross-section exceeded the cached maximum."""

    def __init__(self, xsec: float, max_xsec: float, point: Dict[str, float], key: Any = None):
        super().__init__(
            f"Cross-section {xsec:.6g} exceeds cached maximum {max_xsec:.6g} at {point}"
        )
        self.xsec = xsec
        self.max_xsec = max_xsec
        self.point = dict(point)
        self.key = key
