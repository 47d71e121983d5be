"""
Cross-section model interface and guarded evaluation.
"""

from __future__ import annotations

import math
import threading
from typing import Dict, Protocol, Type

from .data_classes import InteractionContext, KinematicsPoint
from .exceptions import ModelError


class CrossSectionModel(Protocol):
    """Differential cross-section of one physical process.

    ``evaluate`` must return a finite, non-negative number for every point
    inside the allowed phase space.
    """

    def evaluate(self, point: KinematicsPoint, context: InteractionContext) -> float:
        ...


def evaluate_cross_section(
    model: CrossSectionModel,
    point: KinematicsPoint,
    context: InteractionContext,
) -> float:
    """Evaluate ``model`` at ``point`` and enforce the model contract.

    Raises
    ------
    ModelError
        If the model returns a non-numeric, non-finite or negative value.
    """
    value = model.evaluate(point, context)
    try:
        xsec = float(value)
    except (TypeError, ValueError):
        raise ModelError(f"Cross-section model returned a non-numeric value {value!r}",
                         value=value, point=dict(point.values)) from None
    if not math.isfinite(xsec) or xsec < 0.0:
        raise ModelError(f"Cross-section model returned {xsec!r} at {point.values}",
                         value=xsec, point=dict(point.values))
    return xsec


def jacobian_weight(point: KinematicsPoint) -> float:
    """Jacobian of the log-uniform proposal, d(x1...xn)/d(ln x1...ln xn)."""
    weight = 1.0
    for value in point.values.values():
        weight *= value
    return weight


def acceptance_weight(xsec: float, point: KinematicsPoint, include_jacobian: bool) -> float:
    """Quantity compared with the cached maximum in the acceptance test."""
    if include_jacobian:
        return xsec * jacobian_weight(point)
    return xsec


# ============================================================================
# Demonstration models
# ============================================================================

class BaseCrossSection:
    """Base class of closed-form models; counts ``evaluate`` calls (thread-safe)."""

    def __init__(self):
        self.calls = 0
        self._lock = threading.Lock()

    def evaluate(self, point: KinematicsPoint, context: InteractionContext) -> float:
        with self._lock:
            self.calls += 1
        return self._value(point, context)

    def _value(self, point: KinematicsPoint, context: InteractionContext) -> float:
        raise NotImplementedError


class ConstantCrossSection(BaseCrossSection):
    """Returns the same value everywhere."""

    def __init__(self, value: float = 1.0):
        super().__init__()
        self.value = value

    def _value(self, point, context):
        return self.value


class DipoleToyCrossSection(BaseCrossSection):
    """Smooth toy shape falling with Q^2 like a dipole form factor squared.

    For points that carry W a Gaussian bump around the Delta mass is added on
    top of a flat continuum. The overall scale grows linearly with the probe
    energy. It is not a physical cross-section.
    """

    def __init__(self, norm: float = 1.0, mass2: float = 0.71, peak: float = 1.232, width: float = 0.12):
        super().__init__()
        self.norm = norm
        self.mass2 = mass2
        self.peak = peak
        self.width = width

    def _value(self, point, context):
        q2 = point["Q2"]
        value = self.norm * context.probe_energy / (1.0 + q2 / self.mass2) ** 4
        w = point.get("W")
        if w is not None:
            value *= 0.5 + math.exp(-0.5 * ((w - self.peak) / self.width) ** 2)
        return value


# 命令行可选的模型
MODELS: Dict[str, Type[BaseCrossSection]] = {
    "constant": ConstantCrossSection,
    "dipole": DipoleToyCrossSection,
}
