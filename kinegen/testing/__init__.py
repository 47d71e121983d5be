"""
Testing subpackage for the kinematics generator.

This subpackage provides tools for testing and debugging the engine:
- Synthetic cross-section models, bounds and deterministic variate sources
- Statistical validation (Kolmogorov-Smirnov tests against analytic densities)

Example usage:
    from kinegen.testing import ConstantCrossSection, scenario_w_q2_bounds, run_quick_test

    model = ConstantCrossSection(2.0)
    bounds = scenario_w_q2_bounds()

    # Run the built-in validation
    success = run_quick_test()
"""

from .synthetic import (
    ConstantCrossSection,
    PowerLawCrossSection,
    DipoleToyCrossSection,
    AdversarialCrossSection,
    FunctionCrossSection,
    BoxBounds,
    SequenceUniformSource,
    scenario_w_q2_bounds,
)
from ..core.models import MODELS

from .validation import (
    power_law_cdf,
    ks_no_bias_test,
    acceptance_rate,
    validate_sampler_module,
    run_quick_test,
)

__all__ = [
    # Synthetic collaborators
    "ConstantCrossSection",
    "PowerLawCrossSection",
    "DipoleToyCrossSection",
    "AdversarialCrossSection",
    "FunctionCrossSection",
    "BoxBounds",
    "SequenceUniformSource",
    "scenario_w_q2_bounds",
    "MODELS",
    # Validation
    "power_law_cdf",
    "ks_no_bias_test",
    "acceptance_rate",
    "validate_sampler_module",
    "run_quick_test",
]
