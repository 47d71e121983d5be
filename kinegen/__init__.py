"""
Kinematics Generator Package
============================

This package selects event kinematics (e.g. W and Q^2 of a neutrino-nucleon
interaction) by the rejection method, with a coarse grid search for the
maximum differential cross-section and a bounded, thread-safe cache of
those maxima shared across events.

Modules:
--------
- config: Configurable sampling, cache and runner defaults
- core.constants: Particle masses
- core.exceptions: Error taxonomy
- core.data_classes: Data structures (InteractionContext, KinematicsPoint, SamplingResult)
- core.ranges: Bounds-provider interface, user cuts and log-space limits
- core.models: Cross-section model interface
- core.sampling: Uniform variate sources and log-uniform draws
- core.cache: Maximum cross-section cache
- core.grid_search: Phase-space grid search
- core.sampler: Rejection sampler
- core.kinematics: W / Q^2 limits and x, y conversion
- core.generators: Per-process kinematics generators
- core.io_utils: Data export utilities
- runner: Event-generation runner and command-line entry point
"""

from . import config
from .core import *
from .core import __all__ as _core_all
from .runner import (
    build_contexts,
    build_model,
    generate_events,
    run_generation,
)

__version__ = "1.0.0"
__all__ = [
    # Config module
    "config",
    # Runner
    "build_contexts",
    "build_model",
    "generate_events",
    "run_generation",
] + list(_core_all)
