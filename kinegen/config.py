"""
Configuration settings for the kinematics generator.

This module contains all tunable defaults of the rejection sampler, the
maximum cross-section cache and the event-generation runner. Users can
modify these values to customise event generation without changing the
core code, or pass a customised ``SamplerConfig`` to a single sampler:

    from dataclasses import replace
    from kinegen import SamplerConfig

    cfg = replace(SamplerConfig(), safety_factor=1.5)
"""

from __future__ import annotations

# =============================================================================
# Rejection Sampling (舍选抽样)
# =============================================================================

# Number of log-spaced grid points per kinematic dimension used when
# searching for the maximum differential cross-section
GRID_POINTS_PER_DIMENSION = 20

# Multiplicative inflation of the grid maximum before it is cached
MAX_XSEC_SAFETY_FACTOR = 1.25

# Hard ceiling on rejected candidates per event
MAX_REJECTION_ATTEMPTS = 1000

# Grid-search refreshes allowed per event after a cache consistency violation
MAX_CACHE_REFRESHES = 3

# Offset applied to both interval limits before taking logarithms
BOUNDARY_EPSILON = 1.0e-6

# Weight the acceptance test by the log-uniform proposal Jacobian (prod x_i)
INCLUDE_JACOBIAN = False

# Number of recent candidates reported when the rejection budget runs out
DIAGNOSTIC_HISTORY = 5

# =============================================================================
# Maximum Cross-Section Cache (最大截面缓存)
# =============================================================================

# Number of entries kept before the oldest insertion is evicted
MAX_XSEC_CACHE_CAPACITY = 500

# Relative width of an energy bucket: contexts whose energies fall in the
# same bucket share a cached maximum (0 disables bucketing)
ENERGY_BUCKET_FRACTION = 0.01

# =============================================================================
# Event Generation
# =============================================================================

# Number of events generated by the runner
DEFAULT_N_EVENTS = 1000

# Incident (probe) energy in GeV
DEFAULT_PROBE_ENERGY_GEV = 5.0

# Relative Gaussian spread of the probe energy (0 = monochromatic)
DEFAULT_ENERGY_SPREAD = 0.0

# Process whose kinematics are generated
DEFAULT_PROCESS = "dis"

# Synthetic cross-section model used by the runner
DEFAULT_MODEL = "dipole"

# Master seed for the per-event random streams
DEFAULT_SEED = 12345

# Worker threads sharing one cache
DEFAULT_N_WORKERS = 1

# Upper W limit of the resonance region (GeV)
RES_W_CUT_GEV = 1.7

# Output directories (用户工作目录)
DATA_OUTPUT_DIR = "Data"
FIGURES_OUTPUT_DIR = "Figures"

# Output file names
EVENT_DATA_CSV = "kinematics_events.csv"
KINEMATICS_FIGURE_BASE = "kinematics"

# =============================================================================
# Visualization Settings
# =============================================================================

PLOT_DPI = 300
QUICK_PLOT_DPI = 150
HISTOGRAM_BINS = 50
KINEMATICS_FIGSIZE = (12, 10)
