"""
Physical constants used by the kinematic boundary functions.

All masses are in GeV (natural units, c = 1).
"""

# Lepton masses
ELECTRON_MASS = 0.0005109989  # GeV
MUON_MASS = 0.105658357  # GeV
TAU_MASS = 1.77703  # GeV

# Hadron masses
PION_MASS = 0.140  # GeV
PROTON_MASS = 0.9382720  # GeV
NEUTRON_MASS = 0.9395653  # GeV
NUCLEON_MASS = 0.5 * (PROTON_MASS + NEUTRON_MASS)  # GeV

# Lower Q^2 limit applied to physical ranges so that massless final-state
# leptons never produce Q^2_min = 0
Q2_MIN_LIMIT = 1.0e-4  # GeV^2

LEPTON_MASSES = {
    "e": ELECTRON_MASS,
    "mu": MUON_MASS,
    "tau": TAU_MASS,
    "nu": 0.0,
}
