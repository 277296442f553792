"""Physical constants and the electron speed-energy relation."""

import numpy as np

# Speed of light [m/s]
SPEED_OF_LIGHT = 2.99792458e8

# Electron rest energy [eV]
ELECTRON_REST_ENERGY_EV = 510998.95


def electron_speed(energy_eV):
    """Relativistic electron speed [m/s] for kinetic energy [eV].

    v = c * sqrt(1 - 1 / gamma**2), gamma = 1 + E / (m_e c^2)
    """
    energy = np.asarray(energy_eV, dtype=float)
    if np.any(energy <= 0):
        raise ValueError("Electron kinetic energy must be positive")
    gamma = 1.0 + energy / ELECTRON_REST_ENERGY_EV
    speed = SPEED_OF_LIGHT * np.sqrt(1.0 - 1.0 / gamma ** 2)
    return float(speed) if speed.ndim == 0 else speed
