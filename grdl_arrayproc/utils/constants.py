# -*- coding: utf-8 -*-
"""
Physical Constants - Physical constants and conversions for array processing.

Provides commonly used constants including:
- Speed of light
- Angle unit conversions
- Relative permittivity of glacial ice

and the helpers that turn carrier frequency into the wavelength and
two-way wavenumber used by the steering vector generator.

License
-------
MIT License
Copyright (c) 2024 geoint.org

Created
-------
2026-10-19

Modified
--------
2026-10-19
"""

# Standard library
import math

# ===================================================================
# Physical Constants
# ===================================================================

#: Speed of light in vacuum (meters per second)
#: Exact value as defined by SI units
SPEED_OF_LIGHT = 299792458.0  # m/s

#: Relative permittivity of glacial ice, used when refracting a DOA
#: into a dielectric layer
ER_ICE = 3.15

# ===================================================================
# Unit Conversions
# ===================================================================

#: Degrees to radians conversion factor
DEG_TO_RAD = 0.017453292519943295  # π/180

#: Radians to degrees conversion factor
RAD_TO_DEG = 57.29577951308232  # 180/π

# ===================================================================
# Helper Functions
# ===================================================================

def wavelength_from_frequency(frequency_hz: float) -> float:
    """
    Compute wavelength from frequency.

    Parameters
    ----------
    frequency_hz : float
        Electromagnetic frequency in Hertz.

    Returns
    -------
    float
        Wavelength in meters.

    Examples
    --------
    >>> # P-band sounder at 195 MHz
    >>> round(wavelength_from_frequency(195e6), 4)
    1.5374
    """
    return SPEED_OF_LIGHT / frequency_hz


def two_way_wavenumber(frequency_hz: float) -> float:
    """
    Compute the two-way (round trip) wavenumber ``4*pi*f/c``.

    Parameters
    ----------
    frequency_hz : float
        Carrier frequency in Hertz.

    Returns
    -------
    float
        Wavenumber in radians per meter.
    """
    return 4.0 * math.pi * frequency_hz / SPEED_OF_LIGHT


__all__ = [
    # Physical constants
    'SPEED_OF_LIGHT',
    'ER_ICE',
    # Unit conversions
    'DEG_TO_RAD',
    'RAD_TO_DEG',
    # Helper functions
    'wavelength_from_frequency',
    'two_way_wavenumber',
]
