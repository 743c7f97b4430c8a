# -*- coding: utf-8 -*-
"""
Utilities - Physical constants and conversion helpers.

License
-------
MIT License
Copyright (c) 2024 geoint.org
"""

from grdl_arrayproc.utils.constants import (
    SPEED_OF_LIGHT,
    ER_ICE,
    DEG_TO_RAD,
    RAD_TO_DEG,
    wavelength_from_frequency,
    two_way_wavenumber,
)

__all__ = [
    "SPEED_OF_LIGHT",
    "ER_ICE",
    "DEG_TO_RAD",
    "RAD_TO_DEG",
    "wavelength_from_frequency",
    "two_way_wavenumber",
]
