# -*- coding: utf-8 -*-
"""
Shared fixtures for array processing tests.

Synthetic scenario: an 8-element uniform linear cross-track array at
195 MHz with quarter-wavelength spacing (half-wavelength two-way),
illuminated by plane waves of random complex amplitude plus weak white
noise.

License
-------
MIT License
Copyright (c) 2024 geoint.org

Created
-------
2026-10-19
"""

import numpy as np
import pytest

from grdl_arrayproc.geometry.steering import steering_vectors
from grdl_arrayproc.utils.constants import DEG_TO_RAD, wavelength_from_frequency

FC = 195e6
NC = 8


def make_cube(rng, angles_deg, shape=(20, 12, 1, 1, NC), noise=0.01, amps=None):
    """Complex cube whose channels see plane waves from *angles_deg*."""
    nt, nx, na, nb, nc = shape
    wavelength = wavelength_from_frequency(FC)
    y_pos = (np.arange(nc) - (nc - 1) / 2.0) * wavelength / 4.0
    z_pos = np.zeros(nc)
    cube = noise * (rng.randn(*shape) + 1j * rng.randn(*shape)) / np.sqrt(2)
    amps = np.ones(len(angles_deg)) if amps is None else amps
    for angle, amp in zip(angles_deg, amps):
        a = steering_vectors(np.array([angle * DEG_TO_RAD]), FC, y_pos, z_pos)[:, 0]
        a = a * np.sqrt(nc)
        sig = amp * (rng.randn(nt, nx, na, nb) + 1j * rng.randn(nt, nx, na, nb)) / np.sqrt(2)
        cube = cube + sig[..., np.newaxis] * a
    return cube.astype(np.complex128), np.vstack([y_pos, z_pos])


@pytest.fixture
def random_state():
    """Fixed random state for reproducible tests."""
    return np.random.RandomState(42)


@pytest.fixture
def array_geometry():
    """(y_pos, z_pos) of the test array."""
    wavelength = wavelength_from_frequency(FC)
    y_pos = (np.arange(NC) - (NC - 1) / 2.0) * wavelength / 4.0
    return y_pos, np.zeros(NC)


@pytest.fixture
def cube_factory(random_state):
    """``factory(angles_deg, **kwargs) -> (cube, positions)``."""
    return lambda angles_deg, **kwargs: make_cube(random_state, angles_deg, **kwargs)


@pytest.fixture
def single_source(random_state):
    """Cube with one source at +15 degrees and its phase centers."""
    return make_cube(random_state, [15.0])


@pytest.fixture
def two_sources(random_state):
    """Cube with sources at -20 and +25 degrees."""
    return make_cube(random_state, [-20.0, 25.0])
