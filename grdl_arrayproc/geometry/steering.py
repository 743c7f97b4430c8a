# -*- coding: utf-8 -*-
"""
Steering Vectors - Array manifold generation for cross-track arrays.

Maps directions of arrival (radians, nadir is zero, positive toward the
left / +y) and per-channel phase center positions to complex array
manifold vectors for a two-way (monostatic) radar::

    a_c(theta) = exp(1j*k*(y_c*sin(theta) - z_c*cos(theta))) / sqrt(Nc)
    k = 4*pi*fc/c

The same function serves the uniform beamforming grid and arbitrary real
angles queried by the DOA optimizer. Wideband helpers build per-subband
wavenumbers and space-time (sinc interpolated) manifolds.

Dependencies
------------
numpy - Array operations

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
from typing import Optional, Sequence

# Third-party
import numpy as np

# Internal
from grdl_arrayproc.utils.constants import (
    SPEED_OF_LIGHT,
    two_way_wavenumber,
)


def theta_grid(nsv: int) -> np.ndarray:
    """
    Steering angles uniformly sampled in sine (wavenumber) space.

    The grid covers the visible region from -90 to 90 degrees with spatial
    frequencies ``-floor(Nsv/2) .. floor((Nsv-1)/2)`` scaled by ``2/Nsv``
    and is returned in ascending order. ``nsv == 1`` gives nadir only.

    Parameters
    ----------
    nsv : int
        Number of steering vectors.

    Returns
    -------
    np.ndarray
        Angles in radians, shape (nsv,), ascending.
    """
    if nsv < 1:
        raise ValueError(f"nsv must be >= 1, got {nsv}")
    spatial_freq = np.arange(-(nsv // 2), (nsv - 1) // 2 + 1) * (2.0 / nsv)
    return np.arcsin(np.clip(spatial_freq, -1.0, 1.0))


def steering_vectors(
    theta: np.ndarray,
    fc: float,
    y_pos: np.ndarray,
    z_pos: np.ndarray
) -> np.ndarray:
    """
    Narrowband steering vectors for a set of arrival angles.

    Parameters
    ----------
    theta : np.ndarray
        Arrival angles in radians, shape (Ntheta,). Any real values.
    fc : float
        Carrier frequency in Hz.
    y_pos : np.ndarray
        Cross-track phase center positions (meters, positive left),
        shape (Nc,).
    z_pos : np.ndarray
        Elevation phase center positions (meters, positive up),
        shape (Nc,).

    Returns
    -------
    np.ndarray
        Complex steering matrix, shape (Nc, Ntheta). Each column has unit
        norm.
    """
    theta = np.atleast_1d(np.asarray(theta, dtype=np.float64))
    y_pos = np.asarray(y_pos, dtype=np.float64).reshape(-1, 1)
    z_pos = np.asarray(z_pos, dtype=np.float64).reshape(-1, 1)
    if y_pos.shape != z_pos.shape:
        raise ValueError(
            f"y_pos and z_pos must have the same length, got "
            f"{y_pos.shape[0]} and {z_pos.shape[0]}"
        )
    k = two_way_wavenumber(fc)
    phase = k * (y_pos * np.sin(theta)[np.newaxis, :]
                 - z_pos * np.cos(theta)[np.newaxis, :])
    return np.exp(1j * phase) / np.sqrt(y_pos.shape[0])


def subband_frequencies(fc: float, fs: float, nsubband: int) -> np.ndarray:
    """
    Center frequencies of the DFT subbands of a baseband signal.

    Subbands follow DFT bin order ``0, 1, .., -2, -1`` so that index ``nb``
    matches ``np.fft.fft(..., axis=0)[nb]``.

    Parameters
    ----------
    fc : float
        Carrier frequency in Hz.
    fs : float
        Sampling frequency in Hz.
    nsubband : int
        Number of subbands (DFT length).

    Returns
    -------
    np.ndarray
        Subband center frequencies in Hz, shape (nsubband,).
    """
    return fc + fs * np.fft.fftfreq(nsubband)


def two_way_delays(
    theta: np.ndarray,
    y_pos: np.ndarray,
    z_pos: np.ndarray
) -> np.ndarray:
    """
    Relative two-way delay of each channel for each arrival angle.

    A longer delay to a sensor is more negative, matching the phase
    convention of :func:`steering_vectors` (``exp(1j*2*pi*fc*tau)``).

    Returns
    -------
    np.ndarray
        Delays in seconds, shape (Nc, Ntheta).
    """
    theta = np.atleast_1d(np.asarray(theta, dtype=np.float64))
    y_pos = np.asarray(y_pos, dtype=np.float64).reshape(-1, 1)
    z_pos = np.asarray(z_pos, dtype=np.float64).reshape(-1, 1)
    return (2.0 / SPEED_OF_LIGHT) * (y_pos * np.sin(theta)[np.newaxis, :]
                                     - z_pos * np.cos(theta)[np.newaxis, :])


def space_time_steering_vectors(
    theta: np.ndarray,
    fc: float,
    fs: float,
    y_pos: np.ndarray,
    z_pos: np.ndarray,
    imp_resp_vals: np.ndarray,
    imp_resp_time: np.ndarray,
    offsets: Sequence[int]
) -> np.ndarray:
    """
    Wideband space-time steering vectors.

    Stacks, for every fast-time offset ``w`` (in samples), the channel
    response to a wideband plane wave: the fast-time impulse response
    sampled at ``w/fs + tau_c(theta)`` times the carrier phase
    ``exp(1j*2*pi*fc*tau_c(theta))``. Rows are ordered offset-major
    (``row = w_idx*Nc + c``) to match the stacked snapshots.

    Parameters
    ----------
    theta : np.ndarray
        Arrival angles in radians, shape (Ntheta,).
    fc, fs : float
        Carrier and sampling frequency in Hz.
    y_pos, z_pos : np.ndarray
        Phase center positions, shape (Nc,).
    imp_resp_vals : np.ndarray
        Complex impulse response samples, main lobe at zero time.
    imp_resp_time : np.ndarray
        Time of each impulse response sample (seconds, ascending).
    offsets : sequence of int
        Fast-time offsets in samples.

    Returns
    -------
    np.ndarray
        Complex matrix, shape (len(offsets)*Nc, Ntheta), unit-norm columns.
    """
    tau = two_way_delays(theta, y_pos, z_pos)
    carrier = np.exp(2j * np.pi * fc * tau)
    blocks = []
    for offset in offsets:
        t_eval = offset / fs + tau
        h_real = np.interp(t_eval, imp_resp_time, np.real(imp_resp_vals),
                           left=0.0, right=0.0)
        h_imag = np.interp(t_eval, imp_resp_time, np.imag(imp_resp_vals),
                           left=0.0, right=0.0)
        blocks.append((h_real + 1j * h_imag) * carrier)
    manifold = np.concatenate(blocks, axis=0)
    norms = np.linalg.norm(manifold, axis=0)
    norms[norms == 0] = 1.0
    return manifold / norms[np.newaxis, :]


def line_positions(
    positions: np.ndarray,
    rline: int,
    roll: Optional[float] = None
) -> tuple:
    """
    Cross-track and elevation phase centers for one range line.

    Parameters
    ----------
    positions : np.ndarray
        Shape (2, Nc) for a fixed geometry or (2, Nc, Nx) for a geometry
        that varies along track. Row 0 is cross-track ``y``, row 1 is
        elevation ``z``.
    rline : int
        Range-line index (ignored for fixed geometry).
    roll : float, optional
        Platform roll in radians. When given, the phase centers are
        rotated about the along-track axis before use.

    Returns
    -------
    tuple of np.ndarray
        ``(y_pos, z_pos)``, each shape (Nc,).
    """
    if positions.ndim == 3:
        y_pos = positions[0, :, rline]
        z_pos = positions[1, :, rline]
    else:
        y_pos = positions[0]
        z_pos = positions[1]
    if roll:
        cos_r, sin_r = np.cos(roll), np.sin(roll)
        y_pos, z_pos = cos_r * y_pos - sin_r * z_pos, sin_r * y_pos + cos_r * z_pos
    return np.asarray(y_pos, dtype=np.float64), np.asarray(z_pos, dtype=np.float64)


__all__ = [
    "theta_grid",
    "steering_vectors",
    "subband_frequencies",
    "two_way_delays",
    "space_time_steering_vectors",
    "line_positions",
]
