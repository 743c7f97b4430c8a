# -*- coding: utf-8 -*-
"""
Snapshots - Channel equalization, neighborhood extraction and sample
covariance estimation.

Snapshots are stored column-wise: a snapshot matrix has shape
``(Nc, Nsnap)`` (or ``(Nsubband*Nc, Nsnap)`` for space-time stacking), and
every covariance is formed as ``H @ H.conj().T / Nsnap``. Neighborhoods are
truncated at the data cube boundaries, never wrapped or padded, so the
snapshot count shrinks near the edges.

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
from typing import Optional

# Third-party
import numpy as np


def validate_cube(data: np.ndarray, param_name: str = "data") -> None:
    """
    Validate a 5-D complex data cube.

    Raises
    ------
    TypeError
        If *data* is not a complex numpy array.
    ValueError
        If *data* is not 5-D.
    """
    if not isinstance(data, np.ndarray):
        raise TypeError(
            f"{param_name} must be np.ndarray, got {type(data).__name__}"
        )
    if not np.iscomplexobj(data):
        raise TypeError(
            f"{param_name} must be complex-valued, got dtype {data.dtype}"
        )
    if data.ndim != 5:
        raise ValueError(
            f"{param_name} must be 5D (Nt, Nx, Na, Nb, Nc), got shape {data.shape}"
        )


# ===================================================================
# Channel Equalization
# ===================================================================

def equalize_channels(
    data: np.ndarray,
    chan_equal: np.ndarray,
    window: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    Apply per-channel calibration weights and an optional amplitude taper.

    Computes ``data * window / chan_equal`` along the channel axis.

    Parameters
    ----------
    data : np.ndarray
        Complex cube (Nt, Nx, Na, Nb, Nc).
    chan_equal : np.ndarray
        Complex equalization coefficient per channel, shape (Nc,).
    window : np.ndarray, optional
        Real taper per channel, shape (Nc,).

    Returns
    -------
    np.ndarray
        Equalized cube (new array, input untouched).
    """
    weights = 1.0 / np.asarray(chan_equal, dtype=np.complex128)
    if window is not None:
        weights = weights * np.asarray(window, dtype=np.float64)
    return data * weights.reshape(1, 1, 1, 1, -1)


# ===================================================================
# Neighborhoods
# ===================================================================

def clip_range(center: int, rng: np.ndarray, n: int) -> np.ndarray:
    """
    Absolute indices ``center + rng`` that fall inside ``[0, n-1]``.

    Parameters
    ----------
    center : int
        Neighborhood center.
    rng : np.ndarray
        Integer offsets about the center.
    n : int
        Axis length.

    Returns
    -------
    np.ndarray
        Valid indices (possibly empty), dtype int.
    """
    idx = center + np.asarray(rng, dtype=int)
    return idx[(idx >= 0) & (idx < n)]


def extract_snapshots(
    data: np.ndarray,
    bins: np.ndarray,
    lines: np.ndarray
) -> np.ndarray:
    """
    Flatten a neighborhood into column snapshots.

    Parameters
    ----------
    data : np.ndarray
        Complex cube (Nt, Nx, Na, Nb, Nc).
    bins, lines : np.ndarray
        Absolute (already clipped) fast-time and slow-time indices.

    Returns
    -------
    np.ndarray
        Snapshot matrix, shape (Nc, len(bins)*len(lines)*Na*Nb).
    """
    nc = data.shape[4]
    block = data[np.ix_(np.asarray(bins, dtype=int), np.asarray(lines, dtype=int))]
    return block.reshape(-1, nc).T


def space_time_snapshots(
    data: np.ndarray,
    bins: np.ndarray,
    lines: np.ndarray,
    offsets: np.ndarray
) -> np.ndarray:
    """
    Stack delayed copies of a neighborhood into space-time snapshots.

    Block ``w`` of rows holds the snapshots at ``bins + offsets[w]``.

    Returns
    -------
    np.ndarray
        Shape (len(offsets)*Nc, len(bins)*len(lines)*Na*Nb).
    """
    return np.concatenate(
        [extract_snapshots(data, bins + offset, lines) for offset in offsets],
        axis=0,
    )


# ===================================================================
# Covariance
# ===================================================================

def sample_covariance(snapshots: np.ndarray) -> np.ndarray:
    """
    Hermitian sample covariance ``H H^H / Nsnap``.

    Returns an all-NaN matrix when there are no snapshots.
    """
    n_rows, n_snap = snapshots.shape
    if n_snap == 0:
        return np.full((n_rows, n_rows), np.nan + 0j)
    rxx = snapshots @ snapshots.conj().T / n_snap
    return 0.5 * (rxx + rxx.conj().T)


def diagonal_load(rxx: np.ndarray, load_factor: float) -> np.ndarray:
    """Add ``load_factor * sqrt(mean(|Rxx|^2)) * I`` to a covariance."""
    if load_factor == 0:
        return rxx
    level = load_factor * np.sqrt(np.mean(np.abs(rxx) ** 2))
    return rxx + level * np.eye(rxx.shape[0])


def subband_covariance(
    data: np.ndarray,
    bins: np.ndarray,
    lines: np.ndarray,
    nsubband: int
):
    """
    Per-subband covariance blocks from DFTs of fast-time groups.

    Consecutive groups of *nsubband* fast-time samples from *bins* are
    transformed with a DFT along fast time; subband ``nb`` of every group
    contributes its snapshots to covariance block ``nb``. Trailing samples
    that do not fill a group are dropped. Blocks are normalized by the
    number of snapshots per subband.

    Parameters
    ----------
    data : np.ndarray
        Complex cube (Nt, Nx, Na, Nb, Nc).
    bins : np.ndarray
        Absolute fast-time indices, ``len(bins) >= nsubband``.
    lines : np.ndarray
        Absolute slow-time indices.
    nsubband : int
        DFT length (number of subbands).

    Returns
    -------
    dcm : np.ndarray
        Covariance blocks, shape (nsubband, Nc, Nc), DFT bin order.
    snapshots : np.ndarray
        Time-domain snapshots of the used groups, shape (Nc, Nsnap).
    """
    nc = data.shape[4]
    bins = np.asarray(bins, dtype=int)
    n_groups = (len(bins) - nsubband) // nsubband + 1
    if n_groups < 1:
        raise ValueError(
            f"Need at least {nsubband} fast-time samples, got {len(bins)}"
        )
    used = bins[:n_groups * nsubband]
    block = data[np.ix_(used, np.asarray(lines, dtype=int))]
    n_other = block[0].size // nc
    # (groups, nsubband, other, Nc)
    grouped = block.reshape(n_groups, nsubband, n_other, nc)
    spectra = np.fft.fft(grouped, axis=1)
    dcm = np.einsum('gbsc,gbsd->bcd', spectra, spectra.conj())
    dcm /= n_groups * n_other
    snapshots = block.reshape(-1, nc).T
    return dcm, snapshots


__all__ = [
    "validate_cube",
    "equalize_channels",
    "clip_range",
    "extract_snapshots",
    "space_time_snapshots",
    "sample_covariance",
    "diagonal_load",
    "subband_covariance",
]
