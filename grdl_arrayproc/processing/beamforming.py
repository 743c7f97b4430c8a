# -*- coding: utf-8 -*-
"""
Beamforming - Nonparametric power spectrum estimators.

Each estimator maps one multilook's snapshots (or covariance) and the
per-line steering vector table to a power value per steering angle.
The driver combines the spectra over multilooks and reduces them to an
image value with :func:`select_image_value`.

Estimators
----------
- ``periodogram``: mean over snapshots of ``|a^H x|^2``.
- ``mvdr``: ``1 / Re(a^H Rxx^-1 a)`` with optional diagonal loading.
- ``mvdr_two_stage``: adaptive weights from one neighborhood applied to
  another, normalized by the weight response to its own steering vector.
- ``robust_mvdr``: principal generalized eigenvector of a perturbed
  steering outer product and ``Rxx`` used as the adaptive weight
  (general-rank signal model of Shahbazpanahi et al., IEEE TSP 51, 2003).
- ``music``: inverse of the mean squared projection onto the noise
  subspace.
- ``risr``: re-iterative super resolution (Blunt et al., IEEE TAES 2011).

MVDR and MUSIC are combined over multilooks on their denominators
(``mvdr_response``, ``music_projection``) and inverted afterwards.

References
----------
S. Shahbazpanahi, A. B. Gershman, Z.-Q. Luo and K. M. Wong, "Robust
adaptive beamforming for general-rank signal models," IEEE Transactions
on Signal Processing, vol. 51, pp. 2257-2269, 2003.

S. D. Blunt, T. Chan and K. Gerlach, "Robust DOA estimation: the
reiterative superresolution (RISR) algorithm," IEEE Transactions on
Aerospace and Electronic Systems, vol. 47, pp. 332-346, 2011.

Dependencies
------------
numpy - Linear algebra
scipy.linalg - Generalized eigen decomposition

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
from typing import Tuple

# Third-party
import numpy as np
from scipy import linalg as sp_linalg

# Internal
from grdl_arrayproc.processing.snapshots import diagonal_load, sample_covariance


# ===================================================================
# Estimators
# ===================================================================

def periodogram(snapshots: np.ndarray, steering: np.ndarray) -> np.ndarray:
    """
    Periodogram (delay and sum) power spectrum.

    Parameters
    ----------
    snapshots : np.ndarray
        Snapshot matrix, shape (Nc, Nsnap).
    steering : np.ndarray
        Steering vectors, shape (Nc, Nsv).

    Returns
    -------
    np.ndarray
        Power per steering vector, shape (Nsv,). NaN when there are no
        snapshots.
    """
    if snapshots.shape[1] == 0:
        return np.full(steering.shape[1], np.nan)
    beams = steering.conj().T @ snapshots
    return np.mean(np.abs(beams) ** 2, axis=1)


def mvdr(rxx: np.ndarray, steering: np.ndarray, load_factor: float = 0.0) -> np.ndarray:
    """
    Minimum variance distortionless response power spectrum.

    Parameters
    ----------
    rxx : np.ndarray
        Covariance matrix, shape (Nc, Nc).
    steering : np.ndarray
        Steering vectors, shape (Nc, Nsv).
    load_factor : float
        Diagonal loading factor.

    Returns
    -------
    np.ndarray
        Power per steering vector, shape (Nsv,).

    Raises
    ------
    numpy.linalg.LinAlgError
        If the loaded covariance is singular.
    """
    return 1.0 / mvdr_response(rxx, steering, load_factor)


def mvdr_response(rxx: np.ndarray, steering: np.ndarray, load_factor: float = 0.0) -> np.ndarray:
    """``Re(a^H Rxx^-1 a)`` per steering vector, the MVDR denominator."""
    loaded = diagonal_load(rxx, load_factor)
    rinv_a = np.linalg.solve(loaded, steering)
    return np.real(np.sum(steering.conj() * rinv_a, axis=0))


def mvdr_two_stage(
    rxx: np.ndarray,
    snapshots: np.ndarray,
    steering: np.ndarray,
    load_factor: float = 0.0
) -> np.ndarray:
    """
    MVDR with the covariance and output neighborhoods decoupled.

    Weights ``w = Rxx^-1 a`` come from *rxx*; the output power is
    ``mean(|w^H x|^2) / |w^H a|^2`` over *snapshots*.
    """
    if snapshots.shape[1] == 0:
        return np.full(steering.shape[1], np.nan)
    weights = np.linalg.solve(diagonal_load(rxx, load_factor), steering)
    return _normalized_output_power(weights, snapshots, steering)


def robust_mvdr(
    rxx: np.ndarray,
    snapshots: np.ndarray,
    steering: np.ndarray,
    perturbation: float = 0.12
) -> np.ndarray:
    """
    Robust MVDR for steering vector mismatch.

    For every steering vector the outer product ``a a^H`` is perturbed by
    ``perturbation * ||a a^H||_F`` along the diagonal and the weight is the
    principal eigenvector of ``Rxx^-1 (a a^H - eps I)``, found from the
    generalized problem ``(a a^H - eps I) w = lambda Rxx w``.

    Parameters
    ----------
    rxx : np.ndarray
        Covariance matrix, shape (Nc, Nc).
    snapshots : np.ndarray
        Output snapshots, shape (Nc, Nsnap).
    steering : np.ndarray
        Steering vectors, shape (Nc, Nsv).
    perturbation : float
        Fraction of the Frobenius norm subtracted along the diagonal.

    Returns
    -------
    np.ndarray
        Power per steering vector, shape (Nsv,).
    """
    nc, nsv = steering.shape
    if snapshots.shape[1] == 0:
        return np.full(nsv, np.nan)
    weights = np.empty((nc, nsv), dtype=np.complex128)
    identity = np.eye(nc)
    for idx in range(nsv):
        a = steering[:, idx:idx + 1]
        sv_mat = a @ a.conj().T
        sv_mat = sv_mat - perturbation * np.linalg.norm(sv_mat, 'fro') * identity
        eigvals, eigvecs = sp_linalg.eig(sv_mat, rxx)
        eigvals = np.where(np.isfinite(eigvals), np.real(eigvals), -np.inf)
        weights[:, idx] = eigvecs[:, np.argmax(eigvals)]
    return _normalized_output_power(weights, snapshots, steering)


def music(rxx: np.ndarray, steering: np.ndarray, nsrc: int) -> np.ndarray:
    """
    MUSIC pseudo-spectrum.

    The noise subspace holds the ``Nc - nsrc`` eigenvectors with the
    smallest eigenvalues.

    Returns
    -------
    np.ndarray
        ``1 / mean(|a^H V_n|^2)`` per steering vector, shape (Nsv,).
        Infinite where a steering vector is orthogonal to the noise
        subspace, and everywhere once ``nsrc >= Nc`` leaves no noise
        subspace.
    """
    with np.errstate(divide='ignore'):
        return 1.0 / music_projection(rxx, steering, nsrc)


def music_projection(rxx: np.ndarray, steering: np.ndarray, nsrc: int) -> np.ndarray:
    """``mean(|a^H V_n|^2)`` per steering vector, the MUSIC denominator."""
    noise = noise_subspace(rxx, nsrc)
    if noise.shape[1] == 0:
        return np.zeros(steering.shape[1])
    return np.mean(np.abs(steering.conj().T @ noise) ** 2, axis=1)


def risr(
    snapshots: np.ndarray,
    steering: np.ndarray,
    n_iter: int = 15,
    alpha: float = 1.0,
    sigma_z: float = 0.0
) -> np.ndarray:
    """
    Re-iterative super resolution.

    Starting from matched filter weights, alternates between the diagonal
    signal power density ``SPD = diag(mean(|W^H x|^2))`` and the weight
    update ``W = (A SPD A^H (1 + sigma_z) + alpha R)^-1 A SPD``. The noise
    covariance ``R`` is white at the smallest sample covariance
    eigenvalue.

    Parameters
    ----------
    snapshots : np.ndarray
        Snapshot matrix, shape (Nc, Nsnap).
    steering : np.ndarray
        Steering vectors, shape (Nc, Nsv).
    n_iter : int
        Fixed number of iterations.
    alpha : float
        Noise covariance weight.
    sigma_z : float
        Relative steering uncertainty.

    Returns
    -------
    np.ndarray
        Signal magnitude ``sqrt(diag(SPD))`` per steering vector.
    """
    nc, nsv = steering.shape
    if snapshots.shape[1] == 0:
        return np.full(nsv, np.nan)
    rxx = sample_covariance(snapshots)
    eigvals = np.linalg.eigvalsh(rxx)
    noise_power = max(eigvals[0], np.finfo(np.float64).eps * np.real(np.trace(rxx)))
    noise_cov = noise_power * np.eye(nc)

    weights = steering
    spd = np.zeros(nsv)
    for _ in range(n_iter):
        spd = np.mean(np.abs(weights.conj().T @ snapshots) ** 2, axis=1)
        a_spd = steering * spd[np.newaxis, :]
        aa = a_spd @ steering.conj().T
        weights = np.linalg.solve((1.0 + sigma_z) * aa + alpha * noise_cov, a_spd)
    return np.sqrt(spd)


# ===================================================================
# Helpers
# ===================================================================

def noise_subspace(rxx: np.ndarray, nsrc: int) -> np.ndarray:
    """Eigenvectors of the ``Nc - nsrc`` smallest eigenvalues of *rxx*."""
    _, eigvecs = np.linalg.eigh(rxx)
    return eigvecs[:, :max(rxx.shape[0] - nsrc, 0)]


def _normalized_output_power(
    weights: np.ndarray,
    snapshots: np.ndarray,
    steering: np.ndarray
) -> np.ndarray:
    """``mean(|w^H x|^2) / |w^H a|^2`` for every weight column."""
    out = np.mean(np.abs(weights.conj().T @ snapshots) ** 2, axis=1)
    gain = np.abs(np.sum(weights.conj() * steering, axis=0)) ** 2
    return out / gain


def select_image_value(
    power: np.ndarray,
    theta: np.ndarray,
    idxs: np.ndarray
) -> Tuple[float, float]:
    """
    Reduce a spectrum to one image value.

    Parameters
    ----------
    power : np.ndarray
        Power per steering angle, shape (Nsv,).
    theta : np.ndarray
        Steering angles in radians, shape (Nsv,).
    idxs : np.ndarray
        Indices searched for the maximum (angle-of-interest subset).

    Returns
    -------
    tuple of float
        ``(value, angle)``; both NaN when every searched value is NaN.
    """
    subset = power[idxs]
    if subset.size == 0 or np.all(np.isnan(subset)):
        return np.nan, np.nan
    best = int(np.nanargmax(subset))
    return float(subset[best]), float(theta[idxs[best]])


__all__ = [
    "periodogram",
    "mvdr",
    "mvdr_response",
    "mvdr_two_stage",
    "robust_mvdr",
    "music",
    "music_projection",
    "risr",
    "noise_subspace",
    "select_image_value",
]
