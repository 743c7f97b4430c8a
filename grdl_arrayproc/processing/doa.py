# -*- coding: utf-8 -*-
"""
Direction of Arrival - Parametric DOA estimation per pixel.

Each pixel runs Initialize -> Bound -> Optimize -> Assign:

- *Initialize*: a global grid search of the projection fit
  ``|tr(P_A Rxx)|`` over all guard-respecting angle combinations, or the
  alternating projection search of Ziskind and Wax (one source at a time,
  earlier sources projected out, each grid peak refined with a 3-point
  quadratic fit). MUSIC-DOA starts from MUSIC pseudo-spectrum peaks.
- *Bound*: per-source bounds centered on zero (``fixed``), on the surface
  incidence angle (``surface-left/right``) or on the incidence angle of a
  refracted layer echo (``layer-left/right``).
- *Optimize*: SLSQP over the bounded angles with the pairwise separation
  guard as a smooth inequality constraint. The cost at the optimum and the
  finite-difference Hessian diagonal are returned with the angles.
- *Assign*: optional bucketing by the sign of the angle.

Costs are normalized so that a noiseless fit of the true angles gives
zero: ``sum_b Re tr((I - P_A) R_b) / sum_b Re tr(R_b)`` over one (MLE),
the space-time stacked (DCM) or every subband (wideband MLE) covariance.
Positive angles are left of nadir.

References
----------
I. Ziskind and M. Wax, "Maximum likelihood localization of multiple
sources by alternating projection," IEEE Transactions on Acoustics,
Speech, and Signal Processing, vol. 36, pp. 1553-1560, 1988.

Dependencies
------------
numpy - Linear algebra
scipy.optimize - SLSQP constrained minimization

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
import itertools
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

# Third-party
import numpy as np
from scipy.optimize import minimize

# Internal
from grdl_arrayproc.geometry.steering import (
    space_time_steering_vectors,
    steering_vectors,
    subband_frequencies,
    two_way_delays,
)
from grdl_arrayproc.processing.config import ConstraintMethod, DoaConstraint
from grdl_arrayproc.utils.constants import DEG_TO_RAD

logger = logging.getLogger(__name__)

Manifold = Callable[[np.ndarray], np.ndarray]

#: Incidence angles of the layer delay table (radians)
LAYER_TABLE_DOA = np.arange(0.0, 90.0) * DEG_TO_RAD

#: Step of the central difference Hessian (radians)
HESSIAN_STEP = 1e-4

#: Tolerance on bound and guard violations of an accepted solution
FEASIBILITY_TOL = 1e-6


# ===================================================================
# Bounds
# ===================================================================

def constraint_center(
    constraint: DoaConstraint,
    time_bin: Optional[float] = None,
    surface_twtt: Optional[float] = None,
    layer_twtt: Optional[float] = None
) -> float:
    """
    Center angle of a DOA constraint at one pixel.

    Parameters
    ----------
    constraint : DoaConstraint
        Source constraint.
    time_bin : float, optional
        Fast time of the pixel (seconds).
    surface_twtt : float, optional
        Surface two-way travel time of the range line (seconds).
    layer_twtt : float, optional
        Layer two-way travel time of the range line (layer constraints).

    Returns
    -------
    float
        Center angle in radians. Echoes earlier than the surface map to
        nadir. NaN when *time_bin* is not positive.
    """
    method = constraint.method
    if method == ConstraintMethod.FIXED:
        return 0.0
    if time_bin <= 0:
        return np.nan
    sign = 1.0 if method in (ConstraintMethod.SURFACE_LEFT,
                             ConstraintMethod.LAYER_LEFT) else -1.0
    if method.is_surface:
        return sign * float(np.arccos(np.clip(surface_twtt / time_bin, -1.0, 1.0)))

    layer_twtt = max(layer_twtt, surface_twtt)
    if time_bin <= layer_twtt:
        return 0.0
    refracted = np.arcsin(np.sin(LAYER_TABLE_DOA) / np.sqrt(constraint.er))
    table_delay = (surface_twtt / np.cos(LAYER_TABLE_DOA)
                   + (layer_twtt - surface_twtt) / np.cos(refracted))
    return sign * float(np.interp(time_bin, table_delay, LAYER_TABLE_DOA))


def constraint_limits(
    constraints: Sequence[DoaConstraint],
    centers: Sequence[float],
    initialization: bool = False
) -> List[Tuple[float, float]]:
    """``center + limits`` for every source (init or optimization limits)."""
    limits = []
    for constraint, center in zip(constraints, centers):
        rel = constraint.init_src_limits if initialization else constraint.src_limits
        limits.append((center + rel[0], center + rel[1]))
    return limits


# ===================================================================
# Cost Models
# ===================================================================

class ProjectionModel:
    """
    Covariance blocks paired with their array manifolds.

    A narrowband model has one block; the space-time (DCM) model has one
    stacked block; the wideband MLE model has one block per subband.

    Parameters
    ----------
    covariances : sequence of np.ndarray
        Hermitian covariance blocks.
    manifolds : sequence of callable
        ``manifold(theta) -> (rows, len(theta))`` for each block.
    """

    def __init__(self, covariances: Sequence[np.ndarray], manifolds: Sequence[Manifold]) -> None:
        if len(covariances) != len(manifolds):
            raise ValueError(
                f"Need one manifold per covariance block, got "
                f"{len(covariances)} and {len(manifolds)}"
            )
        self._covariances = list(covariances)
        self._manifolds = list(manifolds)
        self._total = float(sum(np.real(np.trace(r)) for r in self._covariances))

    @property
    def covariances(self) -> List[np.ndarray]:
        return self._covariances

    @property
    def manifolds(self) -> List[Manifold]:
        return self._manifolds

    @property
    def total_power(self) -> float:
        """Sum of the covariance traces."""
        return self._total

    def fit(self, theta: np.ndarray) -> float:
        """Projection fit ``sum_b |tr(P_A R_b)|``."""
        theta = np.atleast_1d(theta)
        value = 0.0
        for rxx, manifold in zip(self._covariances, self._manifolds):
            a = manifold(theta)
            proj = a @ np.linalg.pinv(a)
            value += np.abs(np.sum(proj * rxx.T))
        return float(value)

    def cost(self, theta: np.ndarray) -> float:
        """Normalized residual power ``1 - fit / total``."""
        return (self._total - self.fit(theta)) / self._total

    def scan(self, grid: np.ndarray, found: Sequence[float] = ()) -> np.ndarray:
        """
        Alternating projection fit of one new source on a grid.

        Every grid angle is projected orthogonally to the manifold of the
        *found* angles, normalized, and scored by ``|b^H R b|``.
        """
        grid = np.asarray(grid, dtype=np.float64)
        score = np.zeros(grid.size)
        for rxx, manifold in zip(self._covariances, self._manifolds):
            cand = manifold(grid)
            if len(found):
                a = manifold(np.asarray(found, dtype=np.float64))
                cand = cand - a @ (np.linalg.pinv(a) @ cand)
            norms = np.linalg.norm(cand, axis=0)
            norms[norms == 0] = np.inf
            cand = cand / norms[np.newaxis, :]
            score += np.abs(np.sum(cand.conj() * (rxx @ cand), axis=0))
        return score


def music_doa_cost(theta: np.ndarray, noise: np.ndarray, manifold: Manifold) -> float:
    """Sum over sources of ``||E_n^H a(theta_i)||^2``."""
    proj = noise.conj().T @ manifold(np.atleast_1d(theta))
    return float(np.sum(np.abs(proj) ** 2))


def narrowband_manifold(fc: float, y_pos: np.ndarray, z_pos: np.ndarray) -> Manifold:
    """Narrowband steering vector generator bound to one line geometry."""
    return lambda theta: steering_vectors(theta, fc, y_pos, z_pos)


def space_time_manifold(
    fc: float,
    fs: float,
    y_pos: np.ndarray,
    z_pos: np.ndarray,
    imp_resp_vals: np.ndarray,
    imp_resp_time: np.ndarray,
    offsets: np.ndarray
) -> Manifold:
    """Space-time steering vector generator bound to one line geometry."""
    return lambda theta: space_time_steering_vectors(
        theta, fc, fs, y_pos, z_pos, imp_resp_vals, imp_resp_time, offsets)


def subband_manifolds(
    fc: float,
    fs: float,
    nsubband: int,
    y_pos: np.ndarray,
    z_pos: np.ndarray
) -> List[Manifold]:
    """One narrowband manifold per subband center frequency (DFT order)."""
    return [narrowband_manifold(f, y_pos, z_pos)
            for f in subband_frequencies(fc, fs, nsubband)]


# ===================================================================
# Initialization
# ===================================================================

def _in_limits(grid: np.ndarray, limits: Tuple[float, float]) -> np.ndarray:
    return (grid >= limits[0]) & (grid <= limits[1])


def _quadratic_peak(grid: np.ndarray, score: np.ndarray, idx: int) -> float:
    """Refine a grid peak with a 3-point quadratic fit."""
    if idx == 0 or idx == grid.size - 1:
        return float(grid[idx])
    coeffs = np.polyfit(grid[idx - 1:idx + 2], score[idx - 1:idx + 2], 2)
    if coeffs[0] >= 0:
        return float(grid[idx])
    peak = -coeffs[1] / (2 * coeffs[0])
    return float(np.clip(peak, grid[idx - 1], grid[idx + 1]))


def grid_initialization(
    model: ProjectionModel,
    grid: np.ndarray,
    limits: Sequence[Tuple[float, float]],
    guard: float
) -> Optional[np.ndarray]:
    """
    Global grid search of the projection fit.

    Evaluates every combination of grid angles inside each source's
    limits whose pairwise separation is at least *guard*. Sources that
    share identical limits are enumerated in ascending order only.

    Returns
    -------
    np.ndarray or None
        Best combination (one angle per source), or None when no
        combination is valid.
    """
    grid = np.asarray(grid, dtype=np.float64)
    candidates = [np.flatnonzero(_in_limits(grid, lim)) for lim in limits]
    if any(c.size == 0 for c in candidates):
        return None
    if len(limits) == 1:
        score = model.scan(grid[candidates[0]])
        return np.array([grid[candidates[0][int(np.argmax(score))]]])

    best, best_fit = None, -np.inf
    nsrc = len(limits)
    for combo in itertools.product(*candidates):
        valid = True
        for i in range(nsrc):
            for j in range(i + 1, nsrc):
                if abs(grid[combo[j]] - grid[combo[i]]) < guard:
                    valid = False
                elif limits[i] == limits[j] and combo[i] >= combo[j]:
                    valid = False
        if not valid:
            continue
        theta = grid[list(combo)]
        value = model.fit(theta)
        if value > best_fit:
            best, best_fit = theta, value
    return best


def ap_initialization(
    model: ProjectionModel,
    grid: np.ndarray,
    limits: Sequence[Tuple[float, float]],
    guard: float
) -> Optional[np.ndarray]:
    """
    Alternating projection initialization.

    Sources are found one at a time; each search is restricted to the
    source limits minus a guard band around the sources already found.

    Returns
    -------
    np.ndarray or None
        One angle per source, or None when a search region is empty.
    """
    grid = np.asarray(grid, dtype=np.float64)
    found: List[float] = []
    for lim in limits:
        mask = _in_limits(grid, lim)
        for prev in found:
            mask &= ~((grid >= prev - guard) & (grid <= prev + guard))
        search = grid[mask]
        if search.size == 0:
            return None
        score = model.scan(search, found)
        found.append(_quadratic_peak(search, score, int(np.argmax(score))))
    return np.array(found)


def music_initialization(
    noise: np.ndarray,
    manifold: Manifold,
    grid: np.ndarray,
    limits: Sequence[Tuple[float, float]],
    guard: float
) -> Optional[np.ndarray]:
    """Greedy MUSIC pseudo-spectrum peaks, one per source, guard separated."""
    grid = np.asarray(grid, dtype=np.float64)
    proj = np.sum(np.abs(noise.conj().T @ manifold(grid)) ** 2, axis=0)
    with np.errstate(divide='ignore'):
        spectrum = 1.0 / proj
    found: List[float] = []
    for lim in limits:
        mask = _in_limits(grid, lim)
        for prev in found:
            mask &= ~((grid >= prev - guard) & (grid <= prev + guard))
        if not np.any(mask):
            return None
        idxs = np.flatnonzero(mask)
        found.append(float(grid[idxs[int(np.argmax(spectrum[idxs]))]]))
    return np.array(found)


# ===================================================================
# Optimization
# ===================================================================

@dataclass
class DoaSolution:
    """
    Optimizer result for one pixel.

    Attributes
    ----------
    theta : np.ndarray
        Angles in radians, sorted ascending.
    cost : float
        Cost at the optimum.
    hessian : np.ndarray
        Cost Hessian diagonal at the optimum, ordered like ``theta``.
    """
    theta: np.ndarray
    cost: float
    hessian: np.ndarray


def _separation(theta: np.ndarray, guard: float) -> np.ndarray:
    pairs = [(theta[j] - theta[i]) ** 2 - guard ** 2
             for i in range(theta.size) for j in range(i + 1, theta.size)]
    return np.array(pairs)


def hessian_diagonal(
    cost: Callable[[np.ndarray], float],
    theta: np.ndarray,
    step: float = HESSIAN_STEP
) -> np.ndarray:
    """Central difference second derivative along each angle."""
    center = cost(theta)
    diag = np.empty(theta.size)
    for idx in range(theta.size):
        delta = np.zeros(theta.size)
        delta[idx] = step
        diag[idx] = (cost(theta + delta) - 2 * center + cost(theta - delta)) / step ** 2
    return diag


def minimize_doa(
    cost: Callable[[np.ndarray], float],
    theta0: np.ndarray,
    lower: np.ndarray,
    upper: np.ndarray,
    guard: float,
    ftol: float = 1e-10,
    max_iter: int = 200
) -> Optional[DoaSolution]:
    """
    Bounded, guard-constrained minimization of a DOA cost.

    Parameters
    ----------
    cost : callable
        ``cost(theta) -> float``.
    theta0 : np.ndarray
        Initial angles.
    lower, upper : np.ndarray
        Per-source bounds.
    guard : float
        Minimum pairwise separation in radians.
    ftol : float
        SLSQP function tolerance.
    max_iter : int
        SLSQP iteration limit.

    Returns
    -------
    DoaSolution or None
        None when the bounds collide or the optimizer returns a
        non-finite or infeasible point.
    """
    lower = np.asarray(lower, dtype=np.float64)
    upper = np.asarray(upper, dtype=np.float64)
    if np.any(lower > upper):
        logger.debug("DOA lower bound exceeds upper bound: %s > %s", lower, upper)
        return None
    x0 = np.clip(np.asarray(theta0, dtype=np.float64), lower, upper)
    constraints = []
    if x0.size > 1:
        constraints.append({'type': 'ineq', 'fun': lambda t: _separation(t, guard)})

    result = minimize(
        cost, x0,
        method='SLSQP',
        bounds=list(zip(lower, upper)),
        constraints=constraints,
        options={'ftol': ftol, 'maxiter': max_iter},
    )
    theta = result.x
    if not (np.all(np.isfinite(theta)) and np.isfinite(result.fun)):
        logger.debug("DOA optimizer returned a non-finite solution: %s", result.message)
        return None
    if np.any(theta < lower - FEASIBILITY_TOL) or np.any(theta > upper + FEASIBILITY_TOL):
        logger.debug("DOA optimizer left the bounds: %s", theta)
        return None
    if theta.size > 1 and np.any(np.abs(np.diff(np.sort(theta))) < guard - FEASIBILITY_TOL):
        logger.debug("DOA optimizer violated the separation guard: %s", theta)
        return None
    if not result.success:
        logger.debug("DOA optimizer stopped early: %s", result.message)

    theta = np.clip(theta, lower, upper)
    hessian = hessian_diagonal(cost, theta)
    order = np.argsort(theta)
    return DoaSolution(theta=theta[order], cost=float(cost(theta)), hessian=hessian[order])


def estimate_doa(
    cost: Callable[[np.ndarray], float],
    initializer: Callable[[Sequence[Tuple[float, float]]], Optional[np.ndarray]],
    init_limits: Sequence[Tuple[float, float]],
    limits: Sequence[Tuple[float, float]],
    guard: float,
    ftol: float = 1e-10,
    max_iter: int = 200
) -> Optional[DoaSolution]:
    """Initialize within *init_limits*, then optimize within *limits*."""
    theta0 = initializer(init_limits)
    if theta0 is None:
        logger.debug("DOA initialization found no valid starting point")
        return None
    lower = np.array([lim[0] for lim in limits])
    upper = np.array([lim[1] for lim in limits])
    return minimize_doa(cost, theta0, lower, upper, guard, ftol, max_iter)


# ===================================================================
# Power Estimation
# ===================================================================

def estimate_powers(snapshots: np.ndarray, steering: np.ndarray) -> np.ndarray:
    """Mean power of the pseudo-inverse source estimates ``pinv(A) x``."""
    sources = np.linalg.pinv(steering) @ snapshots
    return np.mean(np.abs(sources) ** 2, axis=1)


def wbmle_powers(
    snapshots: np.ndarray,
    theta: np.ndarray,
    manifolds: Sequence[Manifold]
) -> np.ndarray:
    """Pseudo-inverse source powers summed over the subband manifolds."""
    return sum(estimate_powers(snapshots, manifold(theta)) for manifold in manifolds)


def dcm_powers(
    data: np.ndarray,
    bins: np.ndarray,
    lines: np.ndarray,
    reg_bins: np.ndarray,
    theta: np.ndarray,
    fc: float,
    fs: float,
    y_pos: np.ndarray,
    z_pos: np.ndarray
) -> np.ndarray:
    """
    Source powers after sinc registration of every channel.

    For each source the channels are delay-registered with a
    Hamming-tapered sinc interpolator over *reg_bins* and combined with
    the matching row of ``pinv(exp(1j*2*pi*fc*tau))``. Interpolator taps
    falling outside the data are dropped.

    Parameters
    ----------
    data : np.ndarray
        Complex cube (Nt, Nx, Na, Nb, Nc).
    bins, lines : np.ndarray
        Absolute fast-time and slow-time indices of the neighborhood.
    reg_bins : np.ndarray
        Integer registration taps about each bin.
    theta : np.ndarray
        Source angles in radians.
    fc, fs : float
        Carrier and sampling frequency in Hz.
    y_pos, z_pos : np.ndarray
        Phase centers, shape (Nc,).

    Returns
    -------
    np.ndarray
        Power per source.
    """
    nt, nc = data.shape[0], data.shape[4]
    tau = two_way_delays(theta, y_pos, z_pos)
    weights = np.linalg.pinv(np.exp(2j * np.pi * fc * tau))
    taper = np.hamming(len(reg_bins))
    powers = np.empty(theta.size)
    for src in range(theta.size):
        registered = []
        for bin_ in bins:
            taps = bin_ + reg_bins
            valid = (taps >= 0) & (taps < nt)
            block = data[np.ix_(taps[valid], lines)].reshape(int(valid.sum()), -1, nc)
            interp = np.sinc(tau[:, src][np.newaxis, :] * fs + reg_bins[valid][:, np.newaxis])
            interp = interp * taper[valid][:, np.newaxis]
            registered.append(np.einsum('tc,tsc->cs', interp, block))
        registered = np.concatenate(registered, axis=1)
        powers[src] = np.mean(np.abs(weights[src] @ registered) ** 2)
    return powers


# ===================================================================
# Assignment
# ===================================================================

def side_buckets(theta: np.ndarray) -> np.ndarray:
    """Bucket index per angle: 0 for negative angles, 1 for zero or positive."""
    return np.where(np.asarray(theta) < 0, 0, 1)


__all__ = [
    "LAYER_TABLE_DOA",
    "constraint_center",
    "constraint_limits",
    "ProjectionModel",
    "music_doa_cost",
    "narrowband_manifold",
    "space_time_manifold",
    "subband_manifolds",
    "grid_initialization",
    "ap_initialization",
    "music_initialization",
    "DoaSolution",
    "hessian_diagonal",
    "minimize_doa",
    "estimate_doa",
    "estimate_powers",
    "wbmle_powers",
    "dcm_powers",
    "side_buckets",
]
