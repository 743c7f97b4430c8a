# -*- coding: utf-8 -*-
"""
Sequential MLE - Range-bin to range-bin DOA tracking.

Along one range line, the DOAs found at the previous output bin are
carried forward with a flat-earth model: a scatterer seen at angle
``theta`` and delay ``t0`` is seen at ``sign(theta)*acos(t0/t*cos(theta))``
at delay ``t``. The extrapolated change per bin ``delta`` sets both a
one-sided search interval and the mean and variance of a Gaussian prior
that is added to the MLE cost.

Two tracks are kept, one on each side of nadir. The state is created
per range line by the driver and threaded through every bin of that line;
no state is shared between lines.

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
from dataclasses import dataclass, field
from typing import Callable, Optional

# Third-party
import numpy as np

# Internal
from grdl_arrayproc.utils.constants import DEG_TO_RAD

#: Initial track angles, just either side of nadir (radians)
INITIAL_DOA = np.array([-0.1, 0.1]) * DEG_TO_RAD

#: Bound width in units of the per-bin extrapolated change
BOUND_SPREAD = 2.0

#: Lower limit of the prior standard deviation (radians)
MIN_PRIOR_STD = 0.1 * DEG_TO_RAD


def flat_earth_doa(theta: np.ndarray, sign: np.ndarray, t_ref: float, t: float) -> np.ndarray:
    """
    Extrapolate angles seen at delay *t_ref* to delay *t* over a flat surface.

    NaN when *t* is not positive.
    """
    if t <= 0:
        return np.full(np.shape(theta), np.nan)
    ratio = np.clip((t_ref / t) * np.cos(theta), -1.0, 1.0)
    return sign * np.arccos(ratio)


@dataclass
class SequentialBounds:
    """
    Search interval and Gaussian prior for every track at one bin.

    Index 0 is the track left of the reference angle (negative), index 1
    the track at or right of it.
    """
    lower: np.ndarray
    upper: np.ndarray
    mean: np.ndarray
    var: np.ndarray
    flat_curr: np.ndarray

    def prior_cost(self, theta: np.ndarray, tracks: np.ndarray, weight: float) -> float:
        """Gaussian negative log prior of *theta* for the selected *tracks*."""
        dev = theta - self.mean[tracks]
        return weight * float(np.sum(dev ** 2 / (2.0 * self.var[tracks])))


@dataclass
class SequentialState:
    """
    Track state along one range line.

    Attributes
    ----------
    prev_doa : np.ndarray
        Last accepted (or extrapolated) angle of each track, sorted.
    prev_time : float, optional
        Delay of the previous processed bin. None before the first bin.
    guard : float
        Minimum angle change imposed between consecutive bins (radians).
    ref_doa : float
        Angle that separates the two tracks.
    """
    guard: float
    prev_doa: np.ndarray = field(default_factory=lambda: INITIAL_DOA.copy())
    prev_time: Optional[float] = None
    ref_doa: float = 0.0

    @property
    def first(self) -> bool:
        return self.prev_time is None

    def bounds(self, t_curr: float, t_next: float) -> SequentialBounds:
        """
        Bounds and prior at the bin with delay *t_curr*.

        Parameters
        ----------
        t_curr : float
            Delay of the current bin.
        t_next : float
            Delay of the next output bin (extrapolated at the line end).

        Returns
        -------
        SequentialBounds
        """
        tmp = np.sort(self.prev_doa)
        sign = np.where(tmp < self.ref_doa, -1.0, 1.0)
        if self.first:
            flat_curr = tmp.copy()
            flat_next = flat_earth_doa(tmp, sign, t_curr, t_next)
        else:
            flat_curr = flat_earth_doa(tmp, sign, self.prev_time, t_curr)
            flat_next = flat_earth_doa(tmp, sign, self.prev_time, t_next)
        delta = flat_next - flat_curr

        lower = np.empty(tmp.size)
        upper = np.empty(tmp.size)
        mean = np.empty(tmp.size)
        step = 0.0 if self.first else self.guard
        for idx in range(tmp.size):
            if sign[idx] < 0:
                upper[idx] = tmp[idx] - step
                mean[idx] = upper[idx] + delta[idx]
                lower[idx] = mean[idx] + BOUND_SPREAD * delta[idx]
                upper[idx] = min(upper[idx], self.ref_doa)
            else:
                lower[idx] = tmp[idx] + step
                mean[idx] = lower[idx] + delta[idx]
                upper[idx] = mean[idx] + BOUND_SPREAD * delta[idx]
                lower[idx] = max(lower[idx], self.ref_doa)
        var = np.maximum(delta ** 2, MIN_PRIOR_STD ** 2)
        return SequentialBounds(lower=lower, upper=upper, mean=mean, var=var,
                                flat_curr=flat_curr)

    def update(self, t_curr: float, bounds: SequentialBounds,
               doa: np.ndarray, tracks: np.ndarray) -> None:
        """
        Advance the tracks past the current bin.

        Tracks without a finite estimate fall back to the flat-earth
        extrapolation.
        """
        new = bounds.flat_curr.copy()
        for value, track in zip(np.atleast_1d(doa), np.atleast_1d(tracks)):
            if np.isfinite(value):
                new[track] = value
        self.prev_doa = np.sort(new)
        self.prev_time = t_curr


def sequential_tracks(nsrc: int) -> list:
    """
    Track selections tried at one bin.

    Two sources use both tracks at once; a single source is tried on each
    track and the lower cost wins.
    """
    if nsrc == 2:
        return [np.array([0, 1])]
    return [np.array([0]), np.array([1])]


def with_prior(
    cost: Callable[[np.ndarray], float],
    bounds: SequentialBounds,
    tracks: np.ndarray,
    weight: float
) -> Callable[[np.ndarray], float]:
    """Cost plus the Gaussian prior of the selected tracks."""
    return lambda theta: cost(theta) + bounds.prior_cost(np.sort(theta), tracks, weight)


__all__ = [
    "INITIAL_DOA",
    "flat_earth_doa",
    "SequentialBounds",
    "SequentialState",
    "sequential_tracks",
    "with_prior",
]
