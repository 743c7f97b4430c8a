# -*- coding: utf-8 -*-
"""
Array Processing Configuration - Method tags, DOA constraints and the
resolved, read-only configuration record.

``resolve_config`` is the single place where user parameters are defaulted
and validated. It runs once per invocation, before any data is touched, and
returns a frozen ``ArrayConfig`` that the estimators only read. All
configuration errors surface here as ``grdl.exceptions.ValidationError``;
selecting a disabled estimator raises ``grdl.exceptions.ProcessorError``.

Angles are given in degrees by the caller and stored in radians.

Dependencies
------------
numpy - Array operations
scipy.signal.windows - Channel taper windows

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
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Sequence, Tuple, Union

# Third-party
import numpy as np
from scipy.signal import windows as signal_windows

# GRDL
from grdl.exceptions import ProcessorError, ValidationError

# Internal
from grdl_arrayproc.geometry.steering import theta_grid
from grdl_arrayproc.utils.constants import DEG_TO_RAD, ER_ICE

logger = logging.getLogger(__name__)


# ===================================================================
# Enumerations
# ===================================================================

class ArrayMethod(str, Enum):
    """Array processing estimator families."""
    STANDARD = "standard"
    MVDR = "mvdr"
    MVDR_ROBUST = "mvdr_robust"
    MUSIC = "music"
    EIG = "eig"
    RISR = "risr"
    GEONULL = "geonull"
    MUSIC_DOA = "music_doa"
    MLE = "mle"
    DCM = "dcm"
    WBMLE = "wbmle"

    @classmethod
    def from_name(cls, name: Union[str, 'ArrayMethod']) -> 'ArrayMethod':
        """Convert a method name (or alias) to an ``ArrayMethod``."""
        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            raise ValidationError(
                f"method must be a string or ArrayMethod, got {type(name).__name__}"
            )
        key = name.strip().lower()
        key = _METHOD_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValidationError(
                f"Invalid method {name!r}. Choose from: "
                f"{', '.join(m.value for m in cls)}"
            ) from None

    @property
    def is_doa(self) -> bool:
        """Whether the method is a parametric direction of arrival estimator."""
        return self in _DOA_METHODS

    @property
    def is_wideband(self) -> bool:
        """Whether the method stacks a space-frequency covariance."""
        return self in (ArrayMethod.DCM, ArrayMethod.WBMLE)


_METHOD_ALIASES = {
    'period': 'standard',
    'periodogram': 'standard',
    'wbdcm': 'dcm',
}

#: Every accepted method name, aliases included
METHOD_NAMES = tuple(m.value for m in ArrayMethod) + tuple(_METHOD_ALIASES)

_DOA_METHODS = frozenset({
    ArrayMethod.MUSIC_DOA,
    ArrayMethod.MLE,
    ArrayMethod.DCM,
    ArrayMethod.WBMLE,
})

_DISABLED_METHODS = frozenset({ArrayMethod.EIG, ArrayMethod.GEONULL})


class ConstraintMethod(str, Enum):
    """How the DOA search bounds of one source are centered."""
    FIXED = "fixed"
    SURFACE_LEFT = "surface-left"
    SURFACE_RIGHT = "surface-right"
    LAYER_LEFT = "layer-left"
    LAYER_RIGHT = "layer-right"

    @classmethod
    def from_name(cls, name: Union[str, 'ConstraintMethod']) -> 'ConstraintMethod':
        """Convert a constraint name (or alias) to a ``ConstraintMethod``."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        key = _CONSTRAINT_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValidationError(
                f"Invalid DOA constraint method {name!r}. Choose from: "
                f"{', '.join(m.value for m in cls)}"
            ) from None

    @property
    def is_surface(self) -> bool:
        return self in (ConstraintMethod.SURFACE_LEFT, ConstraintMethod.SURFACE_RIGHT)

    @property
    def is_layer(self) -> bool:
        return self in (ConstraintMethod.LAYER_LEFT, ConstraintMethod.LAYER_RIGHT)


_CONSTRAINT_ALIASES = {
    'surfleft': 'surface-left',
    'surfright': 'surface-right',
    'layerleft': 'layer-left',
    'layerright': 'layer-right',
}

#: Model order estimation criteria, in the order results are reported.
MOE_CRITERIA = ('NT', 'AIC', 'HQ', 'MDL', 'AICc', 'KICvc', 'WIC')


# ===================================================================
# Configuration Records
# ===================================================================

@dataclass(frozen=True)
class DoaConstraint:
    """
    Search bounds for one DOA source.

    Attributes
    ----------
    method : ConstraintMethod
        How the bounds are centered for each pixel.
    init_src_limits : tuple of float
        ``(min, max)`` initialization bounds in radians, relative to the
        constraint center.
    src_limits : tuple of float
        ``(min, max)`` optimization bounds in radians, relative to the
        constraint center.
    layer_twtt : np.ndarray, optional
        Two-way travel time to the layer for each range line (layer
        constraints only).
    er : float
        Relative permittivity used to refract into the layer.
    """
    method: ConstraintMethod = ConstraintMethod.FIXED
    init_src_limits: Tuple[float, float] = (-np.pi / 2, np.pi / 2)
    src_limits: Tuple[float, float] = (-np.pi / 2, np.pi / 2)
    layer_twtt: Optional[np.ndarray] = None
    er: float = ER_ICE

    def __post_init__(self):
        """Validate bounds and coerce the method tag."""
        object.__setattr__(self, 'method', ConstraintMethod.from_name(self.method))
        for name in ('init_src_limits', 'src_limits'):
            limits = tuple(float(v) for v in getattr(self, name))
            if len(limits) != 2 or limits[0] > limits[1]:
                raise ValidationError(
                    f"{name} must be (min, max) with min <= max, got {limits}"
                )
            object.__setattr__(self, name, limits)
        if self.method.is_layer and self.layer_twtt is None:
            raise ValidationError(
                f"DOA constraint '{self.method.value}' requires layer_twtt"
            )
        if self.er <= 0:
            raise ValidationError(f"er must be positive, got {self.er}")

    @classmethod
    def from_degrees(
        cls,
        method: Union[str, ConstraintMethod] = ConstraintMethod.FIXED,
        init_src_limits: Sequence[float] = (-90.0, 90.0),
        src_limits: Sequence[float] = (-90.0, 90.0),
        layer_twtt: Optional[np.ndarray] = None,
        er: float = ER_ICE
    ) -> 'DoaConstraint':
        """Build a constraint from limits given in degrees."""
        return cls(
            method=method,
            init_src_limits=tuple(np.asarray(init_src_limits, dtype=float) * DEG_TO_RAD),
            src_limits=tuple(np.asarray(src_limits, dtype=float) * DEG_TO_RAD),
            layer_twtt=None if layer_twtt is None else np.asarray(layer_twtt, dtype=float),
            er=er,
        )


@dataclass(frozen=True)
class ImpulseResponse:
    """Fast-time impulse response, main lobe centered on zero time."""
    vals: np.ndarray
    time_vec: np.ndarray

    def __post_init__(self):
        vals = np.asarray(self.vals).ravel()
        time_vec = np.asarray(self.time_vec, dtype=np.float64).ravel()
        if vals.shape != time_vec.shape or vals.size < 2:
            raise ValidationError(
                f"imp_resp vals and time_vec must have the same length >= 2, "
                f"got {vals.shape} and {time_vec.shape}"
            )
        object.__setattr__(self, 'vals', vals.astype(np.complex128))
        object.__setattr__(self, 'time_vec', time_vec)


@dataclass(frozen=True)
class BinRestriction:
    """First and last range bin to process on every range line."""
    start_bin: np.ndarray
    stop_bin: np.ndarray

    def __post_init__(self):
        start = np.asarray(self.start_bin, dtype=np.float64).ravel()
        stop = np.asarray(self.stop_bin, dtype=np.float64).ravel()
        if start.shape != stop.shape:
            raise ValidationError(
                f"bin_restriction start_bin and stop_bin must have the same "
                f"length, got {start.shape} and {stop.shape}"
            )
        object.__setattr__(self, 'start_bin', start)
        object.__setattr__(self, 'stop_bin', stop)


# ===================================================================
# Method Parameters
# ===================================================================

@dataclass(frozen=True)
class PeriodogramParams:
    """Periodogram: channel taper, normalized to unit sum."""
    window: np.ndarray


@dataclass(frozen=True)
class MvdrParams:
    """MVDR: diagonal loading factor."""
    diag_load: float = 0.0


@dataclass(frozen=True)
class RobustMvdrParams:
    """Robust MVDR: Frobenius norm fraction removed along the diagonal."""
    fraction: float = 0.12


@dataclass(frozen=True)
class MusicParams:
    """MUSIC: number of signal eigenvectors."""
    nsrc: int = 1


@dataclass(frozen=True)
class RisrParams:
    """RISR: fixed iteration count."""
    iterations: int = 15


@dataclass(frozen=True)
class WidebandParams:
    """
    Space-frequency stacking of the wideband DOA methods.

    ``imp_resp`` and ``reg_bins`` are only used by DCM.
    """
    nsubband: int
    fs: float
    imp_resp: Optional[ImpulseResponse] = None
    reg_bins: np.ndarray = field(default_factory=lambda: np.arange(-5, 6))


@dataclass(frozen=True)
class DoaParams:
    """
    Parametric DOA estimation.

    Attributes
    ----------
    nsrc : int
        Number of sources (maximum under model order estimation).
    constraints : tuple of DoaConstraint
        Per-source bounds.
    init : str
        ``'grid'`` or ``'ap'``.
    theta_guard : float
        Minimum source separation in radians.
    seq : bool
        Sequential MLE along range.
    side_buckets : bool
        Tomography by side of nadir instead of by source index.
    moe_en, moe_simulator_en : bool
        Model order estimation, and retention of every criterion.
    moe_methods : tuple of str
        Criteria whose maximum sets the model order.
    moe_penalty_nt : float
        Eigenvalue threshold of the ``NT`` criterion.
    nsrc_true : np.ndarray, optional
        Source count oracle per output pixel.
    ftol, max_iter
        SLSQP tolerance and iteration limit.
    wideband : WidebandParams, optional
        Present for DCM and wideband MLE.
    """
    nsrc: int
    constraints: Tuple[DoaConstraint, ...]
    init: str = 'grid'
    theta_guard: float = 1.5 * DEG_TO_RAD
    seq: bool = False
    side_buckets: bool = False
    moe_en: bool = False
    moe_simulator_en: bool = False
    moe_methods: Tuple[str, ...] = ('MDL',)
    moe_penalty_nt: float = 10.0
    nsrc_true: Optional[np.ndarray] = None
    ftol: float = 1e-10
    max_iter: int = 200
    wideband: Optional[WidebandParams] = None


MethodParams = Union[PeriodogramParams, MvdrParams, RobustMvdrParams,
                     MusicParams, RisrParams, DoaParams]

_PARAMS_TYPES = {
    ArrayMethod.STANDARD: PeriodogramParams,
    ArrayMethod.MVDR: MvdrParams,
    ArrayMethod.MVDR_ROBUST: RobustMvdrParams,
    ArrayMethod.MUSIC: MusicParams,
    ArrayMethod.RISR: RisrParams,
    ArrayMethod.MUSIC_DOA: DoaParams,
    ArrayMethod.MLE: DoaParams,
    ArrayMethod.DCM: DoaParams,
    ArrayMethod.WBMLE: DoaParams,
}


@dataclass(frozen=True)
class ArrayConfig:
    """
    Fully resolved array processing configuration.

    Built by :func:`resolve_config`; read-only afterwards. Angles are in
    radians, bins and lines are zero-based indices into the data cube.
    ``params`` carries only what the selected ``method`` needs, see
    :class:`PeriodogramParams`, :class:`MvdrParams`,
    :class:`RobustMvdrParams`, :class:`MusicParams`, :class:`RisrParams`
    and :class:`DoaParams`.
    """
    method: ArrayMethod
    params: MethodParams
    shape: Tuple[int, int, int, int, int]
    n_multilook: int
    fc: float
    bin_rng: np.ndarray
    line_rng: np.ndarray
    dcm_bin_rng: np.ndarray
    dcm_line_rng: np.ndarray
    dbin: int
    dline: int
    bins: np.ndarray
    lines: np.ndarray
    theta: np.ndarray
    theta_rng: Tuple[float, float]
    tomo_en: bool
    chan_equal: Tuple[np.ndarray, ...]
    positions: Tuple[np.ndarray, ...]
    roll: Optional[np.ndarray] = None
    time: Optional[np.ndarray] = None
    surface: Optional[np.ndarray] = None
    bin_restriction: Optional[BinRestriction] = None

    def __post_init__(self):
        expected = _PARAMS_TYPES[self.method]
        if not isinstance(self.params, expected):
            raise ValidationError(
                f"Method '{self.method.value}' takes {expected.__name__}, "
                f"got {type(self.params).__name__}"
            )

    # -----------------------------------------------------------------
    # Derived quantities
    # -----------------------------------------------------------------
    @property
    def nt(self) -> int:
        return self.shape[0]

    @property
    def nx(self) -> int:
        return self.shape[1]

    @property
    def nc(self) -> int:
        return self.shape[4]

    @property
    def nsv(self) -> int:
        return len(self.theta)

    @property
    def nt_out(self) -> int:
        return len(self.bins)

    @property
    def nx_out(self) -> int:
        return len(self.lines)

    @property
    def dcm_ml_match(self) -> bool:
        """Whether the covariance and multilook neighborhoods coincide."""
        return (np.array_equal(self.bin_rng, self.dcm_bin_rng)
                and np.array_equal(self.line_rng, self.dcm_line_rng))

    @property
    def nsrc(self) -> int:
        """Number of sources of MUSIC and the DOA methods, else 0."""
        return getattr(self.params, 'nsrc', 0)

    @property
    def n_tomo_src(self) -> int:
        """Size of the source axis of DOA tomography outputs."""
        return 2 if getattr(self.params, 'side_buckets', False) else self.nsrc

    @property
    def image_sv_idxs(self) -> np.ndarray:
        """Steering vector indices that are searched to form the image."""
        idxs = np.flatnonzero((self.theta >= self.theta_rng[0])
                              & (self.theta <= self.theta_rng[1]))
        if idxs.size == 0:
            idxs = np.array([np.argmin(np.abs(self.theta - np.mean(self.theta_rng)))])
        return idxs

    def bin_mask(self, rline: int) -> np.ndarray:
        """Boolean mask over ``bins`` of the bins processed on *rline*."""
        if self.bin_restriction is None:
            return np.ones(self.nt_out, dtype=bool)
        return ((self.bins >= self.bin_restriction.start_bin[rline])
                & (self.bins <= self.bin_restriction.stop_bin[rline]))


# ===================================================================
# Resolver Helpers
# ===================================================================

def _symmetric_range(value: Any, name: str) -> np.ndarray:
    """Force a neighborhood range to be symmetric integers about zero."""
    half = np.max(np.abs(np.atleast_1d(np.asarray(value, dtype=np.float64))))
    if half % 1 != 0:
        raise ValidationError(f"{name} must only contain integers, got {value!r}")
    half = int(half)
    return np.arange(-half, half + 1)


def _round_half_away(value: float) -> int:
    """Round half away from zero."""
    return int(np.sign(value) * np.floor(np.abs(value) + 0.5))


def _hanning(n: int) -> np.ndarray:
    """Symmetric Hann window without the zero-valued end points."""
    return signal_windows.hann(n + 2)[1:-1]


def _resolve_window(window: Union[None, str, Callable[[int], np.ndarray]], nc: int) -> np.ndarray:
    """Channel taper, normalized to unit sum."""
    if window is None or (isinstance(window, str) and window.lower() in ('hanning', 'hann')):
        weights = _hanning(nc)
    elif isinstance(window, str):
        try:
            weights = signal_windows.get_window(window, nc, fftbins=False)
        except ValueError as exc:
            raise ValidationError(f"Unknown window {window!r}: {exc}") from exc
    elif callable(window):
        weights = np.asarray(window(nc), dtype=np.float64).ravel()
    else:
        raise ValidationError(
            f"window must be a name or a callable, got {type(window).__name__}"
        )
    if weights.shape != (nc,):
        raise ValidationError(f"window must have {nc} weights, got {weights.shape}")
    return weights / np.sum(weights)


def _per_multilook(value: Any, n_multilook: int, name: str) -> Tuple[np.ndarray, ...]:
    """Expand a single array to one entry per multilook."""
    if isinstance(value, np.ndarray):
        return (value,) * n_multilook
    items = tuple(np.asarray(v) for v in value)
    if len(items) == 1:
        return items * n_multilook
    if len(items) != n_multilook:
        raise ValidationError(
            f"{name} must have one entry per multilook ({n_multilook}), got {len(items)}"
        )
    return items


def _resolve_constraints(
    doa_constraints: Optional[Sequence[Union[DoaConstraint, Dict[str, Any]]]],
    nsrc: int
) -> Tuple[DoaConstraint, ...]:
    if not doa_constraints:
        return tuple(DoaConstraint() for _ in range(nsrc))
    resolved = []
    for item in doa_constraints:
        if isinstance(item, DoaConstraint):
            resolved.append(item)
        elif isinstance(item, dict):
            resolved.append(DoaConstraint.from_degrees(**item))
        else:
            raise ValidationError(
                f"doa_constraints entries must be DoaConstraint or dict, "
                f"got {type(item).__name__}"
            )
    if len(resolved) < nsrc:
        raise ValidationError(
            f"doa_constraints has {len(resolved)} entries but nsrc is {nsrc}"
        )
    return tuple(resolved)


def output_bins(nt: int, bin_rng: np.ndarray, dbin: int, nsubband: int = 1) -> np.ndarray:
    """
    Output range bins with full neighborhood support.

    Parameters
    ----------
    nt : int
        Number of fast-time samples.
    bin_rng : np.ndarray
        Symmetric range-bin neighborhood.
    dbin : int
        Output decimation.
    nsubband : int
        Number of subbands (odd).

    Returns
    -------
    np.ndarray
        Zero-based bin indices, dtype int.
    """
    half = int(np.max(bin_rng))
    guard = (nsubband - 1) // 2
    first = guard + half * nsubband
    last = nt - 1 - half * nsubband - guard
    return np.arange(first, last + 1, dbin, dtype=int)


def output_lines(
    nx: int,
    line_rng: np.ndarray,
    dline: int,
    lines: Optional[Sequence[int]] = None
) -> np.ndarray:
    """
    Output range lines.

    Defaults to the lines with full ``line_rng`` support. When *lines* is
    given, its first and last entries bound the output so that adjacent
    processing chunks stitch seamlessly.
    """
    if lines is None or len(lines) == 0:
        half = int(np.max(line_rng))
        return np.arange(half, nx - half, dline, dtype=int)
    first, last = int(lines[0]), int(lines[-1])
    if first < 0 or last > nx - 1:
        raise ValidationError(
            f"lines bounds ({first}, {last}) fall outside the data (0, {nx - 1})"
        )
    return np.arange(first, last + 1, dline, dtype=int)


# ===================================================================
# Resolver
# ===================================================================

def resolve_config(
    shape: Sequence[int],
    fc: Optional[float] = None,
    positions: Any = None,
    dline: Optional[int] = None,
    method: Union[str, ArrayMethod] = ArrayMethod.STANDARD,
    n_multilook: int = 1,
    bin_rng: Any = 0,
    line_rng: Any = 5,
    dbin: Optional[int] = None,
    dcm_bin_rng: Any = None,
    dcm_line_rng: Any = None,
    lines: Optional[Sequence[int]] = None,
    nsv: int = 1,
    theta: Optional[Sequence[float]] = None,
    theta_rng: Sequence[float] = (0.0, 0.0),
    nsrc: int = 1,
    diag_load: float = 0.0,
    doa_constraints: Optional[Sequence[Union[DoaConstraint, Dict[str, Any]]]] = None,
    doa_init: str = 'grid',
    doa_seq: bool = False,
    doa_theta_guard: float = 1.5,
    nsubband: int = 1,
    tomo_en: Optional[bool] = None,
    tomo_side_buckets: bool = False,
    window: Union[None, str, Callable[[int], np.ndarray]] = 'hanning',
    chan_equal: Any = None,
    roll: Any = None,
    moe_en: bool = False,
    moe_simulator_en: bool = False,
    moe_methods: Sequence[str] = ('MDL',),
    moe_penalty_nt: float = 10.0,
    fs: Optional[float] = None,
    time: Optional[np.ndarray] = None,
    surface: Optional[np.ndarray] = None,
    imp_resp: Union[None, ImpulseResponse, Dict[str, np.ndarray]] = None,
    reg_bins: Any = 5,
    bin_restriction: Union[None, BinRestriction, Dict[str, np.ndarray]] = None,
    nsrc_true: Optional[np.ndarray] = None,
    risr_iterations: int = 15,
) -> ArrayConfig:
    """
    Validate and default every array processing parameter.

    Parameters
    ----------
    shape : sequence of int
        Data cube shape ``(Nt, Nx, Na, Nb, Nc)``.
    fc : float
        Carrier frequency in Hz. Required.
    positions : np.ndarray or sequence of np.ndarray
        Phase centers per multilook, shape (2, Nc) or (2, Nc, Nx): row 0
        cross-track (positive left), row 1 elevation (positive up).
        Required.
    dline : int
        Output range-line decimation. Required.
    method : str or ArrayMethod
        Estimator family. Default ``'standard'`` (periodogram).
    n_multilook : int
        Number of data cubes that are averaged together.
    bin_rng, line_rng : int or sequence of int
        Neighborhood used for snapshots. Only the maximum magnitude is
        used; the range is made symmetric about zero. Defaults 0 and 5.
    dbin : int, optional
        Output range-bin decimation, default ``round(len(bin_rng)/2)``.
    dcm_bin_rng, dcm_line_rng : int or sequence of int, optional
        Neighborhood used for the data covariance matrix when it differs
        from the multilook neighborhood.
    lines : sequence of int, optional
        First and last output range line (overrides the default).
    nsv : int
        Number of steering vectors uniformly sampled in sine space.
    theta : sequence of float, optional
        Explicit steering angles in degrees; takes precedence over *nsv*.
    theta_rng : sequence of float
        ``(min, max)`` degrees searched when forming the output image.
    nsrc : int
        Number of sources (maximum when model order estimation is on).
    diag_load : float
        Diagonal loading factor for MVDR methods.
    doa_constraints : sequence of DoaConstraint or dict, optional
        Per-source bounds. Dicts are passed to
        :meth:`DoaConstraint.from_degrees`.
    doa_init : str
        ``'grid'`` (global grid search) or ``'ap'`` (alternating
        projection).
    doa_seq : bool
        Sequential MLE along range.
    doa_theta_guard : float
        Minimum source separation in degrees.
    nsubband : int
        Number of subbands for wideband methods (odd).
    tomo_en : bool, optional
        Keep the full tomography output. Defaults to true for DOA methods
        or when more than one steering vector is used.
    tomo_side_buckets : bool
        Store DOA tomography by side of nadir (left < 0, right >= 0)
        instead of by sorted source index.
    window : str or callable
        Channel taper for the periodogram.
    chan_equal : np.ndarray or sequence of np.ndarray, optional
        Complex channel equalization per multilook, default ones.
    roll : float or np.ndarray, optional
        Platform roll in degrees (scalar or per range line).
    moe_en, moe_simulator_en : bool
        Enable model order estimation / retain every criterion's result.
    moe_methods : sequence of str
        Criteria whose maximum sets the model order.
    moe_penalty_nt : float
        Eigenvalue ratio threshold of the ``NT`` criterion.
    fs : float, optional
        Sampling frequency (wideband methods).
    time : np.ndarray, optional
        Fast-time axis, shape (Nt,).
    surface : np.ndarray, optional
        Surface two-way travel time per range line, shape (Nx,).
    imp_resp : ImpulseResponse or dict, optional
        Fast-time impulse response (DCM method).
    reg_bins : int or sequence of int
        Sinc registration taps (DCM method).
    bin_restriction : BinRestriction or dict, optional
        Per-line start/stop bins.
    nsrc_true : np.ndarray, optional
        True number of sources per output pixel (simulation oracle).
    risr_iterations : int
        Fixed number of RISR iterations.

    Returns
    -------
    ArrayConfig

    Raises
    ------
    ValidationError
        If a parameter is invalid or a required field is missing.
    ProcessorError
        If a disabled estimator is selected.
    """
    shape = tuple(int(s) for s in shape)
    if len(shape) != 5:
        raise ValidationError(
            f"shape must be (Nt, Nx, Na, Nb, Nc), got {len(shape)} dimensions"
        )
    nt, nx, _, _, nc = shape

    method = ArrayMethod.from_name(method)
    if method in _DISABLED_METHODS:
        raise ProcessorError(f"Array method '{method.value}' is not supported")

    if fc is None:
        raise ValidationError("fc (carrier frequency) must be specified")
    if positions is None:
        raise ValidationError("positions (phase centers) must be specified")
    if dline is None:
        raise ValidationError("dline must be specified")
    if int(dline) != dline or dline < 1:
        raise ValidationError(f"dline must be a positive integer, got {dline!r}")
    if n_multilook < 1:
        raise ValidationError(f"n_multilook must be >= 1, got {n_multilook}")

    bin_rng = _symmetric_range(bin_rng, 'bin_rng')
    line_rng = _symmetric_range(line_rng, 'line_rng')
    dcm_bin_rng = bin_rng if dcm_bin_rng is None else _symmetric_range(dcm_bin_rng, 'dcm_bin_rng')
    dcm_line_rng = line_rng if dcm_line_rng is None else _symmetric_range(dcm_line_rng, 'dcm_line_rng')
    if dbin is None:
        dbin = _round_half_away(len(bin_rng) / 2)
    if int(dbin) != dbin or dbin < 1:
        raise ValidationError(f"dbin must be a positive integer, got {dbin!r}")

    if nsubband < 1 or nsubband % 2 == 0:
        raise ValidationError(f"nsubband must be a positive odd integer, got {nsubband}")
    if nsrc < 0:
        raise ValidationError(f"nsrc must be >= 0, got {nsrc}")
    if method == ArrayMethod.MUSIC and nsrc >= nc:
        raise ValidationError(
            f"MUSIC requires nsrc < number of channels ({nc}), got {nsrc}"
        )
    if diag_load < 0:
        raise ValidationError(f"diag_load must be >= 0, got {diag_load}")
    if doa_init not in ('grid', 'ap'):
        raise ValidationError(f"doa_init must be 'grid' or 'ap', got {doa_init!r}")
    if doa_theta_guard <= 0:
        raise ValidationError(f"doa_theta_guard must be positive, got {doa_theta_guard}")

    if theta is not None and len(theta) > 0:
        theta_rad = np.sort(np.asarray(theta, dtype=np.float64).ravel() * DEG_TO_RAD)
    else:
        theta_rad = theta_grid(int(nsv))
    theta_rng = tuple(float(v) * DEG_TO_RAD for v in theta_rng)
    if len(theta_rng) != 2 or theta_rng[0] > theta_rng[1]:
        raise ValidationError(f"theta_rng must be (min, max), got {theta_rng}")

    if tomo_en is None:
        tomo_en = method.is_doa or len(theta_rad) > 1
    if moe_simulator_en:
        moe_en = True
    moe_methods = tuple(moe_methods)
    for name in moe_methods:
        if name not in MOE_CRITERIA:
            raise ValidationError(
                f"Unknown model order criterion {name!r}. Choose from: "
                f"{', '.join(MOE_CRITERIA)}"
            )

    constraints = _resolve_constraints(doa_constraints, nsrc)

    time = None if time is None else np.asarray(time, dtype=np.float64).ravel()
    surface = None if surface is None else np.asarray(surface, dtype=np.float64).ravel()
    if time is not None and time.size != nt:
        raise ValidationError(f"time must have Nt={nt} samples, got {time.size}")
    if surface is not None and surface.size != nx:
        raise ValidationError(f"surface must have Nx={nx} samples, got {surface.size}")
    if method.is_doa and any(c.method != ConstraintMethod.FIXED for c in constraints[:nsrc]):
        if time is None or surface is None:
            raise ValidationError(
                "surface and layer DOA constraints require time and surface"
            )
    if doa_seq:
        if method != ArrayMethod.MLE:
            raise ValidationError("doa_seq is only supported with the 'mle' method")
        if nsrc not in (1, 2):
            raise ValidationError(f"doa_seq supports nsrc of 1 or 2, got {nsrc}")
        if time is None:
            raise ValidationError("doa_seq requires the fast-time axis (time)")
    if tomo_side_buckets and nsrc > 2:
        raise ValidationError("tomo_side_buckets supports at most 2 sources")

    if isinstance(imp_resp, dict):
        imp_resp = ImpulseResponse(**imp_resp)
    if method == ArrayMethod.DCM:
        if fs is None or imp_resp is None:
            raise ValidationError("The 'dcm' method requires fs and imp_resp")
    if method == ArrayMethod.WBMLE:
        if fs is None:
            raise ValidationError("The 'wbmle' method requires fs")
        if len(bin_rng) < nsubband:
            raise ValidationError(
                f"len(bin_rng) ({len(bin_rng)}) must be >= nsubband ({nsubband}) "
                f"for the 'wbmle' method"
            )

    chan_equal = (np.ones(nc, dtype=np.complex128),) * n_multilook \
        if chan_equal is None else _per_multilook(chan_equal, n_multilook, 'chan_equal')
    for weights in chan_equal:
        if weights.size != nc:
            raise ValidationError(f"chan_equal must have {nc} weights, got {weights.size}")
    positions = _per_multilook(positions, n_multilook, 'positions')
    for pos in positions:
        if pos.shape[:2] != (2, nc) or pos.ndim not in (2, 3):
            raise ValidationError(
                f"positions must have shape (2, {nc}) or (2, {nc}, {nx}), got {pos.shape}"
            )
        if pos.ndim == 3 and pos.shape[2] != nx:
            raise ValidationError(
                f"positions must have {nx} range lines, got {pos.shape[2]}"
            )
    if roll is not None:
        roll = np.broadcast_to(np.asarray(roll, dtype=np.float64) * DEG_TO_RAD, (nx,)).copy()

    if isinstance(bin_restriction, dict):
        bin_restriction = BinRestriction(**bin_restriction)
    if bin_restriction is not None and bin_restriction.start_bin.size != nx:
        raise ValidationError(
            f"bin_restriction must have Nx={nx} entries, got {bin_restriction.start_bin.size}"
        )

    bins = output_bins(nt, bin_rng, int(dbin), nsubband if method.is_wideband else 1)
    out_lines = output_lines(nx, line_rng, int(dline), lines)
    if nsrc_true is not None:
        nsrc_true = np.asarray(nsrc_true)
        if nsrc_true.shape != (len(bins), len(out_lines)):
            raise ValidationError(
                f"nsrc_true must have shape {(len(bins), len(out_lines))}, "
                f"got {nsrc_true.shape}"
            )

    if method == ArrayMethod.STANDARD:
        params = PeriodogramParams(window=_resolve_window(window, nc))
    elif method == ArrayMethod.MVDR:
        params = MvdrParams(diag_load=float(diag_load))
    elif method == ArrayMethod.MVDR_ROBUST:
        params = RobustMvdrParams()
    elif method == ArrayMethod.MUSIC:
        params = MusicParams(nsrc=int(nsrc))
    elif method == ArrayMethod.RISR:
        params = RisrParams(iterations=int(risr_iterations))
    else:
        wideband = None
        if method.is_wideband:
            wideband = WidebandParams(
                nsubband=int(nsubband),
                fs=float(fs),
                imp_resp=imp_resp,
                reg_bins=_symmetric_range(reg_bins, 'reg_bins'),
            )
        params = DoaParams(
            nsrc=int(nsrc),
            constraints=constraints,
            init=doa_init,
            theta_guard=float(doa_theta_guard) * DEG_TO_RAD,
            seq=bool(doa_seq),
            side_buckets=bool(tomo_side_buckets),
            moe_en=bool(moe_en),
            moe_simulator_en=bool(moe_simulator_en),
            moe_methods=moe_methods,
            moe_penalty_nt=float(moe_penalty_nt),
            nsrc_true=nsrc_true,
            wideband=wideband,
        )

    config = ArrayConfig(
        method=method,
        params=params,
        shape=shape,
        n_multilook=int(n_multilook),
        fc=float(fc),
        bin_rng=bin_rng,
        line_rng=line_rng,
        dcm_bin_rng=dcm_bin_rng,
        dcm_line_rng=dcm_line_rng,
        dbin=int(dbin),
        dline=int(dline),
        bins=bins,
        lines=out_lines,
        theta=theta_rad,
        theta_rng=theta_rng,
        tomo_en=bool(tomo_en),
        chan_equal=chan_equal,
        positions=positions,
        roll=roll,
        time=time,
        surface=surface,
        bin_restriction=bin_restriction,
    )
    logger.debug(
        "Resolved %s configuration: %d output bins x %d output lines",
        method.value, config.nt_out, config.nx_out,
    )
    return config


__all__ = [
    "ArrayMethod",
    "METHOD_NAMES",
    "ConstraintMethod",
    "MOE_CRITERIA",
    "DoaConstraint",
    "ImpulseResponse",
    "BinRestriction",
    "PeriodogramParams",
    "MvdrParams",
    "RobustMvdrParams",
    "MusicParams",
    "RisrParams",
    "WidebandParams",
    "DoaParams",
    "MethodParams",
    "ArrayConfig",
    "output_bins",
    "output_lines",
    "resolve_config",
]
