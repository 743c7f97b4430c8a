# -*- coding: utf-8 -*-
"""
Array Processing - Pixel/line driver for beamforming and DOA estimation.

Walks the output range lines and range bins of a 5-D complex data cube
``(Nt, Nx, Na, Nb, Nc)`` (fast time, slow time, subaperture, subband,
channel), extracts the clipped neighborhood of every pixel, dispatches to
the configured estimator and writes into output arrays that are allocated
once and NaN filled. A pixel that cannot be estimated stays NaN; a
configuration error aborts before any pixel is processed.

Beamforming methods (periodogram, MVDR, robust MVDR, MUSIC, RISR) combine
their spectra over multilooks and keep the maximum inside ``theta_rng`` as
the image value. DOA methods (MUSIC-DOA, MLE, DCM, wideband MLE) estimate
``nsrc`` angles per pixel from the first multilook and keep the strongest
source power as the image value.

Dependencies
------------
numpy - Array operations
scipy - Window functions, eigen solvers and SLSQP (through the estimators)

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
from typing import Annotated, Any, Callable, Dict, List, Optional, Sequence, Union

# Third-party
import numpy as np

# GRDL
from grdl.exceptions import ValidationError
from grdl.image_processing.base import ImageProcessor
from grdl.image_processing.params import Desc, Options, Range
from grdl.image_processing.versioning import processor_tags, processor_version
from grdl.vocabulary import ImageModality, ProcessorCategory

# Internal
from grdl_arrayproc.geometry.steering import line_positions, steering_vectors, theta_grid
from grdl_arrayproc.processing.beamforming import (
    music_projection,
    mvdr_response,
    mvdr_two_stage,
    noise_subspace,
    periodogram,
    risr,
    robust_mvdr,
    select_image_value,
)
from grdl_arrayproc.processing.config import (
    ArrayConfig,
    ArrayMethod,
    METHOD_NAMES,
    MOE_CRITERIA,
    resolve_config,
)
from grdl_arrayproc.processing.doa import (
    DoaSolution,
    ProjectionModel,
    ap_initialization,
    constraint_center,
    constraint_limits,
    dcm_powers,
    estimate_doa,
    estimate_powers,
    grid_initialization,
    music_doa_cost,
    music_initialization,
    narrowband_manifold,
    side_buckets,
    space_time_manifold,
    subband_manifolds,
    wbmle_powers,
)
from grdl_arrayproc.processing.model_order import estimate_model_order
from grdl_arrayproc.processing.sequential import (
    SequentialState,
    sequential_tracks,
    with_prior,
)
from grdl_arrayproc.processing.snapshots import (
    clip_range,
    equalize_channels,
    extract_snapshots,
    sample_covariance,
    space_time_snapshots,
    subband_covariance,
    validate_cube,
)

logger = logging.getLogger(__name__)

#: Number of progress reports over one call
PROGRESS_STEPS = 10

#: Initialization grid size of DOA methods when a single steering vector is configured
DOA_INIT_GRID_SIZE = 128


# ===================================================================
# Output Records
# ===================================================================

@dataclass
class TomographyResult:
    """
    Full per-angle or per-source output.

    Beamforming methods fill ``img`` with the spectrum, shape
    (Nt_out, Nsv, Nx_out), and ``theta`` with the steering angles (Nsv,).
    DOA methods fill ``img`` (source power), ``theta`` (source angle) and
    ``hessian`` with shape (Nt_out, Nsrc, Nx_out) and ``cost`` with shape
    (Nt_out, Nx_out). The source axis has size two (negative, non-negative
    angles) when side buckets are enabled.
    """
    img: np.ndarray
    theta: np.ndarray
    cost: Optional[np.ndarray] = None
    hessian: Optional[np.ndarray] = None


@dataclass
class ModelOrderResult:
    """Estimated source count and DOAs per model order criterion."""
    nest: Dict[str, np.ndarray] = field(default_factory=dict)
    doa: Dict[str, np.ndarray] = field(default_factory=dict)


@dataclass
class ArrayProcResult:
    """
    Array processing output.

    Attributes
    ----------
    img : np.ndarray
        Image value per pixel, shape (Nt_out, Nx_out).
    theta : np.ndarray
        Angle (radians) at which the image value was found.
    bins : np.ndarray
        Fast-time index of each output row.
    lines : np.ndarray
        Slow-time index of each output column.
    tomo : TomographyResult, optional
        Present when tomography is enabled.
    moe : ModelOrderResult, optional
        Present when model order estimation is enabled.
    """
    img: np.ndarray
    theta: np.ndarray
    bins: np.ndarray
    lines: np.ndarray
    tomo: Optional[TomographyResult] = None
    moe: Optional[ModelOrderResult] = None


# ===================================================================
# Beamforming Pixels
# ===================================================================

def _periodogram_pixel(cfg, snapshots, dcm_snapshots, steering):
    return periodogram(snapshots, steering)


def _mvdr_pixel(cfg, snapshots, dcm_snapshots, steering):
    if cfg.dcm_ml_match:
        return mvdr_response(sample_covariance(snapshots), steering, cfg.params.diag_load)
    return mvdr_two_stage(sample_covariance(dcm_snapshots), snapshots, steering,
                          cfg.params.diag_load)


def _robust_mvdr_pixel(cfg, snapshots, dcm_snapshots, steering):
    return robust_mvdr(sample_covariance(dcm_snapshots), snapshots, steering,
                       cfg.params.fraction)


def _music_pixel(cfg, snapshots, dcm_snapshots, steering):
    return music_projection(sample_covariance(snapshots), steering, cfg.nsrc)


def _risr_pixel(cfg, snapshots, dcm_snapshots, steering):
    return risr(snapshots, steering, cfg.params.iterations)


_BEAMFORMERS = {
    ArrayMethod.STANDARD: _periodogram_pixel,
    ArrayMethod.MVDR: _mvdr_pixel,
    ArrayMethod.MVDR_ROBUST: _robust_mvdr_pixel,
    ArrayMethod.MUSIC: _music_pixel,
    ArrayMethod.RISR: _risr_pixel,
}


def _looks_on_denominator(cfg: ArrayConfig) -> bool:
    """True when per-look outputs are power denominators (MVDR, MUSIC)."""
    if cfg.method == ArrayMethod.MUSIC:
        return True
    return cfg.method == ArrayMethod.MVDR and cfg.dcm_ml_match


def _beamform_pixel(
    cfg: ArrayConfig,
    cubes: Sequence[np.ndarray],
    steering: Sequence[np.ndarray],
    bin_: int,
    lines: np.ndarray,
    dcm_lines: np.ndarray
) -> np.ndarray:
    """
    Multilook averaged spectrum of one pixel, NaN when degenerate.

    Periodogram-like outputs are averaged directly. MVDR and MUSIC
    average ``a^H Rxx^-1 a`` or the noise subspace projection over looks
    and invert the mean.
    """
    bins = clip_range(bin_, cfg.bin_rng, cfg.nt)
    dcm_bins = clip_range(bin_, cfg.dcm_bin_rng, cfg.nt)
    estimator = _BEAMFORMERS[cfg.method]
    spectra = []
    for cube, sv in zip(cubes, steering):
        snapshots = extract_snapshots(cube, bins, lines)
        dcm_snapshots = snapshots if cfg.dcm_ml_match else \
            extract_snapshots(cube, dcm_bins, dcm_lines)
        if snapshots.shape[1] == 0 or dcm_snapshots.shape[1] == 0:
            logger.debug("Empty neighborhood at bin %d", bin_)
            return np.full(cfg.nsv, np.nan)
        try:
            spectra.append(estimator(cfg, snapshots, dcm_snapshots, sv))
        except np.linalg.LinAlgError as exc:
            logger.debug("Singular covariance at bin %d: %s", bin_, exc)
            return np.full(cfg.nsv, np.nan)
    if _looks_on_denominator(cfg):
        with np.errstate(divide='ignore'):
            return 1.0 / np.mean(spectra, axis=0)
    return np.mean(spectra, axis=0)


# ===================================================================
# DOA Pixels
# ===================================================================

@dataclass
class _DoaPixel:
    """
    Per-pixel data shared by every model order tried at that pixel.

    ``solver(nsrc)`` returns the ``(cost, initializer)`` pair for a
    given number of sources.
    """
    solver: Callable[[int], tuple]
    nsnap: int
    covariance: np.ndarray
    powers: Callable[[np.ndarray], np.ndarray]


def _doa_pixel_model(
    cfg: ArrayConfig,
    cube: np.ndarray,
    bin_: int,
    lines: np.ndarray,
    y_pos: np.ndarray,
    z_pos: np.ndarray,
    grid: np.ndarray
) -> _DoaPixel:
    """Covariance, cost, initializer and power estimator of one DOA pixel."""
    bins = clip_range(bin_, cfg.bin_rng, cfg.nt)
    guard = cfg.params.theta_guard
    wideband = cfg.params.wideband
    method = cfg.method

    if method == ArrayMethod.WBMLE:
        blocks, snapshots = subband_covariance(cube, bins, lines, wideband.nsubband)
        manifolds = subband_manifolds(cfg.fc, wideband.fs, wideband.nsubband, y_pos, z_pos)
        model = ProjectionModel(list(blocks), manifolds)
        covariance = sample_covariance(snapshots)
        powers = lambda theta: wbmle_powers(snapshots, theta, manifolds)
    elif method == ArrayMethod.DCM:
        half = (wideband.nsubband - 1) // 2
        offsets = np.arange(-half, half + 1)
        snapshots = space_time_snapshots(cube, bins, lines, offsets)
        imp_resp = wideband.imp_resp
        manifold = space_time_manifold(cfg.fc, wideband.fs, y_pos, z_pos, imp_resp.vals,
                                       imp_resp.time_vec, offsets)
        model = ProjectionModel([sample_covariance(snapshots)], [manifold])
        covariance = sample_covariance(extract_snapshots(cube, bins, lines))
        powers = lambda theta: dcm_powers(cube, bins, lines, wideband.reg_bins, theta,
                                          cfg.fc, wideband.fs, y_pos, z_pos)
    else:
        snapshots = extract_snapshots(cube, bins, lines)
        manifold = narrowband_manifold(cfg.fc, y_pos, z_pos)
        covariance = sample_covariance(snapshots)
        model = ProjectionModel([covariance], [manifold])
        powers = lambda theta: estimate_powers(snapshots, manifold(theta))

    if method == ArrayMethod.MUSIC_DOA:
        def build(nsrc):
            noise = noise_subspace(covariance, nsrc)
            return (lambda theta: music_doa_cost(theta, noise, manifold),
                    lambda limits: music_initialization(noise, manifold, grid, limits, guard))
    else:
        init = ap_initialization if cfg.params.init == 'ap' else grid_initialization

        def build(nsrc):
            return (model.cost, lambda limits: init(model, grid, limits, guard))

    return _DoaPixel(solver=build, nsnap=snapshots.shape[1],
                     covariance=covariance, powers=powers)


def _solve_order(
    cfg: ArrayConfig,
    pixel: _DoaPixel,
    nsrc: int,
    centers: List[float],
    seq_state: Optional[SequentialState] = None,
    t_curr: Optional[float] = None,
    t_next: Optional[float] = None
) -> Optional[DoaSolution]:
    """DOA solution for a fixed number of sources."""
    constraints = cfg.params.constraints[:nsrc]
    init_limits = constraint_limits(constraints, centers[:nsrc], initialization=True)
    limits = constraint_limits(constraints, centers[:nsrc])
    cost, initializer = pixel.solver(nsrc)

    if seq_state is None:
        return estimate_doa(cost, initializer, init_limits, limits,
                            cfg.params.theta_guard, cfg.params.ftol, cfg.params.max_iter)

    bounds = seq_state.bounds(t_curr, t_next)
    lowest = min(lim[0] for lim in limits)
    highest = max(lim[1] for lim in limits)
    best, best_tracks = None, sequential_tracks(nsrc)[0]
    for tracks in sequential_tracks(nsrc):
        seq_limits = [(bounds.lower[t], bounds.upper[t]) for t in tracks]
        if min(lim[0] for lim in seq_limits) < lowest or max(lim[1] for lim in seq_limits) > highest:
            logger.debug("Sequential bounds fall outside the DOA constraints")
            continue
        prior_cost = with_prior(cost, bounds, tracks, 1.0 / max(pixel.nsnap, 1))
        solution = estimate_doa(prior_cost, initializer, seq_limits, seq_limits,
                                cfg.params.theta_guard, cfg.params.ftol, cfg.params.max_iter)
        if solution is not None and (best is None or solution.cost < best.cost):
            best, best_tracks = solution, tracks
    if best is None:
        seq_state.update(t_curr, bounds, np.full(len(best_tracks), np.nan), best_tracks)
    else:
        seq_state.update(t_curr, bounds, best.theta, best_tracks)
    return best


def _pixel_centers(cfg: ArrayConfig, bin_: int, rline: int) -> List[float]:
    centers = []
    for constraint in cfg.params.constraints:
        if cfg.time is None or cfg.surface is None:
            centers.append(0.0)
            continue
        layer = None if constraint.layer_twtt is None else float(constraint.layer_twtt[rline])
        centers.append(constraint_center(constraint, float(cfg.time[bin_]),
                                         float(cfg.surface[rline]), layer))
    return centers


def _next_time(time: np.ndarray, bin_: int, dbin: int) -> float:
    nxt = bin_ + dbin
    if nxt < time.size:
        return float(time[nxt])
    return float(time[bin_] + (time[-1] - time[-2]) * dbin)


# ===================================================================
# Driver
# ===================================================================

def _as_cubes(data: Union[np.ndarray, Sequence[np.ndarray]]) -> List[np.ndarray]:
    cubes = [data] if isinstance(data, np.ndarray) else list(data)
    for idx, cube in enumerate(cubes):
        validate_cube(cube, f"data[{idx}]")
    return cubes


def array_proc(
    data: Union[np.ndarray, Sequence[np.ndarray]],
    config: ArrayConfig,
    progress_callback: Optional[Callable[[float], None]] = None
) -> ArrayProcResult:
    """
    Beamform or estimate DOAs for every output pixel.

    Parameters
    ----------
    data : np.ndarray or sequence of np.ndarray
        One complex cube (Nt, Nx, Na, Nb, Nc) per multilook.
    config : ArrayConfig
        Resolved configuration (see :func:`resolve_config`).
    progress_callback : callable, optional
        Called with the completed fraction a few times per call.

    Returns
    -------
    ArrayProcResult

    Raises
    ------
    TypeError
        If a cube is not a complex numpy array.
    ValidationError
        If the cubes do not match the configuration.
    """
    cubes = _as_cubes(data)
    if len(cubes) != config.n_multilook:
        raise ValidationError(
            f"Expected {config.n_multilook} multilook cubes, got {len(cubes)}"
        )
    for cube in cubes:
        if cube.shape != config.shape:
            raise ValidationError(
                f"Cube shape {cube.shape} does not match configuration {config.shape}"
            )

    cfg = config
    is_doa = cfg.method.is_doa
    window = cfg.params.window if cfg.method == ArrayMethod.STANDARD else None
    cubes = [equalize_channels(cube, eq, window) for cube, eq in zip(cubes, cfg.chan_equal)]

    nt_out, nx_out = cfg.nt_out, cfg.nx_out
    img = np.full((nt_out, nx_out), np.nan)
    img_theta = np.full((nt_out, nx_out), np.nan)
    tomo = None
    if is_doa:
        nsrc_axis = cfg.n_tomo_src
        tomo = TomographyResult(
            img=np.full((nt_out, nsrc_axis, nx_out), np.nan),
            theta=np.full((nt_out, nsrc_axis, nx_out), np.nan),
            cost=np.full((nt_out, nx_out), np.nan),
            hessian=np.full((nt_out, nsrc_axis, nx_out), np.nan),
        )
    elif cfg.tomo_en:
        tomo = TomographyResult(img=np.full((nt_out, cfg.nsv, nx_out), np.nan),
                                theta=cfg.theta.copy())
    moe = None
    if is_doa and cfg.params.moe_en:
        names = MOE_CRITERIA if cfg.params.moe_simulator_en else cfg.params.moe_methods
        moe = ModelOrderResult(
            nest={name: np.full((nt_out, nx_out), np.nan) for name in names},
            doa={name: np.full((nt_out, cfg.nsrc, nx_out), np.nan) for name in names}
            if cfg.params.moe_simulator_en else {},
        )

    image_idxs = cfg.image_sv_idxs
    doa_grid = cfg.theta if cfg.nsv > 1 else theta_grid(DOA_INIT_GRID_SIZE)
    report_every = max(1, int(np.ceil(nx_out / PROGRESS_STEPS)))

    for line_idx, rline in enumerate(cfg.lines):
        rline = int(rline)
        lines = clip_range(rline, cfg.line_rng, cfg.nx)
        dcm_lines = clip_range(rline, cfg.dcm_line_rng, cfg.nx)
        roll = None if cfg.roll is None else cfg.roll[rline]
        geometry = [line_positions(pos, rline, roll) for pos in cfg.positions]
        seq_state = SequentialState(guard=cfg.params.theta_guard) \
            if is_doa and cfg.params.seq else None

        if not is_doa:
            steering = [steering_vectors(cfg.theta, cfg.fc, y, z) for y, z in geometry]

        for bin_idx in np.flatnonzero(cfg.bin_mask(rline)):
            bin_ = int(cfg.bins[bin_idx])
            if not is_doa:
                spectrum = _beamform_pixel(cfg, cubes, steering, bin_, lines, dcm_lines)
                img[bin_idx, line_idx], img_theta[bin_idx, line_idx] = \
                    select_image_value(spectrum, cfg.theta, image_idxs)
                if tomo is not None:
                    tomo.img[bin_idx, :, line_idx] = spectrum
                continue
            _process_doa_pixel(cfg, cubes[0], geometry[0], doa_grid, bin_, bin_idx,
                               rline, line_idx, lines, seq_state, img, img_theta, tomo, moe)

        if (line_idx + 1) % report_every == 0 or line_idx == nx_out - 1:
            logger.info("Array processing range line %d (%d of %d)",
                        rline, line_idx + 1, nx_out)
            if progress_callback is not None:
                progress_callback((line_idx + 1) / nx_out)

    if tomo is not None and not cfg.tomo_en:
        tomo = None
    return ArrayProcResult(img=img, theta=img_theta, bins=cfg.bins.copy(),
                           lines=cfg.lines.copy(), tomo=tomo, moe=moe)


def _process_doa_pixel(cfg, cube, geometry, grid, bin_, bin_idx, rline, line_idx,
                       lines, seq_state, img, img_theta, tomo, moe) -> None:
    """Estimate, assign and store the DOAs of one pixel."""
    y_pos, z_pos = geometry
    t_curr = t_next = None
    if seq_state is not None:
        t_curr = float(cfg.time[bin_])
        t_next = _next_time(cfg.time, bin_, cfg.dbin)
        if t_curr <= 0 or t_next <= 0:
            logger.debug("Non-positive fast time at bin %d line %d", bin_, rline)
            return
    try:
        pixel = _doa_pixel_model(cfg, cube, bin_, lines, y_pos, z_pos, grid)
        if pixel.nsnap == 0:
            logger.debug("Empty neighborhood at bin %d line %d", bin_, rline)
            return

        nsrc = cfg.nsrc
        per_criterion = {}
        if cfg.params.nsrc_true is not None:
            nsrc = int(min(cfg.params.nsrc_true[bin_idx, line_idx], cfg.nsrc))
        elif cfg.params.moe_en:
            nsrc, per_criterion = estimate_model_order(
                pixel.covariance, pixel.nsnap, cfg.params.moe_methods, cfg.nsrc,
                cfg.params.moe_penalty_nt, all_criteria=cfg.params.moe_simulator_en)
        centers = _pixel_centers(cfg, bin_, rline)
        if not np.all(np.isfinite(centers)):
            logger.debug("No constraint center at bin %d line %d", bin_, rline)
            return

        solutions: Dict[int, Optional[DoaSolution]] = {}
        if nsrc > 0:
            solutions[nsrc] = _solve_order(cfg, pixel, nsrc, centers, seq_state, t_curr, t_next)
        elif seq_state is not None:
            bounds = seq_state.bounds(t_curr, t_next)
            seq_state.update(t_curr, bounds, np.array([]), np.array([], dtype=int))

        if moe is not None:
            for name, order in per_criterion.items():
                moe.nest[name][bin_idx, line_idx] = order
                order = min(order, cfg.nsrc)
                if not cfg.params.moe_simulator_en or order == 0:
                    continue
                if order not in solutions:
                    solutions[order] = _solve_order(cfg, pixel, order, centers)
                if solutions[order] is not None:
                    moe.doa[name][bin_idx, :order, line_idx] = solutions[order].theta

        solution = solutions.get(nsrc)
        if solution is None:
            return
        powers = pixel.powers(solution.theta)
    except np.linalg.LinAlgError as exc:
        logger.debug("Singular covariance at bin %d line %d: %s", bin_, rline, exc)
        return

    slots = side_buckets(solution.theta) if cfg.params.side_buckets else np.arange(nsrc)
    for src, slot in enumerate(slots):
        tomo.theta[bin_idx, slot, line_idx] = solution.theta[src]
        tomo.img[bin_idx, slot, line_idx] = powers[src]
        tomo.hessian[bin_idx, slot, line_idx] = solution.hessian[src]
    tomo.cost[bin_idx, line_idx] = solution.cost

    lo, hi = cfg.theta_rng
    keep = (solution.theta >= lo) & (solution.theta <= hi) if hi > lo \
        else np.ones(nsrc, dtype=bool)
    if np.any(keep) and not np.all(np.isnan(powers[keep])):
        candidates = np.where(keep, powers, np.nan)
        best = int(np.nanargmax(candidates))
        img[bin_idx, line_idx] = powers[best]
        img_theta[bin_idx, line_idx] = solution.theta[best]


# ===================================================================
# ArrayProcessor
# ===================================================================

@processor_version('1.0.0')
@processor_tags(
    modalities=[ImageModality.SAR],
    category=ProcessorCategory.ANALYZE,
    description='Cross-track array beamforming and direction of arrival estimation'
)
class ArrayProcessor(ImageProcessor):
    """
    Cross-track array processor for multichannel radar data cubes.

    Forms a beamformed power image (periodogram, MVDR, robust MVDR,
    MUSIC, RISR) or estimates per-pixel directions of arrival and source
    powers (MUSIC-DOA, MLE, DCM, wideband MLE) from a complex cube of
    shape (Nt, Nx, Na, Nb, Nc).

    Parameters
    ----------
    method : str
        Estimator name. Default ``'standard'`` (periodogram).
    bin_rng : int
        Half-width of the fast-time neighborhood.
    line_rng : int
        Half-width of the slow-time neighborhood.
    dline : int
        Output range-line decimation.
    nsv : int
        Number of steering vectors.
    nsrc : int
        Number of sources.
    diag_load : float
        MVDR diagonal loading factor.
    doa_init : str
        DOA initialization, ``'grid'`` or ``'ap'``.
    doa_theta_guard : float
        Minimum DOA separation in degrees.
    nsubband : int
        Subbands of the wideband methods (odd).
    doa_seq : bool
        Sequential MLE along range.
    moe_en : bool
        Model order estimation.
    tomo_side_buckets : bool
        Store DOA tomography by sign of angle.

    Examples
    --------
    >>> proc = ArrayProcessor(method='mvdr', nsv=64, dline=1, line_rng=2)
    >>> result = proc.apply(cube, fc=195e6, positions=phase_centers)
    >>> result.img.shape
    (Nt_out, Nx_out)
    """

    __gpu_compatible__ = False

    method: Annotated[
        str,
        Options(*METHOD_NAMES),
        Desc('Array processing estimator')
    ] = 'standard'

    bin_rng: Annotated[
        int,
        Range(min=0, max=100),
        Desc('Half-width of the fast-time neighborhood (bins)')
    ] = 0

    line_rng: Annotated[
        int,
        Range(min=0, max=100),
        Desc('Half-width of the slow-time neighborhood (lines)')
    ] = 5

    dline: Annotated[
        int,
        Range(min=1, max=1000),
        Desc('Output range-line decimation')
    ] = 1

    nsv: Annotated[
        int,
        Range(min=1, max=4096),
        Desc('Number of steering vectors')
    ] = 1

    nsrc: Annotated[
        int,
        Range(min=0, max=16),
        Desc('Number of sources')
    ] = 1

    diag_load: Annotated[
        float,
        Range(min=0.0, max=1e6),
        Desc('MVDR diagonal loading factor')
    ] = 0.0

    doa_init: Annotated[
        str,
        Options('grid', 'ap'),
        Desc('DOA initialization search')
    ] = 'grid'

    doa_theta_guard: Annotated[
        float,
        Range(min=0.01, max=90.0),
        Desc('Minimum DOA separation (degrees)')
    ] = 1.5

    nsubband: Annotated[
        int,
        Range(min=1, max=101),
        Desc('Number of subbands (odd)')
    ] = 1

    doa_seq: Annotated[bool, Desc('Sequential MLE along range')] = False

    moe_en: Annotated[bool, Desc('Model order estimation')] = False

    tomo_side_buckets: Annotated[bool, Desc('Bucket DOA tomography by angle sign')] = False

    def __init__(
        self,
        method: str = 'standard',
        bin_rng: int = 0,
        line_rng: int = 5,
        dline: int = 1,
        nsv: int = 1,
        nsrc: int = 1,
        diag_load: float = 0.0,
        doa_init: str = 'grid',
        doa_theta_guard: float = 1.5,
        nsubband: int = 1,
        doa_seq: bool = False,
        moe_en: bool = False,
        tomo_side_buckets: bool = False
    ) -> None:
        if dline < 1:
            raise ValidationError(f"dline must be >= 1, got {dline}")
        if nsubband < 1 or nsubband % 2 == 0:
            raise ValidationError(f"nsubband must be a positive odd integer, got {nsubband}")

        self._method = ArrayMethod.from_name(method).value
        self._bin_rng = bin_rng
        self._line_rng = line_rng
        self._dline = dline
        self._nsv = nsv
        self._nsrc = nsrc
        self._diag_load = diag_load
        self._doa_init = doa_init
        self._doa_theta_guard = doa_theta_guard
        self._nsubband = nsubband
        self._doa_seq = doa_seq
        self._moe_en = moe_en
        self._tomo_side_buckets = tomo_side_buckets

    @property
    def method(self) -> str:
        """Estimator name."""
        return self._method

    @property
    def bin_rng(self) -> int:
        return self._bin_rng

    @property
    def line_rng(self) -> int:
        return self._line_rng

    @property
    def dline(self) -> int:
        return self._dline

    @property
    def nsv(self) -> int:
        return self._nsv

    @property
    def nsrc(self) -> int:
        return self._nsrc

    @property
    def diag_load(self) -> float:
        return self._diag_load

    @property
    def doa_init(self) -> str:
        return self._doa_init

    @property
    def doa_theta_guard(self) -> float:
        """Minimum DOA separation in degrees."""
        return self._doa_theta_guard

    @property
    def nsubband(self) -> int:
        return self._nsubband

    @property
    def doa_seq(self) -> bool:
        return self._doa_seq

    @property
    def moe_en(self) -> bool:
        return self._moe_en

    @property
    def tomo_side_buckets(self) -> bool:
        return self._tomo_side_buckets

    def configure(self, shape: Sequence[int], **kwargs: Any) -> ArrayConfig:
        """
        Resolve the configuration for a cube shape.

        Tunable parameters come from the instance unless overridden in
        *kwargs*; every other keyword (``fc``, ``positions``, ``time``,
        ``doa_constraints``, ...) is passed to :func:`resolve_config`.
        """
        params = self._resolve_params(kwargs)
        extra = {key: value for key, value in kwargs.items()
                 if key not in params and key != 'progress_callback'}
        return resolve_config(shape, **params, **extra)

    def apply(
        self,
        data: Union[np.ndarray, Sequence[np.ndarray]],
        **kwargs: Any
    ) -> ArrayProcResult:
        """
        Process one or more multilook cubes.

        Parameters
        ----------
        data : np.ndarray or sequence of np.ndarray
            Complex cube(s), shape (Nt, Nx, Na, Nb, Nc).
        **kwargs
            Parameter overrides and geometry inputs (``fc`` and
            ``positions`` are required), plus ``progress_callback``.

        Returns
        -------
        ArrayProcResult
        """
        cubes = _as_cubes(data)
        kwargs.setdefault('n_multilook', len(cubes))
        config = self.configure(cubes[0].shape, **kwargs)
        return array_proc(cubes, config,
                          progress_callback=lambda f: self._report_progress(kwargs, f))


__all__ = [
    "TomographyResult",
    "ModelOrderResult",
    "ArrayProcResult",
    "array_proc",
    "ArrayProcessor",
]
