# -*- coding: utf-8 -*-
"""
Array Processing - Beamforming and direction of arrival estimation.

Estimators and the pixel driver for multichannel radar data cubes:

- Configuration resolution and validation
- Channel equalization, snapshot extraction and covariance estimation
- Beamforming (periodogram, MVDR, robust MVDR, MUSIC, RISR)
- Parametric DOA (MUSIC-DOA, MLE, DCM, wideband MLE)
- Sequential MLE tracking along range
- Model order estimation (NT, AIC, HQ, MDL, AICc, KICvc, WIC)

License
-------
MIT License
Copyright (c) 2024 geoint.org
"""

# Configuration
from grdl_arrayproc.processing.config import (
    ArrayMethod,
    ConstraintMethod,
    MOE_CRITERIA,
    DoaConstraint,
    ImpulseResponse,
    BinRestriction,
    PeriodogramParams,
    MvdrParams,
    RobustMvdrParams,
    MusicParams,
    RisrParams,
    WidebandParams,
    DoaParams,
    ArrayConfig,
    resolve_config,
)

# Snapshots
from grdl_arrayproc.processing.snapshots import (
    equalize_channels,
    extract_snapshots,
    sample_covariance,
    subband_covariance,
)

# Beamforming
from grdl_arrayproc.processing.beamforming import (
    periodogram,
    mvdr,
    robust_mvdr,
    music,
    risr,
)

# DOA
from grdl_arrayproc.processing.doa import (
    ProjectionModel,
    DoaSolution,
    estimate_doa,
)

# Model order
from grdl_arrayproc.processing.model_order import estimate_model_order

# Driver
from grdl_arrayproc.processing.array_proc import (
    TomographyResult,
    ModelOrderResult,
    ArrayProcResult,
    array_proc,
    ArrayProcessor,
)

__all__ = [
    "ArrayMethod",
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
    "ArrayConfig",
    "resolve_config",
    "equalize_channels",
    "extract_snapshots",
    "sample_covariance",
    "subband_covariance",
    "periodogram",
    "mvdr",
    "robust_mvdr",
    "music",
    "risr",
    "ProjectionModel",
    "DoaSolution",
    "estimate_doa",
    "estimate_model_order",
    "TomographyResult",
    "ModelOrderResult",
    "ArrayProcResult",
    "array_proc",
    "ArrayProcessor",
]
