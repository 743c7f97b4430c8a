# -*- coding: utf-8 -*-
"""
grdl-arrayproc - Cross-track array processing for multichannel radar.

Beamforming and direction of arrival estimation over 5-D complex data
cubes (fast time, slow time, subaperture, subband, channel), built on the
GRDL image processor interface.

Modules
-------
processing : Configuration, estimators and the pixel driver
geometry : Array manifold (steering vector) generation
utils : Constants and helper functions

License
-------
MIT License
Copyright (c) 2024 geoint.org
"""

__version__ = "1.0.0"

from grdl_arrayproc import processing, geometry, utils

__all__ = ["processing", "geometry", "utils", "__version__"]
