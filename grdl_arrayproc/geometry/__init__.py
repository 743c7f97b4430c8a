# -*- coding: utf-8 -*-
"""
Geometry - Array manifold (steering vector) generation.

License
-------
MIT License
Copyright (c) 2024 geoint.org
"""

from grdl_arrayproc.geometry.steering import (
    theta_grid,
    steering_vectors,
    subband_frequencies,
    two_way_delays,
    space_time_steering_vectors,
    line_positions,
)

__all__ = [
    "theta_grid",
    "steering_vectors",
    "subband_frequencies",
    "two_way_delays",
    "space_time_steering_vectors",
    "line_positions",
]
