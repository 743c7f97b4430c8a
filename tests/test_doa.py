# -*- coding: utf-8 -*-
"""
Tests for parametric direction of arrival estimation.

Tests constraint centering, projection cost models, initialization
searches, the guard-constrained optimizer and source power estimation.

License
-------
MIT License
Copyright (c) 2024 geoint.org

Created
-------
2026-10-19
"""

import numpy as np
import pytest

from grdl_arrayproc.geometry.steering import steering_vectors, theta_grid
from grdl_arrayproc.processing.beamforming import noise_subspace
from grdl_arrayproc.processing.config import DoaConstraint
from grdl_arrayproc.processing.doa import (
    ProjectionModel,
    ap_initialization,
    constraint_center,
    constraint_limits,
    estimate_doa,
    estimate_powers,
    grid_initialization,
    hessian_diagonal,
    minimize_doa,
    music_doa_cost,
    music_initialization,
    narrowband_manifold,
    side_buckets,
)
from grdl_arrayproc.processing.snapshots import sample_covariance
from grdl_arrayproc.utils.constants import DEG_TO_RAD

FC = 195e6
FULL = [(-np.pi / 2, np.pi / 2)]


def _snapshots(rng, y_pos, z_pos, angles_deg, n=200, noise=0.1):
    a = steering_vectors(np.asarray(angles_deg) * DEG_TO_RAD, FC, y_pos, z_pos) * np.sqrt(8)
    sig = (rng.randn(len(angles_deg), n) + 1j * rng.randn(len(angles_deg), n)) / np.sqrt(2)
    return a @ sig + noise * (rng.randn(8, n) + 1j * rng.randn(8, n)) / np.sqrt(2)


@pytest.fixture
def manifold(array_geometry):
    return narrowband_manifold(FC, *array_geometry)


@pytest.fixture
def one_source(random_state, array_geometry):
    return _snapshots(random_state, *array_geometry, [15.0])


@pytest.fixture
def two_source(random_state, array_geometry):
    return _snapshots(random_state, *array_geometry, [-20.0, 25.0])


class TestConstraintCenter:

    def test_fixed(self):
        assert constraint_center(DoaConstraint()) == 0.0

    def test_surface_sides(self):
        left = DoaConstraint(method='surface-left')
        right = DoaConstraint(method='surface-right')
        assert constraint_center(left, 2.0e-5, 1.0e-5) == pytest.approx(np.pi / 3)
        assert constraint_center(right, 2.0e-5, 1.0e-5) == pytest.approx(-np.pi / 3)

    def test_before_surface_is_nadir(self):
        left = DoaConstraint(method='surface-left')
        assert constraint_center(left, 0.5e-5, 1.0e-5) == 0.0

    @pytest.mark.parametrize("method", ['surface-right', 'layer-left'])
    def test_zero_time_has_no_center(self, method):
        constraint = DoaConstraint(method=method, layer_twtt=np.array([2e-5]))
        assert np.isnan(constraint_center(constraint, 0.0, 1e-5, 2e-5))

    def test_layer_above_echo_is_nadir(self):
        layer = DoaConstraint(method='layer-left', layer_twtt=np.array([2e-5]))
        assert constraint_center(layer, 1.5e-5, 1e-5, 2e-5) == 0.0

    def test_layer_refraction_table(self):
        """An echo timed for a 30 degree refracted path maps back to 30 degrees."""
        surface, layer_t = 1e-5, 2e-5
        layer = DoaConstraint(method='layer-right', layer_twtt=np.array([layer_t]))
        theta = 30.0 * DEG_TO_RAD
        refracted = np.arcsin(np.sin(theta) / np.sqrt(layer.er))
        delay = surface / np.cos(theta) + (layer_t - surface) / np.cos(refracted)
        assert constraint_center(layer, delay, surface, layer_t) == pytest.approx(-theta)

    def test_limits_shift_with_center(self):
        constraint = DoaConstraint.from_degrees(src_limits=(-5, 5), init_src_limits=(-1, 1))
        limits = constraint_limits([constraint], [0.5])
        init = constraint_limits([constraint], [0.5], initialization=True)
        assert limits[0] == pytest.approx((0.5 - 5 * DEG_TO_RAD, 0.5 + 5 * DEG_TO_RAD))
        assert init[0] == pytest.approx((0.5 - DEG_TO_RAD, 0.5 + DEG_TO_RAD))


class TestProjectionModel:

    def test_cost_minimal_at_truth(self, one_source, manifold):
        model = ProjectionModel([sample_covariance(one_source)], [manifold])
        truth = np.array([15.0 * DEG_TO_RAD])
        assert model.cost(truth) < 0.02
        assert model.cost(truth) < model.cost(truth + 5 * DEG_TO_RAD)

    def test_cost_is_normalized(self, one_source, manifold):
        model = ProjectionModel([sample_covariance(one_source)], [manifold])
        for angle in theta_grid(16):
            assert 0.0 <= model.cost(np.array([angle])) <= 1.0 + 1e-12

    def test_block_count_mismatch(self, manifold):
        with pytest.raises(ValueError, match="manifold"):
            ProjectionModel([np.eye(8), np.eye(8)], [manifold])


class TestInitialization:

    def test_grid_single_source(self, one_source, manifold):
        model = ProjectionModel([sample_covariance(one_source)], [manifold])
        theta0 = grid_initialization(model, theta_grid(128), FULL, 1.5 * DEG_TO_RAD)
        assert abs(theta0[0] - 15 * DEG_TO_RAD) < 1.5 * DEG_TO_RAD

    def test_grid_two_sources_ascending(self, two_source, manifold):
        model = ProjectionModel([sample_covariance(two_source)], [manifold])
        theta0 = grid_initialization(model, theta_grid(64), FULL * 2, 1.5 * DEG_TO_RAD)
        assert theta0[0] < theta0[1]
        np.testing.assert_allclose(theta0, np.array([-20.0, 25.0]) * DEG_TO_RAD,
                                   atol=2.5 * DEG_TO_RAD)

    def test_grid_empty_limits(self, one_source, manifold):
        model = ProjectionModel([sample_covariance(one_source)], [manifold])
        assert grid_initialization(model, theta_grid(8), [(0.01, 0.02)], 0.01) is None

    def test_alternating_projection(self, two_source, manifold):
        model = ProjectionModel([sample_covariance(two_source)], [manifold])
        theta0 = ap_initialization(model, theta_grid(128), FULL * 2, 1.5 * DEG_TO_RAD)
        np.testing.assert_allclose(np.sort(theta0), np.array([-20.0, 25.0]) * DEG_TO_RAD,
                                   atol=2.0 * DEG_TO_RAD)

    def test_music_peaks(self, two_source, manifold):
        noise = noise_subspace(sample_covariance(two_source), 2)
        theta0 = music_initialization(noise, manifold, theta_grid(128), FULL * 2,
                                      1.5 * DEG_TO_RAD)
        np.testing.assert_allclose(np.sort(theta0), np.array([-20.0, 25.0]) * DEG_TO_RAD,
                                   atol=1.5 * DEG_TO_RAD)


class TestOptimizer:

    def test_quadratic_hessian(self):
        cost = lambda t: float(np.sum((t - 0.2) ** 2))
        np.testing.assert_allclose(hessian_diagonal(cost, np.array([0.1, 0.3])), 2.0, rtol=1e-4)

    def test_guard_is_enforced(self):
        """Two sources pulled to the same angle stay a guard apart."""
        guard = 2.0 * DEG_TO_RAD
        cost = lambda t: float(np.sum((t - 0.1) ** 2))
        solution = minimize_doa(cost, np.array([0.0, 0.2]), np.full(2, -1.0),
                                np.full(2, 1.0), guard)
        assert solution is not None
        assert solution.theta[1] - solution.theta[0] >= guard - 1e-6
        assert np.all(np.diff(solution.theta) >= 0)

    def test_bounds_respected(self):
        cost = lambda t: float(np.sum((t - 1.0) ** 2))
        solution = minimize_doa(cost, np.array([0.0]), np.array([-0.5]), np.array([0.5]), 0.01)
        assert solution.theta[0] == pytest.approx(0.5)

    def test_inverted_bounds(self):
        cost = lambda t: float(np.sum(t ** 2))
        assert minimize_doa(cost, np.array([0.0]), np.array([0.5]), np.array([0.4]), 0.01) is None

    def test_single_source_accuracy(self, one_source, manifold):
        model = ProjectionModel([sample_covariance(one_source)], [manifold])
        init = lambda limits: grid_initialization(model, theta_grid(128), limits, 0.02)
        solution = estimate_doa(model.cost, init, FULL, FULL, 0.02)
        assert abs(solution.theta[0] - 15 * DEG_TO_RAD) < 0.5 * DEG_TO_RAD
        assert solution.cost < 0.02
        assert solution.hessian[0] > 0

    def test_two_source_accuracy(self, two_source, manifold):
        model = ProjectionModel([sample_covariance(two_source)], [manifold])
        init = lambda limits: ap_initialization(model, theta_grid(128), limits, 0.02)
        solution = estimate_doa(model.cost, init, FULL * 2, FULL * 2, 0.02)
        np.testing.assert_allclose(solution.theta, np.array([-20.0, 25.0]) * DEG_TO_RAD,
                                   atol=0.5 * DEG_TO_RAD)

    def test_failed_initialization(self):
        solution = estimate_doa(lambda t: 0.0, lambda limits: None, FULL, FULL, 0.01)
        assert solution is None

    def test_deterministic(self, two_source, manifold):
        model = ProjectionModel([sample_covariance(two_source)], [manifold])
        init = lambda limits: grid_initialization(model, theta_grid(64), limits, 0.02)
        first = estimate_doa(model.cost, init, FULL * 2, FULL * 2, 0.02)
        second = estimate_doa(model.cost, init, FULL * 2, FULL * 2, 0.02)
        np.testing.assert_array_equal(first.theta, second.theta)


class TestMusicDoa:

    def test_cost_near_zero_at_truth(self, one_source, manifold):
        noise = noise_subspace(sample_covariance(one_source), 1)
        truth = np.array([15.0 * DEG_TO_RAD])
        assert music_doa_cost(truth, noise, manifold) < 0.01
        assert music_doa_cost(truth, noise, manifold) < music_doa_cost(-truth, noise, manifold)


class TestPowers:

    def test_pseudo_inverse_power(self, one_source, manifold):
        """Unit-power source seen by 8 unit-gain channels has power 8 on a unit-norm manifold."""
        powers = estimate_powers(one_source, manifold(np.array([15.0 * DEG_TO_RAD])))
        assert powers[0] == pytest.approx(8.0, rel=0.25)

    def test_side_buckets(self):
        np.testing.assert_array_equal(side_buckets(np.array([-0.3, 0.0, 0.2])), [0, 1, 1])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
