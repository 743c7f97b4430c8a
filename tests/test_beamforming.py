# -*- coding: utf-8 -*-
"""
Tests for the nonparametric beamformers.

Each estimator is run on snapshots of a single plane wave at +15 degrees
and must peak at the grid angle nearest the truth.

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
from grdl_arrayproc.processing.beamforming import (
    music,
    music_projection,
    mvdr,
    mvdr_response,
    mvdr_two_stage,
    noise_subspace,
    periodogram,
    risr,
    robust_mvdr,
    select_image_value,
)
from grdl_arrayproc.processing.snapshots import sample_covariance
from grdl_arrayproc.utils.constants import DEG_TO_RAD

FC = 195e6
TRUE_DOA = 15.0 * DEG_TO_RAD


@pytest.fixture
def grid():
    return theta_grid(128)


@pytest.fixture
def steering(array_geometry, grid):
    y_pos, z_pos = array_geometry
    return steering_vectors(grid, FC, y_pos, z_pos)


@pytest.fixture
def snapshots(array_geometry, random_state):
    """200 snapshots of a unit-power source at +15 degrees plus noise."""
    y_pos, z_pos = array_geometry
    a = steering_vectors(np.array([TRUE_DOA]), FC, y_pos, z_pos) * np.sqrt(8)
    sig = (random_state.randn(1, 200) + 1j * random_state.randn(1, 200)) / np.sqrt(2)
    noise = 0.1 * (random_state.randn(8, 200) + 1j * random_state.randn(8, 200)) / np.sqrt(2)
    return a @ sig + noise


def _assert_peak_at_truth(power, grid, tolerance_steps=1):
    nearest = int(np.argmin(np.abs(grid - TRUE_DOA)))
    assert abs(int(np.nanargmax(power)) - nearest) <= tolerance_steps


class TestPeriodogram:

    def test_matched_steering_vector(self, steering):
        """A snapshot equal to a unit steering vector has unit power at its angle."""
        power = periodogram(steering[:, 40:41], steering)
        assert power[40] == pytest.approx(1.0)
        assert np.all(power <= 1.0 + 1e-12)

    def test_peak(self, snapshots, steering, grid):
        _assert_peak_at_truth(periodogram(snapshots, steering), grid)

    def test_no_snapshots(self, steering):
        assert np.all(np.isnan(periodogram(np.zeros((8, 0)), steering)))


class TestMvdr:

    def test_white_noise_is_flat(self, steering):
        np.testing.assert_allclose(mvdr(np.eye(8), steering), 1.0)

    def test_peak(self, snapshots, steering, grid):
        _assert_peak_at_truth(mvdr(sample_covariance(snapshots), steering), grid)

    def test_steering_phase_invariance(self, snapshots, steering):
        rxx = sample_covariance(snapshots)
        rotated = steering * np.exp(1j * 0.7)
        np.testing.assert_allclose(mvdr(rxx, rotated), mvdr(rxx, steering))

    def test_steering_gain_scaling(self, snapshots, steering):
        """Scaling the steering vectors by g scales the output by 1/|g|^2."""
        rxx = sample_covariance(snapshots)
        np.testing.assert_allclose(mvdr(rxx, 2.0 * steering), mvdr(rxx, steering) / 4.0)

    def test_data_gain_scaling(self, snapshots, steering):
        """A complex gain g on the data scales the output by |g|^2."""
        gain = 3.0 * np.exp(1j * 0.4)
        base = mvdr(sample_covariance(snapshots), steering)
        scaled = mvdr(sample_covariance(gain * snapshots), steering)
        np.testing.assert_allclose(scaled, 9.0 * base, rtol=1e-8)
        np.testing.assert_allclose(scaled / scaled.max(), base / base.max(), rtol=1e-8)

    def test_data_phase_invariance(self, snapshots, steering):
        rotated = np.exp(-1j * 1.1) * snapshots
        np.testing.assert_allclose(mvdr(sample_covariance(rotated), steering),
                                   mvdr(sample_covariance(snapshots), steering), rtol=1e-8)

    def test_response_is_inverse_power(self, snapshots, steering):
        rxx = sample_covariance(snapshots)
        np.testing.assert_allclose(mvdr_response(rxx, steering) * mvdr(rxx, steering), 1.0)

    def test_loading_regularizes_singular_covariance(self, steering):
        rank_one = steering[:, :1] @ steering[:, :1].conj().T
        power = mvdr(rank_one, steering, load_factor=0.1)
        assert np.all(np.isfinite(power))

    def test_two_stage_matches_single_stage(self, snapshots, steering):
        """Same neighborhood for weights and output gives plain MVDR."""
        rxx = sample_covariance(snapshots)
        np.testing.assert_allclose(mvdr_two_stage(rxx, snapshots, steering),
                                   mvdr(rxx, steering), rtol=1e-8)


class TestRobustMvdr:

    def test_peak(self, snapshots, steering, grid):
        power = robust_mvdr(sample_covariance(snapshots), snapshots, steering)
        _assert_peak_at_truth(power, grid, tolerance_steps=2)

    def test_positive_power(self, snapshots, steering):
        power = robust_mvdr(sample_covariance(snapshots), snapshots, steering)
        assert np.all(power > 0)

    def test_unperturbed_weight_is_mvdr(self, snapshots, steering):
        """Without perturbation the principal generalized eigenvector is Rxx^-1 a."""
        rxx = sample_covariance(snapshots)
        power = robust_mvdr(rxx, snapshots, steering, perturbation=0.0)
        np.testing.assert_allclose(power, mvdr_two_stage(rxx, snapshots, steering), rtol=1e-6)


class TestMusic:

    def test_noise_subspace_dimension(self, snapshots):
        assert noise_subspace(sample_covariance(snapshots), 1).shape == (8, 7)

    def test_peak(self, snapshots, steering, grid):
        _assert_peak_at_truth(music(sample_covariance(snapshots), steering, 1), grid)

    def test_largest_model_order(self, snapshots, steering):
        rxx = sample_covariance(snapshots)
        assert noise_subspace(rxx, 7).shape == (8, 1)
        power = music(rxx, steering, 7)
        assert np.all(np.isfinite(power)) and np.all(power > 0)

    def test_no_noise_subspace_saturates(self, snapshots, steering):
        rxx = sample_covariance(snapshots)
        assert noise_subspace(rxx, 8).shape == (8, 0)
        np.testing.assert_array_equal(music_projection(rxx, steering, 8), 0.0)
        assert np.all(np.isposinf(music(rxx, steering, 8)))


class TestRisr:

    def test_peak(self, snapshots, steering, grid):
        _assert_peak_at_truth(risr(snapshots, steering), grid)

    def test_non_negative(self, snapshots, steering):
        assert np.all(risr(snapshots, steering, n_iter=5) >= 0)


class TestSelectImageValue:

    def test_restricted_search(self):
        power = np.array([5.0, 1.0, 3.0, 2.0])
        theta = np.array([-0.2, -0.1, 0.1, 0.2])
        value, angle = select_image_value(power, theta, np.array([2, 3]))
        assert value == 3.0
        assert angle == 0.1

    def test_all_nan(self):
        value, angle = select_image_value(np.full(3, np.nan), np.zeros(3), np.arange(3))
        assert np.isnan(value) and np.isnan(angle)

    def test_ignores_nan_entries(self):
        value, _ = select_image_value(np.array([np.nan, 2.0]), np.zeros(2), np.arange(2))
        assert value == 2.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
