# -*- coding: utf-8 -*-
"""
Tests for channel equalization, snapshot extraction and covariance
estimation.

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

from grdl_arrayproc.processing.snapshots import (
    clip_range,
    diagonal_load,
    equalize_channels,
    extract_snapshots,
    sample_covariance,
    space_time_snapshots,
    subband_covariance,
    validate_cube,
)


@pytest.fixture
def cube(random_state):
    shape = (10, 6, 2, 1, 4)
    return random_state.randn(*shape) + 1j * random_state.randn(*shape)


class TestValidateCube:

    def test_accepts_complex_5d(self, cube):
        validate_cube(cube)

    def test_rejects_real(self, cube):
        with pytest.raises(TypeError, match="complex"):
            validate_cube(cube.real)

    def test_rejects_non_array(self):
        with pytest.raises(TypeError, match="np.ndarray"):
            validate_cube([[1j]])

    def test_rejects_wrong_ndim(self, cube):
        with pytest.raises(ValueError, match="5D"):
            validate_cube(cube[..., 0])


class TestEqualization:

    def test_divides_by_coefficients(self, cube):
        coeffs = np.array([1.0, 2.0, 1j, -1.0])
        out = equalize_channels(cube, coeffs)
        np.testing.assert_allclose(out * coeffs, cube)

    def test_applies_window(self, cube):
        window = np.array([0.1, 0.4, 0.4, 0.1])
        out = equalize_channels(cube, np.ones(4), window)
        np.testing.assert_allclose(out[..., 1], 0.4 * cube[..., 1])

    def test_input_untouched(self, cube):
        before = cube.copy()
        equalize_channels(cube, np.full(4, 2.0))
        np.testing.assert_array_equal(cube, before)


class TestNeighborhoods:

    def test_clip_range_interior(self):
        np.testing.assert_array_equal(clip_range(5, np.arange(-2, 3), 10), [3, 4, 5, 6, 7])

    def test_clip_range_edge(self):
        np.testing.assert_array_equal(clip_range(0, np.arange(-2, 3), 10), [0, 1, 2])
        np.testing.assert_array_equal(clip_range(9, np.arange(-2, 3), 10), [7, 8, 9])

    def test_snapshot_count(self, cube):
        snaps = extract_snapshots(cube, np.array([2, 3, 4]), np.array([0, 1]))
        # 3 bins x 2 lines x 2 subapertures x 1 subband
        assert snaps.shape == (4, 12)

    @pytest.mark.parametrize("bin_,line", [(0, 0), (9, 5), (0, 5), (9, 0)])
    def test_corner_snapshot_count(self, cube, bin_, line):
        bins = clip_range(bin_, np.arange(-2, 3), 10)
        lines = clip_range(line, np.arange(-3, 4), 6)
        snaps = extract_snapshots(cube, bins, lines)
        # 3 bins x 4 lines x 2 subapertures, nothing padded
        assert snaps.shape == (4, 24)
        assert np.all(snaps != 0)

    def test_snapshot_columns_are_channel_vectors(self, cube):
        snaps = extract_snapshots(cube, np.array([7]), np.array([3]))
        np.testing.assert_array_equal(snaps[:, 0], cube[7, 3, 0, 0, :])
        np.testing.assert_array_equal(snaps[:, 1], cube[7, 3, 1, 0, :])

    def test_empty_neighborhood(self, cube):
        snaps = extract_snapshots(cube, np.array([], dtype=int), np.array([1]))
        assert snaps.shape == (4, 0)

    def test_space_time_stacking(self, cube):
        bins, lines = np.array([4, 5]), np.array([2])
        stacked = space_time_snapshots(cube, bins, lines, np.array([-1, 0, 1]))
        assert stacked.shape == (12, 4)
        np.testing.assert_array_equal(stacked[4:8], extract_snapshots(cube, bins, lines))
        np.testing.assert_array_equal(stacked[:4], extract_snapshots(cube, bins - 1, lines))


class TestCovariance:

    def test_hermitian(self, cube):
        rxx = sample_covariance(extract_snapshots(cube, np.arange(10), np.arange(6)))
        np.testing.assert_allclose(rxx, rxx.conj().T)
        assert np.all(np.linalg.eigvalsh(rxx) > 0)

    def test_no_snapshots_gives_nan(self):
        rxx = sample_covariance(np.zeros((4, 0), dtype=complex))
        assert rxx.shape == (4, 4)
        assert np.all(np.isnan(rxx))

    def test_diagonal_load(self):
        rxx = np.eye(3, dtype=complex)
        loaded = diagonal_load(rxx, 1.0)
        # sqrt(mean(|I|^2)) = 1/sqrt(3)
        np.testing.assert_allclose(np.diag(loaded).real, 1 + 1 / np.sqrt(3))
        assert diagonal_load(rxx, 0.0) is rxx

    def test_subband_blocks(self, cube):
        dcm, snaps = subband_covariance(cube, np.arange(7), np.array([0, 1]), 3)
        assert dcm.shape == (3, 4, 4)
        # 2 full groups of 3 bins; the 7th bin is dropped
        assert snaps.shape == (4, 6 * 2 * 2)
        for block in dcm:
            np.testing.assert_allclose(block, block.conj().T, atol=1e-12)

    def test_subband_power_is_preserved(self, cube):
        """Unnormalized DFT: summed subband power is nsubband**2 times the time-domain power."""
        dcm, snaps = subband_covariance(cube, np.arange(9), np.array([1]), 3)
        time_power = np.real(np.trace(sample_covariance(snaps)))
        assert np.real(sum(np.trace(b) for b in dcm)) == pytest.approx(9 * time_power)

    def test_subband_needs_enough_bins(self, cube):
        with pytest.raises(ValueError, match="fast-time"):
            subband_covariance(cube, np.arange(2), np.array([0]), 3)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
