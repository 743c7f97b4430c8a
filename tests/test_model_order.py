# -*- coding: utf-8 -*-
"""
Tests for model order estimation.

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

from grdl.exceptions import ValidationError

from grdl_arrayproc.geometry.steering import steering_vectors
from grdl_arrayproc.processing.config import MOE_CRITERIA
from grdl_arrayproc.processing.model_order import (
    criterion_scores,
    estimate_model_order,
    estimate_order,
    sorted_eigenvalues,
)
from grdl_arrayproc.processing.snapshots import sample_covariance
from grdl_arrayproc.utils.constants import DEG_TO_RAD

FC = 195e6
NSNAP = 400


@pytest.fixture
def two_source_covariance(random_state, array_geometry):
    y_pos, z_pos = array_geometry
    a = steering_vectors(np.array([-20.0, 25.0]) * DEG_TO_RAD, FC, y_pos, z_pos) * np.sqrt(8)
    sig = (random_state.randn(2, NSNAP) + 1j * random_state.randn(2, NSNAP)) / np.sqrt(2)
    noise = 0.1 * (random_state.randn(8, NSNAP) + 1j * random_state.randn(8, NSNAP)) / np.sqrt(2)
    return sample_covariance(a @ sig + noise)


@pytest.fixture
def noise_covariance(random_state):
    noise = (random_state.randn(8, NSNAP) + 1j * random_state.randn(8, NSNAP)) / np.sqrt(2)
    return sample_covariance(noise)


class TestEigenvalues:

    def test_descending_positive(self, two_source_covariance):
        eigvals = sorted_eigenvalues(two_source_covariance)
        assert np.all(np.diff(eigvals) <= 0)
        assert np.all(eigvals > 0)

    def test_floor_on_singular(self):
        eigvals = sorted_eigenvalues(np.zeros((4, 4), dtype=complex))
        assert np.all(eigvals > 0)


class TestCriteria:

    @pytest.mark.parametrize("criterion", ['MDL', 'HQ', 'KICvc'])
    def test_two_sources(self, two_source_covariance, criterion):
        eigvals = sorted_eigenvalues(two_source_covariance)
        assert estimate_order(eigvals, NSNAP, criterion) == 2

    def test_threshold_test(self, two_source_covariance):
        eigvals = sorted_eigenvalues(two_source_covariance)
        assert estimate_order(eigvals, NSNAP, 'NT', penalty_nt=10.0) == 2

    @pytest.mark.parametrize("criterion", ['MDL', 'KICvc'])
    def test_white_noise(self, noise_covariance, criterion):
        eigvals = sorted_eigenvalues(noise_covariance)
        assert estimate_order(eigvals, NSNAP, criterion) == 0

    def test_scores_shape(self, two_source_covariance):
        eigvals = sorted_eigenvalues(two_source_covariance)
        assert criterion_scores(eigvals, NSNAP, 'AIC').shape == (8,)

    def test_small_sample_correction_infinite(self, two_source_covariance):
        """With few snapshots the corrected criteria reject large orders."""
        eigvals = sorted_eigenvalues(two_source_covariance)
        scores = criterion_scores(eigvals, 10, 'AICc')
        assert np.isinf(scores[-1])

    def test_unknown_criterion(self, two_source_covariance):
        with pytest.raises(ValidationError):
            criterion_scores(sorted_eigenvalues(two_source_covariance), NSNAP, 'BIC')


class TestModelOrder:

    def test_capped_by_max_order(self, two_source_covariance):
        order, per_criterion = estimate_model_order(two_source_covariance, NSNAP, ('MDL',), 1)
        assert order == 1
        assert per_criterion == {'MDL': 2}

    def test_all_criteria(self, two_source_covariance):
        order, per_criterion = estimate_model_order(
            two_source_covariance, NSNAP, ('MDL', 'AIC'), 4, all_criteria=True)
        assert order == 2
        assert tuple(per_criterion) == MOE_CRITERIA


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
