# -*- coding: utf-8 -*-
"""
Tests for constants module.

Tests physical constants, unit conversions, and helper functions.

License
-------
MIT License
Copyright (c) 2024 geoint.org

Created
-------
2026-10-19
"""

import pytest
import math

from grdl_arrayproc.utils import constants


class TestPhysicalConstants:
    """Test physical constants values."""

    def test_speed_of_light(self):
        """Speed of light should be exact SI value."""
        assert constants.SPEED_OF_LIGHT == 299792458.0

    def test_ice_permittivity(self):
        assert constants.ER_ICE == 3.15


class TestUnitConversions:
    """Test unit conversion constants."""

    def test_deg_to_rad(self):
        expected = math.pi / 180.0
        assert abs(constants.DEG_TO_RAD - expected) < 1e-15

    def test_deg_rad_reciprocal(self):
        """Deg/rad conversions should be reciprocals."""
        assert abs(constants.DEG_TO_RAD * constants.RAD_TO_DEG - 1.0) < 1e-10


class TestHelperFunctions:
    """Test helper conversion functions."""

    def test_wavelength_from_frequency_pband(self):
        """195 MHz sounder wavelength is about 1.54 m."""
        wavelength = constants.wavelength_from_frequency(195e6)
        assert abs(wavelength - constants.SPEED_OF_LIGHT / 195e6) < 1e-12
        assert abs(wavelength - 1.5374) < 1e-4

    def test_two_way_wavenumber(self):
        """Two-way wavenumber is twice the one-way 2*pi/lambda."""
        wavelength = constants.wavelength_from_frequency(150e6)
        k = constants.two_way_wavenumber(150e6)
        assert abs(k - 2 * (2 * math.pi / wavelength)) < 1e-12


class TestExports:

    def test_public_names(self):
        """Only the constants the steering and constraint code use are exported."""
        assert set(constants.__all__) == {
            'SPEED_OF_LIGHT', 'ER_ICE', 'DEG_TO_RAD', 'RAD_TO_DEG',
            'wavelength_from_frequency', 'two_way_wavenumber',
        }
        for name in constants.__all__:
            assert hasattr(constants, name)


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
