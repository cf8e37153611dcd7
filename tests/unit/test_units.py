"""
Unit tests for fixed-point helpers.

Thresholds are written as human decimals and compared as raw integers, so
the conversion has to land in the exact scale of the compared value.
"""

from decimal import Decimal

import pytest

from keeper.units import (
    HEALTH_FACTOR_DECIMALS,
    RAY,
    RAY_DECIMALS,
    format_units,
    parse_units,
)


class TestParseUnits:

    @pytest.mark.unit
    def test_health_factor_threshold(self):
        """1.1 in 8 decimals."""
        assert parse_units("1.1", HEALTH_FACTOR_DECIMALS) == 110_000_000

    @pytest.mark.unit
    def test_ray(self):
        assert parse_units("1", RAY_DECIMALS) == RAY
        assert parse_units("3.0", RAY_DECIMALS) == 3 * RAY

    @pytest.mark.unit
    def test_accepts_decimal_and_int(self):
        assert parse_units(Decimal("0.5"), 2) == 50
        assert parse_units(7, 0) == 7

    @pytest.mark.unit
    def test_rejects_excess_precision(self):
        """Values finer than the target scale are not silently truncated."""
        with pytest.raises(ValueError):
            parse_units("1.123", 2)


class TestFormatUnits:

    @pytest.mark.unit
    def test_strips_trailing_zeros(self):
        assert format_units(3 * 10 ** 8, 8) == "3"
        assert format_units(110_000_000, 8) == "1.1"

    @pytest.mark.unit
    def test_zero_decimals(self):
        assert format_units(42, 0) == "42"

    @pytest.mark.unit
    def test_inverse_of_parse(self):
        assert format_units(parse_units("12.345", 18), 18) == "12.345"

