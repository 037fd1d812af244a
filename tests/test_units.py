"""Unit conversion tests.

All configuration lengths pass through collsim.core.units on their way to
the core (mm). Reference values are exact decimal conversions.
"""

import math

import pytest

from collsim.core.units import (
    LENGTH_UNITS,
    cm_to_mm,
    deg_to_rad,
    mm_to_cm,
    rad_to_deg,
    to_mm,
)


class TestLengthConversions:
    def test_mm_to_cm(self):
        assert mm_to_cm(10.0) == pytest.approx(1.0)
        assert mm_to_cm(0.0) == 0.0

    def test_cm_to_mm(self):
        assert cm_to_mm(1.0) == pytest.approx(10.0)
        assert cm_to_mm(4.5) == pytest.approx(45.0)

    def test_round_trip(self):
        assert mm_to_cm(cm_to_mm(3.7)) == pytest.approx(3.7)

    def test_negative_lengths_convert(self):
        """Offsets may be negative (src_shiftz)."""
        assert cm_to_mm(-4.5) == pytest.approx(-45.0)


class TestToMm:
    @pytest.mark.parametrize("unit,value,expected", [
        ("mm", 12.5, 12.5),
        ("cm", 1.25, 12.5),
        ("m", 0.0125, 12.5),
    ])
    def test_known_units(self, unit, value, expected):
        assert to_mm(value, unit) == pytest.approx(expected)

    def test_integer_input_gives_float(self):
        result = to_mm(3, "cm")
        assert isinstance(result, float)
        assert result == 30.0

    def test_unknown_unit(self):
        with pytest.raises(KeyError, match="inch"):
            to_mm(1.0, "inch")

    def test_unit_table(self):
        assert set(LENGTH_UNITS) == {"mm", "cm", "m"}


class TestAngleConversions:
    def test_deg_to_rad(self):
        assert deg_to_rad(180.0) == pytest.approx(math.pi)
        assert deg_to_rad(360.0) == pytest.approx(2.0 * math.pi)

    def test_rad_to_deg(self):
        assert rad_to_deg(math.pi / 2.0) == pytest.approx(90.0)
