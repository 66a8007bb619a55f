"""Unit tests for numeric helpers"""

import math

from credit_passport.utils.numeric import is_finite_number, round_half_up, round_to_tenth, to_finite_float


def test_is_finite_number():
    assert is_finite_number(3)
    assert is_finite_number(-2.5)
    assert not is_finite_number(True)
    assert not is_finite_number("3")
    assert not is_finite_number(math.nan)
    assert not is_finite_number(-math.inf)


def test_is_finite_number_int_beyond_float_range():
    assert not is_finite_number(10**400)
    assert not is_finite_number(-(10**400))


def test_to_finite_float():
    assert to_finite_float(" 4.5 ") == 4.5
    assert to_finite_float(7) == 7.0
    assert to_finite_float("1e400") is None
    assert to_finite_float(10**400) is None
    assert to_finite_float(None) is None


def test_half_up_rounding():
    assert round_half_up(2.5) == 3
    assert round_half_up(60.3) == 60
    assert round_to_tenth(2.25) == 2.3
    assert round_to_tenth(6.25) == 6.3
