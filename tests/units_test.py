from __future__ import annotations

from decimal import ROUND_HALF_UP

import pytest

from weatherbridge.errors import ConfigurationError
from weatherbridge.units import kelvin_to_celsius, rounding_mode


@pytest.mark.parametrize(
    "kelvin, expected",
    [
        (273.15, 0),
        (284.15, 11),
        (283.65, 10),  # 10.5 -> even neighbour
        (284.65, 12),  # 11.5 -> even neighbour
        (272.65, 0),  # -0.5 -> even neighbour
        (263.9, -9),
        (300, 27),
    ],
)
def test_kelvin_to_celsius_half_even(kelvin, expected):
    assert kelvin_to_celsius(kelvin) == expected


def test_kelvin_to_celsius_half_up():
    assert kelvin_to_celsius(283.65, ROUND_HALF_UP) == 11
    assert kelvin_to_celsius(284.65, ROUND_HALF_UP) == 12


@pytest.mark.parametrize(
    "kelvin, expected",
    [
        (272.65, 0),  # -0.5 rounds towards +inf
        (271.65, -1),  # -1.5 rounds towards +inf
        (271.45, -2),
        (272.95, 0),
    ],
)
def test_kelvin_to_celsius_half_up_below_freezing(kelvin, expected):
    assert kelvin_to_celsius(kelvin, ROUND_HALF_UP) == expected


def test_kelvin_to_celsius_accepts_numeric_strings():
    assert kelvin_to_celsius("293.15") == 20


def test_rounding_mode_lookup():
    assert rounding_mode("half_up") == ROUND_HALF_UP
    with pytest.raises(ConfigurationError):
        rounding_mode("banker")
