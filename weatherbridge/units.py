from __future__ import annotations

from decimal import ROUND_HALF_DOWN, ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal
from typing import Dict, Union

from .errors import ConfigurationError

KELVIN_OFFSET = Decimal("273.15")

ROUNDING_MODES: Dict[str, str] = {
    "half_even": ROUND_HALF_EVEN,
    "half_up": ROUND_HALF_UP,
}


def rounding_mode(name: str) -> str:
    try:
        return ROUNDING_MODES[name]
    except KeyError:
        raise ConfigurationError(f"Unknown rounding policy: {name}") from None


def kelvin_to_celsius(kelvin: Union[int, float, str], rounding: str = ROUND_HALF_EVEN) -> int:
    """Convert a Kelvin reading to whole degrees Celsius.

    The subtraction is done in decimal so that readings such as ``283.65``
    land exactly on ``10.5`` and the rounding policy decides the neighbour.
    ``ROUND_HALF_UP`` rounds halves towards positive infinity on both sides
    of zero, so ``-0.5`` becomes ``0`` and ``-1.5`` becomes ``-1``.
    """
    celsius = Decimal(str(kelvin)) - KELVIN_OFFSET
    if rounding == ROUND_HALF_UP and celsius < 0:
        rounding = ROUND_HALF_DOWN
    return int(celsius.quantize(Decimal(1), rounding=rounding))


__all__ = ["KELVIN_OFFSET", "ROUNDING_MODES", "kelvin_to_celsius", "rounding_mode"]
