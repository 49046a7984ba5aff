from __future__ import annotations

import math


PI_OVER_180 = math.pi / 180.0
PI_OVER_2 = math.pi / 2.0
TWO_PI = 2.0 * math.pi
TAU = TWO_PI


def to_radians(degrees: float) -> float:
    return PI_OVER_180 * degrees
