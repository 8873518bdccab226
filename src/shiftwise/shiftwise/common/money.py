from __future__ import annotations

import math

# Beyond 2**52 a float has no fractional part left to round.
_EXACT_LIMIT = float(2**52)


def round_half_up(value: float, places: int = 2) -> float:
    """Round half away from zero on the scaled value (``x * 100`` for pennies).

    The scaled float is rounded as-is, so 1.005 (stored as 1.00499...) gives
    1.0. Never raises for finite input.
    """
    value = float(value)
    scale = 10.0**places
    scaled = abs(value) * scale
    if not math.isfinite(scaled) or scaled >= _EXACT_LIMIT:
        return value
    return math.copysign(math.floor(scaled + 0.5), value) / scale + 0.0


def round_money(value: float) -> float:
    return round_half_up(value, 2)
