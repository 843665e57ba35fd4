from __future__ import annotations

import math
from typing import Any, Union

Number = Union[int, float]


def coerce_number(raw: Any) -> Number:
    """
    Form-input number coercion.

    None, blank text, non-numeric text, NaN and infinities all degrade to 0.
    Integral values come back as int so JSON output stays `185`, not `185.0`.
    """
    if isinstance(raw, bool):
        return int(raw)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        v = raw
    elif isinstance(raw, str):
        s = raw.strip()
        if not s:
            return 0
        try:
            v = float(s)
        except ValueError:
            return 0
    else:
        return 0

    if not math.isfinite(v):
        return 0
    if v.is_integer():
        return int(v)
    return v


def clamp(v: Number, lo: Number, hi: Number) -> Number:
    return max(lo, min(hi, v))
