from __future__ import annotations
from typing import Iterable

from .utils import vec3


def volume_price(base_price: float, scale: Iterable[float]) -> float:
    """Цена растёт вместе с объёмом: base * sx * sy * sz."""
    sx, sy, sz = (max(0.0, float(v)) for v in vec3(scale))
    return round(float(base_price) * sx * sy * sz, 2)
