from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from PySide6.QtCore import QPointF, QRectF

from .camera import ViewportCamera
from .utils import GROUND_LEVEL, GROUND_SIZE, EPS, vec3

log = logging.getLogger(__name__)


@dataclass
class GroundSurface:
    """Горизонтальная плоскость, по которой пикаются точки (конечная, width x depth)."""
    center: Tuple[float, float, float] = (0.0, GROUND_LEVEL, 0.0)
    width: float = GROUND_SIZE
    depth: float = GROUND_SIZE

    @property
    def height(self) -> float:
        return float(self.center[1])

    def contains(self, point) -> bool:
        p = vec3(point)
        return (abs(p[0] - self.center[0]) <= self.width / 2.0 + EPS and
                abs(p[2] - self.center[2]) <= self.depth / 2.0 + EPS)


def pointer_to_ndc(pos: QPointF, rect: QRectF) -> Optional[Tuple[float, float]]:
    if rect.width() <= 0 or rect.height() <= 0:
        return None
    if not (rect.left() <= pos.x() <= rect.right() and rect.top() <= pos.y() <= rect.bottom()):
        return None
    x = ((pos.x() - rect.left()) / rect.width()) * 2 - 1
    y = -((pos.y() - rect.top()) / rect.height()) * 2 + 1
    return x, y


def camera_ray(camera: ViewportCamera, ndc) -> Tuple[np.ndarray, np.ndarray]:
    origin = vec3(camera.position)
    far_pt = camera.unproject((ndc[0], ndc[1], 1.0))
    direction = far_pt - origin
    return origin, direction / np.linalg.norm(direction)


def intersect_ground(origin, direction, ground: GroundSurface) -> Optional[np.ndarray]:
    denom = float(direction[1])
    if abs(denom) < 1e-8:
        return None
    t = (ground.height - float(origin[1])) / denom
    if t < 0:
        return None
    hit = origin + t * direction
    return hit if ground.contains(hit) else None


class GroundPicker:
    """
    Указатель -> точка на земле. Луч пересекается только с землёй:
    объекты и стены на пикинг не влияют.
    """

    def pick(self, pos: QPointF, rect: QRectF, camera: ViewportCamera,
             ground: Optional[GroundSurface], is_2d: bool = False) -> Optional[np.ndarray]:
        if ground is None or camera is None:
            return None
        ndc = pointer_to_ndc(pos, rect)
        if ndc is None:
            return None
        origin, direction = camera_ray(camera, ndc)
        hit = intersect_ground(origin, direction, ground)
        if hit is None:
            log.debug("Промах по земле: %s", ndc)
            return None
        if is_2d:
            hit[1] = GROUND_LEVEL
        return hit
