from __future__ import annotations
from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

Vec3 = Tuple[float, float, float]


def _vec(v) -> np.ndarray:
    return np.array(v, dtype=np.float64).reshape(3)


@dataclass
class CatalogEntry:
    name: str = ""
    asset: str = ""
    base_price: float = 0.0
    base_size: Vec3 = (1.0, 1.0, 1.0)   # метры при scale = 1
    texture: str = ""
    details: str = ""


@dataclass(eq=False)
class SceneObject:
    id: str
    asset: str = ""
    name: str = ""
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: np.zeros(3))  # Euler XYZ, радианы
    scale: np.ndarray = field(default_factory=lambda: np.ones(3))
    texture: str = ""
    price: float = 0.0
    base_price: float = 0.0
    base_size: np.ndarray = field(default_factory=lambda: np.ones(3))
    details: str = ""

    def __post_init__(self):
        self.position = _vec(self.position)
        self.rotation = _vec(self.rotation)
        self.scale = _vec(self.scale)
        self.base_size = _vec(self.base_size)

    @property
    def dimensions(self) -> np.ndarray:
        return self.base_size * self.scale


@dataclass(frozen=True)
class WallSegment:
    start: Vec3
    end: Vec3

    def length(self) -> float:
        return float(np.linalg.norm(_vec(self.end) - _vec(self.start)))


@dataclass(frozen=True)
class CameraState:
    position: Vec3
    target: Vec3
    projection_mode: str
    fov: float


class ProjectionMode:
    PERSPECTIVE = "perspective"
    TOP_DOWN = "top_down"


class WallGesture:
    IDLE = "idle"
    AWAITING_ENDPOINT = "awaiting_endpoint"


class RotationGesture:
    IDLE = "idle"
    DRAGGING = "dragging"
