from __future__ import annotations
import math
from typing import Iterable

import numpy as np
from PySide6.QtGui import QColor

# ===== Камера =====
CAMERA_3D_POSITION = (10.0, 20.0, 30.0)
CAMERA_2D_POSITION = (0.0, 100.0, 0.0)
CAMERA_TARGET = (0.0, 0.0, 0.0)
FOV_3D = 75.0
FOV_2D = 10.0          # узкий угол ~ ортографическая картинка
NEAR = 0.1
FAR = 1000.0
ORBIT_MIN_ELEVATION = 5.0
ORBIT_MAX_ELEVATION = 89.0
ZOOM_MIN_DISTANCE = 2.0
ZOOM_MAX_DISTANCE = 400.0

# ===== Земля / сетка =====
GROUND_LEVEL = 0.0
GROUND_SIZE = 50.0
GRID_DIVISIONS = 50
FLOOR_LEVEL_3D = -1.0
EPS = 1e-9

# ===== Жесты =====
ROTATION_SPEED = 0.01
QUARTER_TURN = math.pi / 2
MARKER_RADIUS = 0.05
ORBIT_SPEED = 0.3

# ===== Цвета =====
BG_COLOR = QColor("#F2F4F7")
GRID_MINOR = QColor("#D0D6E0")
GRID_MAJOR = QColor("#A8B3C2")
FLOOR_COLOR = QColor(211, 211, 211)
GROUND_BORDER = QColor("#111827")
OBJECT_PEN = QColor("#334155")
OBJECT_SELECTED = QColor(255, 140, 0)
OBJECT_MOVING = QColor("#22D3EE")
WALL_COLOR = QColor("#2563EB")
PREVIEW_COLOR = QColor(0, 0, 255)
MARKER_COLOR = QColor(255, 0, 0)
DIMENSION_BG = QColor(0, 0, 0, 110)

# ===== Текстуры =====
TEXTURES = {
    "textures/Cube_BaseColor.png": "Cube_BaseColor.png",
    "textures/concrete_texture.jpg": "concrete_texture.jpg",
}
DEFAULT_TEXTURE = "textures/Cube_BaseColor.png"


def vec3(v: Iterable[float]) -> np.ndarray:
    return np.array(list(v), dtype=np.float64).reshape(3)


def on_ground(p: Iterable[float]) -> np.ndarray:
    out = vec3(p)
    out[1] = GROUND_LEVEL
    return out


def same_point(a, b, eps: float = 1e-6) -> bool:
    return bool(np.linalg.norm(vec3(a) - vec3(b)) <= eps)


def parse_scale(text) -> float:
    """Ввод в поле размера: всё, что не неотрицательное конечное число, -> 0."""
    if isinstance(text, (int, float)):
        v = float(text)
    else:
        try:
            v = float(str(text).strip().replace(",", "."))
        except ValueError:
            return 0.0
    if not math.isfinite(v) or v < 0:
        return 0.0
    return v


def euler_matrix(rotation: Iterable[float]) -> np.ndarray:
    # порядок XYZ: R = Rx @ Ry @ Rz
    rx, ry, rz = vec3(rotation)
    cx, sx = math.cos(rx), math.sin(rx)
    cy, sy = math.cos(ry), math.sin(ry)
    cz, sz = math.cos(rz), math.sin(rz)
    Rx = np.array([[1, 0, 0], [0, cx, -sx], [0, sx, cx]])
    Ry = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]])
    Rz = np.array([[cz, -sz, 0], [sz, cz, 0], [0, 0, 1]])
    return Rx @ Ry @ Rz


def fmt_num(v: float) -> str:
    return f"{v:g}"
