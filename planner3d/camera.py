from __future__ import annotations
import logging
import math
from typing import Optional, Tuple

import numpy as np
from PySide6.QtCore import QObject, QPointF, QRectF, Signal

from .models import CameraState, ProjectionMode
from .utils import (CAMERA_2D_POSITION, CAMERA_3D_POSITION, CAMERA_TARGET, FOV_2D, FOV_3D,
                    NEAR, FAR, ORBIT_MIN_ELEVATION, ORBIT_MAX_ELEVATION,
                    ZOOM_MIN_DISTANCE, ZOOM_MAX_DISTANCE, EPS, vec3)

log = logging.getLogger(__name__)

WORLD_UP = (0.0, 1.0, 0.0)


def look_at_matrix(eye, target, up=WORLD_UP) -> np.ndarray:
    eye = vec3(eye); target = vec3(target); up = vec3(up)
    z = eye - target
    n = np.linalg.norm(z)
    z = z / n if n > EPS else np.array([0.0, 0.0, 1.0])
    x = np.cross(up, z)
    if np.linalg.norm(x) < EPS:
        # взгляд строго вдоль up (вид сверху): верх экрана = -Z
        x = np.cross(np.array([0.0, 0.0, -1.0]), z)
    x /= np.linalg.norm(x)
    y = np.cross(z, x)
    m = np.identity(4)
    m[0, :3] = x; m[1, :3] = y; m[2, :3] = z
    m[0, 3] = -x.dot(eye); m[1, 3] = -y.dot(eye); m[2, 3] = -z.dot(eye)
    return m


def perspective_matrix(fov_deg: float, aspect: float, near: float, far: float) -> np.ndarray:
    f = 1.0 / math.tan(math.radians(fov_deg) / 2.0)
    m = np.zeros((4, 4))
    m[0, 0] = f / aspect
    m[1, 1] = f
    m[2, 2] = (far + near) / (near - far)
    m[2, 3] = 2.0 * far * near / (near - far)
    m[3, 2] = -1.0
    return m


class ViewportCamera:
    """
    Перспективная камера. Матрица проекции кэшируется и пересчитывается
    только через update_projection_matrix().
    """

    def __init__(self, fov: float = FOV_3D, aspect: float = 1.0, near: float = NEAR, far: float = FAR):
        self.position = vec3(CAMERA_3D_POSITION)
        self.target = vec3(CAMERA_TARGET)
        self.fov = float(fov)
        self.aspect = float(aspect)
        self.near = float(near)
        self.far = float(far)
        self.view_matrix = np.identity(4)
        self.projection_matrix = np.identity(4)
        self.look_at(self.target)
        self.update_projection_matrix()

    def look_at(self, target):
        self.target = vec3(target)
        self.view_matrix = look_at_matrix(self.position, self.target)

    def update_projection_matrix(self):
        self.projection_matrix = perspective_matrix(self.fov, self.aspect, self.near, self.far)

    def unproject(self, ndc) -> np.ndarray:
        inv = np.linalg.inv(self.projection_matrix @ self.view_matrix)
        p = inv @ np.array([ndc[0], ndc[1], ndc[2], 1.0])
        return p[:3] / p[3]

    def project(self, point) -> Tuple[np.ndarray, float]:
        """Мир -> NDC. Второе значение w > 0, если точка перед камерой."""
        p = self.projection_matrix @ self.view_matrix @ np.append(vec3(point), 1.0)
        w = p[3]
        if abs(w) < EPS:
            return np.array([math.inf, math.inf, math.inf]), 0.0
        return p[:3] / w, float(w)

    def world_to_screen(self, point, rect: QRectF) -> Optional[QPointF]:
        ndc, w = self.project(point)
        if w <= 0:
            return None
        x = rect.left() + (ndc[0] + 1.0) / 2.0 * rect.width()
        y = rect.top() + (1.0 - ndc[1]) / 2.0 * rect.height()
        return QPointF(x, y)


class CameraController(QObject):
    """Единственный владелец позы камеры. Публикует ссылку на камеру подписчикам."""

    cameraChanged = Signal(object)  # ViewportCamera

    def __init__(self, camera: Optional[ViewportCamera] = None, parent=None):
        super().__init__(parent)
        self.camera = camera or ViewportCamera()
        self._is_2d = False

    @property
    def is_2d(self) -> bool:
        return self._is_2d

    def mount(self):
        self.set_mode(self._is_2d)

    def set_mode(self, is_2d: bool):
        cam = self.camera
        self._is_2d = bool(is_2d)
        if self._is_2d:
            cam.position = vec3(CAMERA_2D_POSITION)
            cam.fov = FOV_2D
        else:
            cam.position = vec3(CAMERA_3D_POSITION)
            cam.fov = FOV_3D
        cam.look_at(CAMERA_TARGET)
        cam.update_projection_matrix()
        log.debug("Камера: режим %s, позиция %s", "2D" if self._is_2d else "3D", cam.position)
        self.cameraChanged.emit(self.camera)

    def set_viewport_size(self, width: float, height: float):
        if width <= 0 or height <= 0:
            return
        self.camera.aspect = float(width) / float(height)
        self.camera.update_projection_matrix()

    def state(self) -> CameraState:
        cam = self.camera
        return CameraState(tuple(cam.position), tuple(cam.target),
                           ProjectionMode.TOP_DOWN if self._is_2d else ProjectionMode.PERSPECTIVE,
                           cam.fov)

    # ---- свободная орбита (только 3D) ----
    def _spherical(self):
        offset = self.camera.position - self.camera.target
        dist = float(np.linalg.norm(offset))
        az = math.degrees(math.atan2(offset[0], offset[2]))
        el = math.degrees(math.asin(max(-1.0, min(1.0, offset[1] / dist)))) if dist > EPS else 0.0
        return az, el, dist

    def _place(self, az: float, el: float, dist: float):
        a = math.radians(az); e = math.radians(el)
        offset = np.array([dist * math.cos(e) * math.sin(a),
                           dist * math.sin(e),
                           dist * math.cos(e) * math.cos(a)])
        cam = self.camera
        cam.position = cam.target + offset
        cam.look_at(cam.target)

    def orbit(self, d_azimuth: float, d_elevation: float):
        if self._is_2d:
            return
        az, el, dist = self._spherical()
        el = min(max(el + d_elevation, ORBIT_MIN_ELEVATION), ORBIT_MAX_ELEVATION)
        self._place(az + d_azimuth, el, dist)

    def zoom(self, factor: float):
        if self._is_2d or factor <= 0:
            return
        az, el, dist = self._spherical()
        dist = min(max(dist * factor, ZOOM_MIN_DISTANCE), ZOOM_MAX_DISTANCE)
        self._place(az, el, dist)
