from __future__ import annotations
import logging
from typing import List, Optional

from PySide6.QtCore import QLineF, QPointF, QRectF, Qt, Signal
from PySide6.QtGui import QBrush, QPainter, QPen, QWheelEvent
from PySide6.QtWidgets import QWidget

from .camera import CameraController
from .hud import ViewHUD
from .items import ObjectBox, ground_polygon, paint_node, paint_wall
from .picking import GroundPicker
from .scenegraph import SceneGraph
from .state import SceneStore
from .utils import (BG_COLOR, GRID_MAJOR, GRID_MINOR, GROUND_BORDER, FLOOR_COLOR, FLOOR_LEVEL_3D,
                    GROUND_LEVEL, GROUND_SIZE, GRID_DIVISIONS, ORBIT_SPEED)
from .walls import WallGestureMachine

log = logging.getLogger(__name__)


class SceneViewport(QWidget):
    """
    Собирает кадр: сетка/пол, земля, объекты, стены, превью и маркеры жеста.
    Рисование стен обрабатывает WallGestureMachine через фильтр событий.
    """

    objectClicked = Signal(str)

    def __init__(self, store: SceneStore, parent=None):
        super().__init__(parent)
        self.store = store
        self.setMinimumSize(480, 360)
        self.setFocusPolicy(Qt.StrongFocus)
        self.setMouseTracking(True)

        self.graph = SceneGraph()
        self.graph.on_change = self.update
        self.picker = GroundPicker()
        self.controller = CameraController(parent=self)
        self.walls = WallGestureMachine(self.graph, self.picker, parent=self)
        self.walls.set_ground(store.ground)
        self.walls.set_view_2d(store.is_2d_view)
        self.walls.set_creating_walls(store.creating_walls)
        self.walls.wallCommitted.connect(store.add_segment)
        self.walls.overlayChanged.connect(self.update)
        self.walls.attach(self)

        self.controller.cameraChanged.connect(self._on_camera)
        store.viewModeChanged.connect(self._on_view_mode)
        store.wallModeChanged.connect(self.walls.set_creating_walls)
        store.groundChanged.connect(self._on_ground)
        for sig in (store.objectAdded, store.objectRemoved, store.objectChanged,
                    store.selectionChanged, store.movingChanged, store.dimensionsToggled):
            sig.connect(self.update)
        store.wallsChanged.connect(self.update)

        self._orbit_from: Optional[QPointF] = None
        self.hud = ViewHUD(self, store)
        self.controller.mount()

    # ---- подписки ----
    def _on_camera(self, camera):
        self.walls.set_camera(camera)
        self.update()

    def _on_view_mode(self, is_2d: bool):
        self.walls.set_view_2d(is_2d)
        self.controller.set_mode(is_2d)

    def _on_ground(self, ground):
        self.walls.set_ground(ground)
        self.update()

    def teardown(self):
        self.walls.dispose()

    # ---- геометрия ----
    def view_rect(self) -> QRectF:
        return QRectF(self.rect())

    def object_boxes(self) -> List[ObjectBox]:
        cam = self.controller.camera
        rect = self.view_rect()
        boxes = [ObjectBox(o, cam, rect) for o in self.store.objects()]
        boxes.sort(key=lambda b: b.depth, reverse=True)
        return boxes

    def object_at(self, pos: QPointF) -> Optional[str]:
        for box in reversed(self.object_boxes()):
            if box.contains(pos):
                return box.obj.id
        return None

    # ---- мышь ----
    def mousePressEvent(self, e):
        if e.button() == Qt.RightButton:
            self._orbit_from = e.position()
            e.accept()
            return
        if e.button() == Qt.LeftButton:
            if self.store.moving_id is not None:
                self.store.set_moving(None)
            else:
                hit = self.object_at(e.position())
                if hit is not None:
                    log.debug("Выбран объект %s", hit)
                    self.store.select(hit)
                    self.objectClicked.emit(hit)
            e.accept()
            return
        super().mousePressEvent(e)

    def mouseMoveEvent(self, e):
        pos = e.position()
        if self._orbit_from is not None and not self.store.is_2d_view:
            d = pos - self._orbit_from
            self._orbit_from = pos
            self.controller.orbit(-d.x() * ORBIT_SPEED, d.y() * ORBIT_SPEED)
            self.update()
            return
        moving = self.store.moving_id
        if moving is not None and moving in self.store:
            hit = self.picker.pick(pos, self.view_rect(), self.controller.camera,
                                   self.store.ground, self.store.is_2d_view)
            if hit is not None:
                obj = self.store.object(moving)
                hit[1] = obj.position[1]
                self.store.update_position(moving, hit)
        super().mouseMoveEvent(e)

    def mouseReleaseEvent(self, e):
        if e.button() == Qt.RightButton:
            self._orbit_from = None
        super().mouseReleaseEvent(e)

    def wheelEvent(self, event: QWheelEvent):
        angle = event.angleDelta().y()
        if angle and not self.store.is_2d_view:
            self.controller.zoom(1.0 / 1.15 if angle > 0 else 1.15)
            self.update()
            event.accept()
            return
        super().wheelEvent(event)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.controller.set_viewport_size(self.width(), self.height())
        self.hud.reposition()

    # ---- кадр ----
    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        self.paint_scene(painter, self.view_rect())
        painter.end()

    def paint_scene(self, painter: QPainter, rect: QRectF):
        cam = self.controller.camera
        painter.fillRect(rect, BG_COLOR)
        if self.store.is_2d_view:
            self._draw_grid(painter, rect)
        else:
            floor = ground_polygon(cam, rect, (0.0, 0.0, 0.0), GROUND_SIZE, GROUND_SIZE, FLOOR_LEVEL_3D)
            if floor is not None:
                painter.setPen(Qt.NoPen)
                painter.setBrush(QBrush(FLOOR_COLOR))
                painter.drawPolygon(floor)

        ground = self.store.ground
        if ground is not None:
            poly = ground_polygon(cam, rect, ground.center, ground.width, ground.depth, ground.height)
            if poly is not None:
                painter.setPen(QPen(GROUND_BORDER, 1.5))
                painter.setBrush(Qt.NoBrush)
                painter.drawPolygon(poly)

        for box in self.object_boxes():
            oid = box.obj.id
            box.paint(painter, selected=(oid == self.store.selected_id),
                      moving=(oid == self.store.moving_id),
                      show_dimensions=self.store.dimensions_visible(oid))

        if self.store.is_2d_view:
            for wall in self.store.walls():
                paint_wall(painter, cam, rect, wall)

        for node in self.graph.nodes:
            paint_node(painter, cam, rect, node)

    def _draw_grid(self, painter: QPainter, rect: QRectF):
        cam = self.controller.camera
        half = GROUND_SIZE / 2.0
        step = GROUND_SIZE / GRID_DIVISIONS
        for i in range(GRID_DIVISIONS + 1):
            v = -half + i * step
            is_major = (i % 5 == 0)
            painter.setPen(QPen(GRID_MAJOR if is_major else GRID_MINOR, 1.5 if is_major else 1))
            for a, b in (((v, GROUND_LEVEL, -half), (v, GROUND_LEVEL, half)),
                         ((-half, GROUND_LEVEL, v), (half, GROUND_LEVEL, v))):
                pa = cam.world_to_screen(a, rect); pb = cam.world_to_screen(b, rect)
                if pa is not None and pb is not None:
                    painter.drawLine(QLineF(pa, pb))
