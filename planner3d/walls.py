from __future__ import annotations
import logging
from typing import List, Optional

import numpy as np
from PySide6.QtCore import QEvent, QObject, QPointF, QRectF, Qt, Signal

from .camera import ViewportCamera
from .models import WallGesture, WallSegment
from .picking import GroundPicker, GroundSurface
from .scenegraph import LineGeometry, LineMaterial, LineNode, MarkerNode, SceneGraph
from .utils import MARKER_COLOR, PREVIEW_COLOR, on_ground, same_point

log = logging.getLogger(__name__)


class GestureArena:
    """Ресурсы сцены, которыми владеет жест: превью-линия и маркеры. Освобождаются явно."""

    def __init__(self, graph: SceneGraph):
        self.graph = graph
        self.preview: Optional[LineNode] = None
        self.markers: List[MarkerNode] = []

    def spawn_marker(self, point) -> MarkerNode:
        marker = MarkerNode(point, MARKER_COLOR)
        self.graph.add(marker)
        self.markers.append(marker)
        return marker

    def update_preview(self, start, end):
        geometry = LineGeometry([start, end])
        if self.preview is None:
            self.preview = LineNode(geometry, LineMaterial(PREVIEW_COLOR, 3.0))
            self.graph.add(self.preview)
        else:
            self.preview.set_geometry(geometry)

    def release_preview(self):
        if self.preview is None:
            return
        self.graph.remove(self.preview)
        self.preview.dispose()
        self.preview = None

    def release_markers(self):
        for m in self.markers:
            self.graph.remove(m)
            m.dispose()
        self.markers.clear()

    def release_all(self):
        self.release_preview()
        self.release_markers()


class WallGestureMachine(QObject):
    """
    Рисование стены двумя кликами в 2D:
    IDLE --клик--> AWAITING_ENDPOINT(start) --клик--> IDLE + WallSegment.
    Реагирует только когда одновременно включены 2D-вид и режим стен.
    """

    wallCommitted = Signal(object)   # WallSegment
    stateChanged = Signal(str)
    overlayChanged = Signal()

    def __init__(self, graph: SceneGraph, picker: Optional[GroundPicker] = None, parent=None):
        super().__init__(parent)
        self.arena = GestureArena(graph)
        self.picker = picker or GroundPicker()
        self.camera: Optional[ViewportCamera] = None
        self.ground: Optional[GroundSurface] = None
        self.view_2d = False
        self.creating_walls = False
        self._state = WallGesture.IDLE
        self._start: Optional[np.ndarray] = None
        self._widget = None

    # ---- состояние ----
    @property
    def state(self) -> str:
        return self._state

    @property
    def start(self) -> Optional[np.ndarray]:
        return None if self._start is None else self._start.copy()

    @property
    def active(self) -> bool:
        return self.view_2d and self.creating_walls

    def _set_state(self, state: str):
        if state != self._state:
            self._state = state
            self.stateChanged.emit(state)

    # ---- входы ----
    def set_camera(self, camera: Optional[ViewportCamera]):
        self.camera = camera

    def set_ground(self, ground: Optional[GroundSurface]):
        self.ground = ground

    def set_view_2d(self, on: bool):
        self.view_2d = bool(on)
        if not self.view_2d:
            self.cancel()

    def set_creating_walls(self, on: bool):
        self.creating_walls = bool(on)
        # выход из режима стен сбрасывает незавершённый жест
        if not self.creating_walls:
            self.cancel()

    def _pick(self, pos: QPointF, rect: QRectF):
        if not self.active:
            return None
        return self.picker.pick(pos, rect, self.camera, self.ground, self.view_2d)

    def click_at(self, pos: QPointF, rect: QRectF) -> bool:
        point = self._pick(pos, rect)
        if point is None:
            return False

        if self._state == WallGesture.IDLE:
            self._start = on_ground(point)
            self.arena.spawn_marker(self._start)
            log.debug("Начало стены: %s", self._start)
            self._set_state(WallGesture.AWAITING_ENDPOINT)
            self.overlayChanged.emit()
            return True

        end = on_ground(point)
        if same_point(self._start, end):
            log.debug("Клик в начальную точку стены — ждём вторую точку")
            return False

        start = self._start
        self.arena.spawn_marker(end)
        segment = WallSegment(tuple(map(float, start)), tuple(map(float, end)))
        log.info("Стена: %s -> %s", segment.start, segment.end)
        self.arena.release_preview()
        self._start = None
        self._set_state(WallGesture.IDLE)
        self.overlayChanged.emit()
        self.wallCommitted.emit(segment)
        return True

    def move_to(self, pos: QPointF, rect: QRectF) -> bool:
        if self._state != WallGesture.AWAITING_ENDPOINT:
            return False
        point = self._pick(pos, rect)
        if point is None:
            return False
        self.arena.update_preview(self._start, on_ground(point))
        self.overlayChanged.emit()
        return True

    def cancel(self):
        if self._state == WallGesture.IDLE and self.arena.preview is None:
            return
        log.debug("Жест стены отменён")
        self._start = None
        self.arena.release_preview()
        self._set_state(WallGesture.IDLE)
        self.overlayChanged.emit()

    def clear_markers(self):
        self.arena.release_markers()
        self.overlayChanged.emit()

    # ---- подписка на события виджета ----
    def attach(self, widget):
        if self._widget is widget:
            return
        self.detach()
        self._widget = widget
        widget.setMouseTracking(True)
        widget.installEventFilter(self)

    def detach(self):
        if self._widget is not None:
            self._widget.removeEventFilter(self)
            self._widget = None

    def dispose(self):
        self.detach()
        self._start = None
        self.arena.release_all()
        self._set_state(WallGesture.IDLE)

    def eventFilter(self, obj, event):
        if obj is self._widget and self.active:
            et = event.type()
            if et == QEvent.MouseButtonPress and event.button() == Qt.LeftButton:
                return self.click_at(event.position(), QRectF(obj.rect()))
            if et == QEvent.MouseMove:
                self.move_to(event.position(), QRectF(obj.rect()))
            elif et == QEvent.KeyPress and event.key() == Qt.Key_Escape:
                self.cancel()
        return super().eventFilter(obj, event)
