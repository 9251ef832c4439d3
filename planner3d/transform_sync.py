from __future__ import annotations
import logging
from typing import Callable, Optional

import numpy as np
from PySide6.QtCore import QCoreApplication, QEvent, QObject, QPointF, Signal

from .models import RotationGesture
from .state import SceneStore
from .utils import ROTATION_SPEED, QUARTER_TURN, parse_scale, vec3

log = logging.getLogger(__name__)

AXES = ("width", "height", "depth")


class RotationDragSession(QObject):
    """
    Сессия вращения мышью. Фильтр событий ставится на всё приложение
    при begin() и снимается при end() или выходе из with-блока.
    Любое нажатие кнопки мыши завершает сессию и поглощается.
    """

    finished = Signal()

    def __init__(self, on_delta: Callable[[np.ndarray], None], origin: Optional[QPointF] = None,
                 source: Optional[QObject] = None, speed: float = ROTATION_SPEED, parent=None):
        super().__init__(parent)
        self._on_delta = on_delta
        self._source = source
        self._last = QPointF(origin) if origin is not None else None
        self.speed = speed
        self.active = False

    def begin(self) -> "RotationDragSession":
        if self.active:
            return self
        if self._source is None:
            self._source = QCoreApplication.instance()
        if self._source is not None:
            self._source.installEventFilter(self)
        self.active = True
        return self

    def end(self):
        if not self.active:
            return
        if self._source is not None:
            self._source.removeEventFilter(self)
        self.active = False
        self.finished.emit()

    def __enter__(self):
        return self.begin()

    def __exit__(self, exc_type, exc, tb):
        self.end()
        return False

    def move_by(self, dx: float, dy: float):
        if not self.active:
            return
        self._on_delta(np.array([-dy * self.speed, dx * self.speed, 0.0]))

    def move_to(self, pos: QPointF):
        if self._last is not None:
            self.move_by(pos.x() - self._last.x(), pos.y() - self._last.y())
        self._last = QPointF(pos)

    def eventFilter(self, obj, event):
        if self.active:
            et = event.type()
            if et == QEvent.MouseMove:
                self.move_to(event.globalPosition())
            elif et == QEvent.MouseButtonPress:
                self.end()
                return True
        return super().eventFilter(obj, event)


class ObjectTransformSync(QObject):
    """
    Локальное редактируемое зеркало scale/rotation/texture одного объекта.
    Пересобирается на каждое objectChanged из SceneStore.
    """

    changed = Signal()
    dragStateChanged = Signal(bool)

    def __init__(self, store: SceneStore, object_id: str, parent=None):
        super().__init__(parent)
        self.store = store
        self.object_id = object_id
        self.width = self.height = self.depth = 1.0
        self.rotation = np.zeros(3)
        self.texture = ""
        self.price = 0.0
        self.dimensions_visible = store.dimensions_visible(object_id)
        self._drag: Optional[RotationDragSession] = None
        self._drag_base: Optional[np.ndarray] = None
        store.objectChanged.connect(self._on_object_changed)
        store.dimensionsToggled.connect(self._on_dimensions_toggled)
        self.resync()

    # ---- наблюдатель ----
    def _on_object_changed(self, object_id: str):
        if object_id == self.object_id and object_id in self.store:
            self.resync()

    def _on_dimensions_toggled(self, object_id: str):
        if object_id == self.object_id:
            self.dimensions_visible = self.store.dimensions_visible(object_id)
            self.changed.emit()

    def resync(self):
        obj = self.store.object(self.object_id)
        self.width, self.height, self.depth = (float(v) for v in obj.scale)
        self.rotation = obj.rotation.copy()
        self.texture = obj.texture
        self.price = obj.price
        self.changed.emit()

    def close(self):
        self.stop_drag_rotation()
        for sig, slot in ((self.store.objectChanged, self._on_object_changed),
                          (self.store.dimensionsToggled, self._on_dimensions_toggled)):
            try:
                sig.disconnect(slot)
            except (RuntimeError, TypeError):
                pass

    # ---- масштаб ----
    @property
    def scale(self) -> np.ndarray:
        return np.array([self.width, self.height, self.depth])

    def set_scale_text(self, axis: str, text) -> float:
        if axis not in AXES:
            raise ValueError(f"unknown axis: {axis}")
        value = parse_scale(text)
        setattr(self, axis, value)
        self._commit_scale()
        return value

    def set_scale(self, width, height, depth):
        self.width, self.height, self.depth = parse_scale(width), parse_scale(height), parse_scale(depth)
        self._commit_scale()

    def commit_scale(self):
        # потеря фокуса: ещё раз отправляем полный вектор
        self._commit_scale()

    def _commit_scale(self):
        # цену пересчитывает сам store вместе с масштабом
        self.store.update_scale(self.object_id, self.scale)

    # ---- текстура ----
    def set_texture(self, texture: str):
        self.texture = texture
        self.store.update_texture(self.object_id, texture)

    # ---- вращение ----
    def rotate_by(self, delta):
        self.rotation = self.rotation + vec3(delta)
        self.store.update_rotation(self.object_id, self.rotation)

    def rotate_quarter(self):
        self.rotate_by((QUARTER_TURN, QUARTER_TURN, QUARTER_TURN))

    @property
    def rotation_state(self) -> str:
        return RotationGesture.DRAGGING if self._drag is not None else RotationGesture.IDLE

    @property
    def drag_base(self) -> Optional[np.ndarray]:
        return None if self._drag_base is None else self._drag_base.copy()

    def start_drag_rotation(self, origin: Optional[QPointF] = None,
                            source: Optional[QObject] = None) -> RotationDragSession:
        if self._drag is not None:
            return self._drag
        self._drag_base = self.rotation.copy()
        session = RotationDragSession(self.rotate_by, origin=origin, source=source, parent=self)
        session.finished.connect(self._on_drag_finished)
        self._drag = session
        session.begin()
        log.debug("Вращение мышью: старт для %s", self.object_id)
        self.dragStateChanged.emit(True)
        return session

    def stop_drag_rotation(self):
        if self._drag is not None:
            self._drag.end()

    def toggle_drag_rotation(self):
        if self._drag is None:
            self.start_drag_rotation()
        else:
            self.stop_drag_rotation()

    def _on_drag_finished(self):
        session, self._drag = self._drag, None
        self._drag_base = None
        if session is not None:
            session.deleteLater()
        log.debug("Вращение мышью: стоп для %s", self.object_id)
        self.dragStateChanged.emit(False)

    # ---- размеры ----
    def toggle_dimensions(self):
        # локальный флаг обновит _on_dimensions_toggled
        self.store.toggle_dimensions(self.object_id)
