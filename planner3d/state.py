from __future__ import annotations
import logging
from typing import Callable, Dict, List, Optional

from PySide6.QtCore import QObject, Signal

from .models import SceneObject, WallSegment
from .picking import GroundSurface
from .pricing import volume_price
from .utils import on_ground, same_point, vec3

log = logging.getLogger(__name__)


class UnknownObjectError(KeyError):
    pass


class SceneStore(QObject):
    """Владелец списка объектов, стен и флагов вида. Все изменения — через методы."""

    objectAdded = Signal(str)
    objectRemoved = Signal(str)
    objectChanged = Signal(str)
    priceChanged = Signal(str, float)
    wallsChanged = Signal()
    viewModeChanged = Signal(bool)
    wallModeChanged = Signal(bool)
    groundChanged = Signal(object)
    selectionChanged = Signal(object)   # id | None
    movingChanged = Signal(object)      # id | None
    dimensionsToggled = Signal(str)

    def __init__(self, pricing: Callable = volume_price, parent=None):
        super().__init__(parent)
        self.pricing = pricing
        self._objects: Dict[str, SceneObject] = {}
        self._walls: List[WallSegment] = []
        self._show_dimensions: Dict[str, bool] = {}
        self.is_2d_view = False
        self.creating_walls = False
        self.ground: Optional[GroundSurface] = None
        self.selected_id: Optional[str] = None
        self.moving_id: Optional[str] = None

    # ---- объекты ----
    def objects(self) -> List[SceneObject]:
        return list(self._objects.values())

    def object(self, object_id: str) -> SceneObject:
        try:
            return self._objects[object_id]
        except KeyError:
            raise UnknownObjectError(object_id) from None

    def __contains__(self, object_id) -> bool:
        return object_id in self._objects

    def add_object(self, obj: SceneObject) -> SceneObject:
        self._objects[obj.id] = obj
        self._show_dimensions[obj.id] = False
        self.objectAdded.emit(obj.id)
        return obj

    def remove_object(self, object_id: str):
        self.object(object_id)
        del self._objects[object_id]
        self._show_dimensions.pop(object_id, None)
        if self.selected_id == object_id:
            self.select(None)
        if self.moving_id == object_id:
            self.set_moving(None)
        self.objectRemoved.emit(object_id)

    def update_position(self, object_id: str, position):
        self.object(object_id).position = vec3(position)
        self.objectChanged.emit(object_id)

    def update_rotation(self, object_id: str, rotation):
        self.object(object_id).rotation = vec3(rotation)
        self.objectChanged.emit(object_id)

    def update_scale(self, object_id: str, scale):
        """Новый масштаб сразу пересчитывает цену; наблюдатели видят согласованную пару."""
        obj = self.object(object_id)
        obj.scale = self._checked_scale(scale)
        obj.price = float(self.pricing(obj.base_price, obj.scale))
        self.priceChanged.emit(object_id, obj.price)
        self.objectChanged.emit(object_id)

    def update_texture(self, object_id: str, texture: str):
        self.object(object_id).texture = texture
        self.objectChanged.emit(object_id)

    def update_price(self, object_id: str, price: float, scale=None):
        obj = self.object(object_id)
        if scale is not None:
            obj.scale = self._checked_scale(scale)
        obj.price = float(price)
        self.priceChanged.emit(object_id, obj.price)
        self.objectChanged.emit(object_id)

    def recompute_price(self, object_id: str, scale=None):
        obj = self.object(object_id)
        s = obj.scale if scale is None else self._checked_scale(scale)
        self.update_price(object_id, self.pricing(obj.base_price, s), s)

    @staticmethod
    def _checked_scale(scale):
        s = vec3(scale)
        if (s < 0).any():
            raise ValueError(f"negative scale: {s}")
        return s

    # ---- размеры ----
    def dimensions_visible(self, object_id: str) -> bool:
        return self._show_dimensions.get(object_id, False)

    def toggle_dimensions(self, object_id: str):
        self.object(object_id)
        self._show_dimensions[object_id] = not self._show_dimensions.get(object_id, False)
        self.dimensionsToggled.emit(object_id)

    # ---- стены ----
    def walls(self) -> List[WallSegment]:
        return list(self._walls)

    def add_wall(self, start, end) -> Optional[WallSegment]:
        a, b = on_ground(start), on_ground(end)
        if same_point(a, b):
            log.warning("Стена нулевой длины отброшена: %s", a)
            return None
        seg = WallSegment(tuple(map(float, a)), tuple(map(float, b)))
        self._walls.append(seg)
        self.wallsChanged.emit()
        return seg

    def add_segment(self, segment: WallSegment):
        self.add_wall(segment.start, segment.end)

    def clear_walls(self):
        self._walls.clear()
        self.wallsChanged.emit()

    # ---- флаги вида ----
    def set_2d_view(self, on: bool):
        on = bool(on)
        if on == self.is_2d_view:
            return
        self.is_2d_view = on
        self.viewModeChanged.emit(on)

    def set_wall_mode(self, on: bool):
        on = bool(on)
        if on == self.creating_walls:
            return
        self.creating_walls = on
        self.wallModeChanged.emit(on)

    def set_ground(self, ground: Optional[GroundSurface]):
        self.ground = ground
        self.groundChanged.emit(ground)

    def select(self, object_id: Optional[str]):
        if object_id is not None:
            self.object(object_id)
        self.selected_id = object_id
        self.selectionChanged.emit(object_id)

    def set_moving(self, object_id: Optional[str]):
        if object_id is not None:
            self.object(object_id)
        if object_id == self.moving_id:
            return
        self.moving_id = object_id
        self.movingChanged.emit(object_id)
