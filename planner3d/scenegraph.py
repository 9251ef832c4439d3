from __future__ import annotations
from typing import List, Optional, Sequence

import numpy as np
from PySide6.QtGui import QColor

from .utils import MARKER_RADIUS, vec3


class LineGeometry:
    def __init__(self, points: Sequence):
        self.points: List[np.ndarray] = [vec3(p) for p in points]
        self.disposed = False

    def dispose(self):
        self.points = []
        self.disposed = True


class LineMaterial:
    def __init__(self, color: QColor, width: float = 2.0):
        self.color = QColor(color)
        self.width = float(width)
        self.disposed = False

    def dispose(self):
        self.disposed = True


class SceneNode:
    def __init__(self):
        self.parent: Optional["SceneGraph"] = None


class LineNode(SceneNode):
    def __init__(self, geometry: LineGeometry, material: LineMaterial):
        super().__init__()
        self.geometry = geometry
        self.material = material

    def set_geometry(self, geometry: LineGeometry):
        # старый буфер освобождаем, новый подвешиваем целиком
        old = self.geometry
        self.geometry = geometry
        if old is not None and old is not geometry:
            old.dispose()

    def dispose(self):
        if self.geometry is not None:
            self.geometry.dispose()
        self.material.dispose()


class MarkerNode(SceneNode):
    def __init__(self, position, color: QColor, radius: float = MARKER_RADIUS):
        super().__init__()
        self.position = vec3(position)
        self.color = QColor(color)
        self.radius = float(radius)
        self.disposed = False

    def dispose(self):
        self.disposed = True


class SceneGraph:
    """Узлы, подвешенные к сцене поверх объектов (превью, маркеры)."""

    def __init__(self):
        self._nodes: List[SceneNode] = []
        self.on_change = None

    @property
    def nodes(self) -> List[SceneNode]:
        return list(self._nodes)

    def add(self, node: SceneNode):
        if node.parent is self:
            return
        node.parent = self
        self._nodes.append(node)
        self._changed()

    def remove(self, node: SceneNode):
        if node.parent is not self:
            return
        node.parent = None
        self._nodes.remove(node)
        self._changed()

    def __contains__(self, node) -> bool:
        return node in self._nodes

    def _changed(self):
        if self.on_change:
            self.on_change()
