from __future__ import annotations
from typing import List, Optional

import numpy as np
from PySide6.QtCore import QLineF, QPointF, QRectF, Qt
from PySide6.QtGui import QColor, QFont, QPainter, QPen, QPolygonF

from .camera import ViewportCamera
from .models import SceneObject, WallSegment
from .scenegraph import LineNode, MarkerNode
from .utils import (OBJECT_PEN, OBJECT_SELECTED, OBJECT_MOVING, WALL_COLOR, DIMENSION_BG,
                    euler_matrix, fmt_num)

# вершины единичного куба и его рёбра
_CORNERS = np.array([[x, y, z] for x in (-0.5, 0.5) for y in (-0.5, 0.5) for z in (-0.5, 0.5)])
_EDGES = [(0, 1), (0, 2), (0, 4), (1, 3), (1, 5), (2, 3), (2, 6), (3, 7), (4, 5), (4, 6), (5, 7), (6, 7)]


def box_corners(obj: SceneObject) -> np.ndarray:
    local = _CORNERS * obj.dimensions
    return (euler_matrix(obj.rotation) @ local.T).T + obj.position


class ObjectBox:
    """Проекция объекта на экран: каркас, выделение и подпись размеров."""

    def __init__(self, obj: SceneObject, camera: ViewportCamera, rect: QRectF):
        self.obj = obj
        self.depth = float(np.linalg.norm(obj.position - camera.position))
        self.points: List[Optional[QPointF]] = [camera.world_to_screen(c, rect) for c in box_corners(obj)]

    @property
    def visible(self) -> bool:
        return all(p is not None for p in self.points)

    def bounding_rect(self) -> QRectF:
        if not self.visible:
            return QRectF()
        xs = [p.x() for p in self.points]; ys = [p.y() for p in self.points]
        return QRectF(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))

    def contains(self, pos: QPointF) -> bool:
        return self.visible and self.bounding_rect().contains(pos)

    def paint(self, painter: QPainter, selected: bool = False, moving: bool = False,
              show_dimensions: bool = False):
        if not self.visible:
            return
        color = OBJECT_MOVING if moving else (OBJECT_SELECTED if selected else OBJECT_PEN)
        pen = QPen(color, 2 if (selected or moving) else 1, Qt.DashLine if moving else Qt.SolidLine)
        painter.setPen(pen)
        painter.setBrush(Qt.NoBrush)
        for a, b in _EDGES:
            painter.drawLine(QLineF(self.points[a], self.points[b]))
        if show_dimensions:
            self._paint_dimensions(painter)

    def _paint_dimensions(self, painter: QPainter):
        w, h, d = self.obj.dimensions
        text = f"{fmt_num(round(w, 2))} × {fmt_num(round(h, 2))} × {fmt_num(round(d, 2))} м"
        painter.setFont(QFont("", 8, QFont.DemiBold))
        fm = painter.fontMetrics()
        br = self.bounding_rect()
        tw = fm.horizontalAdvance(text) + 8
        th = fm.height() + 4
        pill = QRectF(br.center().x() - tw / 2, br.top() - th - 4, tw, th)
        painter.setPen(Qt.NoPen)
        painter.setBrush(DIMENSION_BG)
        painter.drawRoundedRect(pill, 4, 4)
        painter.setPen(QColor(255, 255, 255))
        painter.drawText(pill, Qt.AlignCenter, text)


def paint_polyline(painter: QPainter, camera: ViewportCamera, rect: QRectF, points, pen: QPen):
    screen = [camera.world_to_screen(p, rect) for p in points]
    painter.setPen(pen)
    for a, b in zip(screen, screen[1:]):
        if a is not None and b is not None:
            painter.drawLine(QLineF(a, b))


def paint_wall(painter: QPainter, camera: ViewportCamera, rect: QRectF, wall: WallSegment):
    paint_polyline(painter, camera, rect, [wall.start, wall.end], QPen(WALL_COLOR, 3, Qt.SolidLine, Qt.RoundCap))


def paint_node(painter: QPainter, camera: ViewportCamera, rect: QRectF, node):
    if isinstance(node, LineNode):
        if node.geometry is None or node.geometry.disposed:
            return
        pen = QPen(node.material.color, node.material.width, Qt.DashLine)
        paint_polyline(painter, camera, rect, node.geometry.points, pen)
    elif isinstance(node, MarkerNode):
        c = camera.world_to_screen(node.position, rect)
        if c is None:
            return
        painter.setPen(Qt.NoPen)
        painter.setBrush(node.color)
        painter.drawEllipse(c, 4, 4)


def ground_polygon(camera: ViewportCamera, rect: QRectF, center, width: float, depth: float,
                   height: float) -> Optional[QPolygonF]:
    cx, _, cz = center
    corners = [(cx - width / 2, height, cz - depth / 2), (cx + width / 2, height, cz - depth / 2),
               (cx + width / 2, height, cz + depth / 2), (cx - width / 2, height, cz + depth / 2)]
    pts = [camera.world_to_screen(c, rect) for c in corners]
    if any(p is None for p in pts):
        return None
    return QPolygonF(pts)
