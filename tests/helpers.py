from PySide6.QtCore import QEvent, QPointF, QRectF, Qt
from PySide6.QtGui import QMouseEvent

RECT = QRectF(0, 0, 800, 600)


def mouse_event(kind, pos, button=Qt.LeftButton):
    pos = QPointF(pos)
    if kind == QEvent.MouseMove:
        button = Qt.NoButton
    return QMouseEvent(kind, pos, pos, button, button, Qt.NoModifier)


def screen_of(camera, point, rect=RECT):
    return camera.world_to_screen(point, rect)
