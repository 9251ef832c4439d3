from __future__ import annotations
from typing import Optional

from PySide6.QtCore import Qt, QRectF, Signal
from PySide6.QtGui import QColor, QFont, QIcon, QPainter, QPen, QPixmap
from PySide6.QtWidgets import QWidget, QVBoxLayout, QListWidget, QListWidgetItem, QPushButton

from .factory import ObjectFactory


def make_icon(w: int, h: int, color: QColor, label: str = "") -> QIcon:
    pm = QPixmap(w, h); pm.fill(Qt.transparent)
    p = QPainter(pm); p.setRenderHint(QPainter.Antialiasing, True)
    p.setBrush(color); p.setPen(QPen(QColor(70, 70, 70), 1))
    r = QRectF(2, 2, w - 4, h - 4)
    p.drawRoundedRect(r, 4, 4)
    if label:
        p.setPen(Qt.black); p.setFont(QFont("", 8, QFont.Bold))
        p.drawText(r, Qt.AlignCenter, label)
    p.end()
    return QIcon(pm)


class CatalogPanel(QWidget):
    """Каталог объектов: выбрать позицию и поставить её в центр сцены."""

    objectPlaced = Signal(str)

    def __init__(self, factory: ObjectFactory, parent=None):
        super().__init__(parent)
        self.factory = factory
        root = QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)

        self.list = QListWidget()
        for entry in factory.catalog:
            li = QListWidgetItem(make_icon(32, 32, QColor("#FFE169"), entry.name[:1]),
                                 f"{entry.name} — {entry.base_price:.0f} €")
            li.setData(Qt.UserRole, entry)
            li.setToolTip(entry.details)
            self.list.addItem(li)
        self.list.itemDoubleClicked.connect(lambda _: self.place_current())
        root.addWidget(self.list)

        self.btn_add = QPushButton("Добавить в сцену")
        self.btn_add.clicked.connect(self.place_current)
        root.addWidget(self.btn_add)

    def place_current(self) -> Optional[str]:
        item = self.list.currentItem()
        if item is None:
            return None
        obj = self.factory.create_from_entry(item.data(Qt.UserRole))
        self.objectPlaced.emit(obj.id)
        return obj.id
