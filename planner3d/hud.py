from __future__ import annotations
from PySide6.QtCore import Qt
from PySide6.QtWidgets import QWidget, QHBoxLayout, QToolButton

from .state import SceneStore


class ViewHUD(QWidget):
    """Плашка в углу вьюпорта: 2D/3D и режим стен."""

    def __init__(self, viewport, store: SceneStore):
        super().__init__(viewport)
        self.viewport = viewport
        self.store = store
        self.setObjectName("ViewHUD")
        self.setAttribute(Qt.WA_StyledBackground, True)
        self.setStyleSheet("""
            QWidget#ViewHUD { background: rgba(255,255,255,0.95); border:1px solid #e7e8ee; border-radius:12px; }
            QToolButton { border:none; padding:6px 10px; border-radius:10px; font-weight:600; }
            QToolButton:hover { background:#f2f4f7; }
            QToolButton:checked { background:#dbe7ff; }
        """)

        lay = QHBoxLayout(self)
        lay.setContentsMargins(8, 8, 8, 8)
        lay.setSpacing(6)

        self.btn_2d = QToolButton(self)
        self.btn_2d.setText("2D")
        self.btn_2d.setToolTip("Вид сверху / 3D")
        self.btn_2d.setCheckable(True)
        self.btn_2d.toggled.connect(store.set_2d_view)

        self.btn_walls = QToolButton(self)
        self.btn_walls.setText("Стены")
        self.btn_walls.setToolTip("Рисовать стены кликами (только в 2D)")
        self.btn_walls.setCheckable(True)
        self.btn_walls.toggled.connect(store.set_wall_mode)

        lay.addWidget(self.btn_2d)
        lay.addWidget(self.btn_walls)

        store.viewModeChanged.connect(self.sync)
        store.wallModeChanged.connect(self.sync)
        self.sync()
        self.resize(self.sizeHint())
        self.show()
        self.raise_()

    def sync(self, *_):
        for btn, on in ((self.btn_2d, self.store.is_2d_view), (self.btn_walls, self.store.creating_walls)):
            btn.blockSignals(True)
            btn.setChecked(on)
            btn.blockSignals(False)
        self.btn_walls.setEnabled(self.store.is_2d_view)

    def reposition(self):
        margin = 12
        vw = self.viewport.width()
        vh = self.viewport.height()
        self.move(vw - self.width() - margin, vh - self.height() - margin)
