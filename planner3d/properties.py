from __future__ import annotations
from typing import Dict, Optional

from PySide6.QtCore import QEvent, Qt, Signal
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QFormLayout, QLineEdit, QComboBox, QLabel, QHBoxLayout, QPushButton
)

from .state import SceneStore
from .transform_sync import AXES, ObjectTransformSync
from .utils import TEXTURES, fmt_num, parse_scale


class ObjectPanel(QWidget):
    """Панель редактирования одного объекта поверх ObjectTransformSync."""

    closeRequested = Signal()
    moveRequested = Signal(str)

    def __init__(self, store: SceneStore, parent=None):
        super().__init__(parent)
        self.store = store
        self.sync: Optional[ObjectTransformSync] = None

        self.setMinimumWidth(280)
        root = QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)
        root.setSpacing(10)

        top = QHBoxLayout()
        self.lbl_title = QLabel("Ничего не выбрано")
        self.lbl_title.setStyleSheet("font-weight: 600;")
        self.btn_close = QPushButton("x")
        self.btn_close.setFixedWidth(28)
        self.btn_close.clicked.connect(self._close)
        top.addWidget(self.lbl_title); top.addStretch(1); top.addWidget(self.btn_close)
        root.addLayout(top)

        self.lbl_details = QLabel("")
        self.lbl_details.setWordWrap(True)
        root.addWidget(self.lbl_details)

        self.frm = QWidget()
        fr = QFormLayout(self.frm)
        fr.setLabelAlignment(Qt.AlignRight)

        self.cmb_texture = QComboBox()
        self._fill_textures()
        self.cmb_texture.activated.connect(self._apply_texture)
        fr.addRow("Текстура:", self.cmb_texture)

        self.ed_scale: Dict[str, QLineEdit] = {}
        for axis, label in zip(AXES, ("Ширина:", "Высота:", "Глубина:")):
            ed = QLineEdit()
            ed.setProperty("axis", axis)
            ed.textEdited.connect(lambda text, a=axis: self._apply_scale(a, text))
            ed.installEventFilter(self)
            self.ed_scale[axis] = ed
            fr.addRow(label, ed)

        self.lbl_price = QLabel("-")
        fr.addRow("Цена:", self.lbl_price)
        root.addWidget(self.frm)

        row1 = QHBoxLayout()
        self.btn_remove = QPushButton("Удалить")
        self.btn_move = QPushButton("Переместить")
        self.btn_remove.clicked.connect(self._remove)
        self.btn_move.clicked.connect(self._move)
        row1.addWidget(self.btn_remove); row1.addWidget(self.btn_move)
        root.addLayout(row1)

        row2 = QHBoxLayout()
        self.btn_rotate90 = QPushButton("Повернуть на 90°")
        self.btn_drag_rotate = QPushButton("Вращать мышью")
        self.btn_rotate90.clicked.connect(lambda: self.sync and self.sync.rotate_quarter())
        self.btn_drag_rotate.clicked.connect(self._toggle_drag)
        row2.addWidget(self.btn_rotate90); row2.addWidget(self.btn_drag_rotate)
        root.addLayout(row2)

        self.btn_dimensions = QPushButton("Показать размеры")
        self.btn_dimensions.clicked.connect(self._toggle_dimensions)
        root.addWidget(self.btn_dimensions)
        root.addStretch(1)

        store.objectRemoved.connect(self._on_removed)
        self.clear()

    # ---------- API ----------
    def clear(self):
        if self.sync is not None:
            self.sync.close()
            self.sync.deleteLater()
            self.sync = None
        self.lbl_title.setText("Ничего не выбрано")
        self.lbl_details.setText("")
        for w in (self.frm, self.btn_remove, self.btn_move, self.btn_rotate90,
                  self.btn_drag_rotate, self.btn_dimensions):
            w.setVisible(False)

    def load_object(self, object_id: Optional[str]):
        if object_id is None or object_id not in self.store:
            self.clear()
            return
        if self.sync is not None and self.sync.object_id == object_id:
            return
        self.clear()
        self._fill_textures()
        self.sync = ObjectTransformSync(self.store, object_id, self)
        self.sync.changed.connect(self._refresh)
        self.sync.dragStateChanged.connect(self._refresh_drag)
        obj = self.store.object(object_id)
        self.lbl_title.setText(f"Свойства: {obj.name or obj.id}")
        self.lbl_details.setText(obj.details)
        for w in (self.frm, self.btn_remove, self.btn_move, self.btn_rotate90,
                  self.btn_drag_rotate, self.btn_dimensions):
            w.setVisible(True)
        self._refresh()
        self._refresh_drag(False)

    # ---------- отображение ----------
    def _fill_textures(self):
        # чужие текстуры прошлого объекта в списке не копятся
        self.cmb_texture.blockSignals(True)
        self.cmb_texture.clear()
        for ref, label in TEXTURES.items():
            self.cmb_texture.addItem(label, ref)
        self.cmb_texture.blockSignals(False)

    def _refresh(self):
        s = self.sync
        if s is None:
            return
        for axis, ed in self.ed_scale.items():
            value = getattr(s, axis)
            # не перетираем то, что человек сейчас набирает ("1." -> "1")
            if parse_scale(ed.text()) != value or not ed.text():
                ed.setText(fmt_num(value))
        idx = self.cmb_texture.findData(s.texture)
        self.cmb_texture.blockSignals(True)
        if idx < 0 and s.texture:
            self.cmb_texture.addItem(s.texture, s.texture)
            idx = self.cmb_texture.count() - 1
        self.cmb_texture.setCurrentIndex(idx)
        self.cmb_texture.blockSignals(False)
        self.lbl_price.setText(f"{s.price:.2f} €")
        self.btn_dimensions.setText("Скрыть размеры" if s.dimensions_visible else "Показать размеры")

    def _refresh_drag(self, dragging: bool):
        self.btn_drag_rotate.setText("Остановить вращение" if dragging else "Вращать мышью")

    # ---------- handlers ----------
    def _apply_scale(self, axis: str, text: str):
        if self.sync is not None:
            self.sync.set_scale_text(axis, text)

    def eventFilter(self, obj, event):
        if event.type() == QEvent.FocusOut and obj in self.ed_scale.values() and self.sync is not None:
            self.sync.commit_scale()
        return super().eventFilter(obj, event)

    def _apply_texture(self, index: int):
        if self.sync is not None:
            self.sync.set_texture(self.cmb_texture.itemData(index))

    def _toggle_drag(self):
        if self.sync is not None:
            self.sync.toggle_drag_rotation()

    def _toggle_dimensions(self):
        if self.sync is not None:
            self.sync.toggle_dimensions()

    def _remove(self):
        if self.sync is None:
            return
        oid = self.sync.object_id
        self.clear()
        self.store.remove_object(oid)
        self.closeRequested.emit()

    def _move(self):
        if self.sync is not None:
            self.store.set_moving(self.sync.object_id)
            self.moveRequested.emit(self.sync.object_id)

    def _close(self):
        self.clear()
        self.store.select(None)
        self.closeRequested.emit()

    def _on_removed(self, object_id: str):
        if self.sync is not None and self.sync.object_id == object_id:
            self.clear()
