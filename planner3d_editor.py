#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations
import logging
import os
import sys

from PySide6.QtCore import Qt, QSettings
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import QApplication, QMainWindow, QToolBar, QStatusBar, QDockWidget, QMessageBox

from planner3d import (SceneStore, SceneViewport, ObjectFactory, CatalogPanel, ObjectPanel,
                       GroundSurface, UnknownObjectError)

log = logging.getLogger("planner3d")


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Planner3D — расстановка объектов")
        self.resize(1280, 860)
        self.settings = QSettings("planner3d", "editor")

        # 1) Состояние и вьюпорт
        self.store = SceneStore(parent=self)
        self.store.set_ground(GroundSurface())
        self.factory = ObjectFactory(self.store)
        self.view = SceneViewport(self.store, self)
        self.setCentralWidget(self.view)

        # 2) Панель свойств
        self.props_panel = ObjectPanel(self.store, self)
        self.props_dock = QDockWidget("Свойства", self)
        self.props_dock.setWidget(self.props_panel)
        self.props_dock.setAllowedAreas(Qt.LeftDockWidgetArea | Qt.RightDockWidgetArea)
        self.props_dock.setMinimumWidth(280)
        self.addDockWidget(Qt.RightDockWidgetArea, self.props_dock)

        # 3) Каталог
        self.palette = CatalogPanel(self.factory, self)
        self.palette_dock = QDockWidget("Каталог", self)
        self.palette_dock.setWidget(self.palette)
        self.palette_dock.setAllowedAreas(Qt.LeftDockWidgetArea | Qt.RightDockWidgetArea)
        self.palette_dock.setMinimumWidth(220)
        self.addDockWidget(Qt.LeftDockWidgetArea, self.palette_dock)

        # 4) Тулбар/статус
        self._build_toolbar()
        self.setStatusBar(QStatusBar(self))

        # 5) Подписки
        self.view.objectClicked.connect(self._on_object_clicked)
        self.store.selectionChanged.connect(self.props_panel.load_object)
        self.store.wallsChanged.connect(lambda: self._status(f"Стен: {len(self.store.walls())}"))
        self.store.viewModeChanged.connect(self._sync_actions)
        self.store.wallModeChanged.connect(self._sync_actions)
        self.palette.objectPlaced.connect(self.store.select)
        self.props_panel.moveRequested.connect(
            lambda _: self._status("Перемещение: ведите мышью, клик — поставить"))

        # 6) Стартовое состояние
        self.store.set_2d_view(self.settings.value("view/is2d", False, type=bool))
        self._sync_actions()

    def _build_toolbar(self):
        tb = QToolBar("Панель", self)
        tb.setMovable(False)
        tb.setToolButtonStyle(Qt.ToolButtonTextOnly)
        self.addToolBar(Qt.TopToolBarArea, tb)

        self.act_2d = QAction("Вид 2D", self, checkable=True)
        self.act_2d.setShortcut(QKeySequence("Ctrl+2"))
        self.act_2d.toggled.connect(self.store.set_2d_view)

        self.act_walls = QAction("Рисовать стены", self, checkable=True)
        self.act_walls.setShortcut(QKeySequence("Ctrl+W"))
        self.act_walls.toggled.connect(self.store.set_wall_mode)

        self.act_clear_markers = QAction("Убрать маркеры", self)
        self.act_clear_markers.triggered.connect(self.view.walls.clear_markers)

        self.act_clear_walls = QAction("Удалить стены", self)
        self.act_clear_walls.triggered.connect(self.store.clear_walls)

        for a in (self.act_2d, self.act_walls, self.act_clear_markers, self.act_clear_walls):
            tb.addAction(a)

    def _sync_actions(self, *_):
        for act, on in ((self.act_2d, self.store.is_2d_view), (self.act_walls, self.store.creating_walls)):
            act.blockSignals(True)
            act.setChecked(on)
            act.blockSignals(False)
        self.act_walls.setEnabled(self.store.is_2d_view)
        self._update_status()

    def _on_object_clicked(self, object_id: str):
        try:
            obj = self.store.object(object_id)
        except UnknownObjectError:
            QMessageBox.warning(self, "Объект", "Объект уже удалён.")
            return
        if self.props_dock.isHidden():
            self.props_dock.show()
            self.props_dock.raise_()
        self._status(f"Выбран: {obj.name or obj.id} — {obj.price:.2f} €")

    def _status(self, text: str):
        self.statusBar().showMessage(text, 3000)

    def _update_status(self):
        self.statusBar().showMessage(
            f"Вид: {'2D' if self.store.is_2d_view else '3D'} | "
            f"Стены: {'рисование' if self.store.creating_walls else 'выкл'} | "
            f"Объектов: {len(self.store.objects())}"
        )

    def closeEvent(self, event):
        self.settings.setValue("view/is2d", self.store.is_2d_view)
        self.props_panel.clear()
        self.view.teardown()
        super().closeEvent(event)


def main():
    logging.basicConfig(level=os.environ.get("PLANNER3D_LOG", "INFO").upper(),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = QApplication(sys.argv)
    log.info("Запуск редактора")
    win = MainWindow()
    win.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
