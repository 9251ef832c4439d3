import math

import numpy as np
import pytest
from PySide6.QtCore import QEvent
from PySide6.QtGui import QFocusEvent
from PySide6.QtWidgets import QApplication

from planner3d import ObjectFactory, ObjectPanel
from planner3d.utils import TEXTURES


@pytest.fixture
def panel(store, cube):
    p = ObjectPanel(store)
    p.load_object(cube.id)
    yield p
    p.clear()


def test_load_fills_fields(panel, cube):
    assert panel.lbl_title.text() == "Свойства: Куб"
    assert [panel.ed_scale[a].text() for a in ("width", "height", "depth")] == ["1", "1", "1"]
    assert panel.lbl_price.text() == "50.00 €"
    assert panel.cmb_texture.currentData() == cube.texture


def test_typing_scale_updates_store_and_price(panel, store, cube):
    panel.ed_scale["width"].setText("2")
    panel._apply_scale("width", "2")
    np.testing.assert_allclose(store.object(cube.id).scale, (2, 1, 1))
    assert panel.lbl_price.text() == "100.00 €"


def test_focus_out_commits_scale(panel, store):
    prices = []
    store.priceChanged.connect(lambda oid, p: prices.append(p))
    QApplication.sendEvent(panel.ed_scale["depth"], QFocusEvent(QEvent.FocusOut))
    assert prices == [50.0]


def test_rotate_button_adds_quarter_turn(panel, store, cube):
    panel.btn_rotate90.click()
    np.testing.assert_allclose(store.object(cube.id).rotation, (math.pi / 2,) * 3)


def test_texture_combo_applies_choice(panel, store, cube):
    idx = panel.cmb_texture.findData("textures/concrete_texture.jpg")
    panel.cmb_texture.setCurrentIndex(idx)
    panel._apply_texture(idx)
    assert store.object(cube.id).texture == "textures/concrete_texture.jpg"


def test_dimensions_button_text_follows_state(panel, store, cube):
    panel.btn_dimensions.click()
    assert store.dimensions_visible(cube.id)
    assert panel.btn_dimensions.text() == "Скрыть размеры"


def test_drag_button_toggles_session(panel):
    panel.btn_drag_rotate.click()
    assert panel.btn_drag_rotate.text() == "Остановить вращение"
    panel.sync.stop_drag_rotation()
    assert panel.btn_drag_rotate.text() == "Вращать мышью"


def test_remove_clears_panel(panel, store, cube):
    closed = []
    panel.closeRequested.connect(lambda: closed.append(1))
    panel.btn_remove.click()
    assert cube.id not in store
    assert panel.sync is None
    assert closed == [1]


def test_move_marks_object_as_moving(panel, store, cube):
    panel.btn_move.click()
    assert store.moving_id == cube.id


def test_external_removal_clears_panel(panel, store, cube):
    store.remove_object(cube.id)
    assert panel.sync is None
    assert panel.lbl_title.text() == "Ничего не выбрано"


def test_texture_list_does_not_grow_across_loads(store, cube):
    factory = ObjectFactory(store)
    other = factory.create_from_entry(factory.catalog[1])
    store.update_texture(cube.id, "textures/custom_wood.png")
    p = ObjectPanel(store)
    for oid in (cube.id, other.id, cube.id, other.id):
        p.load_object(oid)
    assert p.cmb_texture.count() == len(TEXTURES)
    p.load_object(cube.id)
    assert p.cmb_texture.count() == len(TEXTURES) + 1
    assert p.cmb_texture.currentData() == "textures/custom_wood.png"
    p.clear()
