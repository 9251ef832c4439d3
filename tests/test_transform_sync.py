import math

import numpy as np
import pytest
from PySide6.QtCore import QEvent, QObject, QPointF
from PySide6.QtWidgets import QApplication, QWidget

from planner3d import ObjectTransformSync, RotationDragSession, RotationGesture
from planner3d.utils import ROTATION_SPEED

from tests.helpers import mouse_event


@pytest.fixture
def sync(store, cube):
    s = ObjectTransformSync(store, cube.id)
    yield s
    s.close()


def test_mirror_starts_from_object(sync, cube):
    assert (sync.width, sync.height, sync.depth) == (1.0, 1.0, 1.0)
    assert sync.texture == cube.texture
    assert sync.price == 50.0
    assert sync.rotation_state == RotationGesture.IDLE


def test_keystroke_propagates_scale_and_reprices(sync, store, cube):
    sync.set_scale_text("width", "2")
    np.testing.assert_allclose(store.object(cube.id).scale, (2, 1, 1))
    assert store.object(cube.id).price == 100.0
    assert sync.price == 100.0


@pytest.mark.parametrize("text", ["abc", "", "-3", "nan", "inf"])
def test_invalid_scale_input_becomes_zero(sync, store, cube, text):
    assert sync.set_scale_text("height", text) == 0.0
    assert store.object(cube.id).scale[1] == 0.0
    assert store.object(cube.id).price == 0.0


def test_comma_decimal_is_accepted(sync):
    assert sync.set_scale_text("depth", "1,5") == 1.5


def test_keystroke_and_blur_both_reprice(sync, store):
    prices = []
    store.priceChanged.connect(lambda oid, p: prices.append(p))
    sync.set_scale_text("width", "3")
    sync.commit_scale()
    assert prices == [150.0, 150.0]


def test_unknown_axis_rejected(sync):
    with pytest.raises(ValueError):
        sync.set_scale_text("diagonal", "1")


def test_external_change_resyncs_mirror(sync, store, cube):
    changes = []
    sync.changed.connect(lambda: changes.append(1))
    store.update_scale(cube.id, (3, 2, 1))
    store.update_rotation(cube.id, (0.1, 0.2, 0.3))
    store.update_texture(cube.id, "textures/concrete_texture.jpg")
    assert (sync.width, sync.height, sync.depth) == (3.0, 2.0, 1.0)
    np.testing.assert_allclose(sync.rotation, (0.1, 0.2, 0.3))
    assert sync.texture == "textures/concrete_texture.jpg"
    assert len(changes) == 3


def test_set_texture_propagates(sync, store, cube):
    sync.set_texture("textures/concrete_texture.jpg")
    assert store.object(cube.id).texture == "textures/concrete_texture.jpg"


def test_rotate_quarter_adds_to_every_axis(sync, store, cube):
    sync.rotate_quarter()
    sync.rotate_quarter()
    np.testing.assert_allclose(store.object(cube.id).rotation, (math.pi, math.pi, math.pi))


def test_drag_rotation_accumulates_moves(sync, store, cube):
    session = sync.start_drag_rotation(source=QObject())
    assert sync.rotation_state == RotationGesture.DRAGGING
    np.testing.assert_allclose(sync.drag_base, (0, 0, 0))
    session.move_by(10, 4)
    session.move_by(-3, 6)
    k = ROTATION_SPEED
    np.testing.assert_allclose(store.object(cube.id).rotation, (-k * 10, k * 7, 0))
    sync.stop_drag_rotation()
    assert sync.rotation_state == RotationGesture.IDLE
    session.move_by(100, 100)
    np.testing.assert_allclose(store.object(cube.id).rotation, (-k * 10, k * 7, 0))


def test_drag_uses_global_pointer_deltas(sync, store, cube):
    session = sync.start_drag_rotation(origin=QPointF(100, 100), source=QObject())
    session.move_to(QPointF(110, 95))
    session.move_to(QPointF(110, 95))
    k = ROTATION_SPEED
    np.testing.assert_allclose(store.object(cube.id).rotation, (5 * k, 10 * k, 0))


def test_any_press_ends_drag_and_removes_filter(sync, store, cube, qapp):
    session = sync.start_drag_rotation()
    target = QWidget()
    states = []
    sync.dragStateChanged.connect(states.append)
    consumed = QApplication.sendEvent(target, mouse_event(QEvent.MouseButtonPress, QPointF(5, 5)))
    assert consumed
    assert not session.active
    assert sync.rotation_state == RotationGesture.IDLE
    assert states == [False]
    QApplication.sendEvent(target, mouse_event(QEvent.MouseMove, QPointF(50, 50)))
    np.testing.assert_allclose(store.object(cube.id).rotation, (0, 0, 0))


def test_session_released_on_abnormal_exit():
    deltas = []
    source = QObject()
    with pytest.raises(RuntimeError):
        with RotationDragSession(deltas.append, source=source) as session:
            assert session.active
            raise RuntimeError("boom")
    assert not session.active
    session.move_by(1, 1)
    assert deltas == []


def test_toggle_dimensions_flips_local_and_store(sync, store, cube):
    toggled = []
    store.dimensionsToggled.connect(toggled.append)
    sync.toggle_dimensions()
    assert sync.dimensions_visible and store.dimensions_visible(cube.id)
    sync.toggle_dimensions()
    assert not sync.dimensions_visible
    assert toggled == [cube.id, cube.id]


def test_close_stops_observing(store, cube):
    s = ObjectTransformSync(store, cube.id)
    s.close()
    store.update_scale(cube.id, (4, 4, 4))
    assert s.width == 1.0


def test_price_never_decreases_when_axis_grows(sync, store, cube):
    for axis in ("width", "height", "depth"):
        sync.set_scale(1, 1, 1)
        last = store.object(cube.id).price
        for v in ("1.1", "1.5", "2", "7.25"):
            sync.set_scale_text(axis, v)
            price = store.object(cube.id).price
            assert price >= last
            last = price


def test_observers_see_scale_and_price_together(sync, store, cube):
    seen = []
    store.objectChanged.connect(
        lambda oid: seen.append((tuple(store.object(oid).scale), store.object(oid).price)))
    sync.set_scale_text("width", "2")
    assert seen == [((2.0, 1.0, 1.0), 100.0)]


def test_external_dimension_toggle_updates_mirror(sync, store, cube):
    changes = []
    sync.changed.connect(lambda: changes.append(1))
    store.toggle_dimensions(cube.id)
    assert sync.dimensions_visible
    store.toggle_dimensions(cube.id)
    assert not sync.dimensions_visible
    assert len(changes) == 2
