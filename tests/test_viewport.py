import pytest
from PySide6.QtCore import QEvent
from PySide6.QtGui import QImage, QPainter
from PySide6.QtWidgets import QApplication

from planner3d import SceneViewport, WallGesture

from tests.helpers import RECT, mouse_event, screen_of


@pytest.fixture
def viewport(store):
    vp = SceneViewport(store)
    vp.resize(800, 600)
    vp.controller.set_viewport_size(800, 600)
    yield vp
    vp.teardown()


def render(vp):
    img = QImage(800, 600, QImage.Format_ARGB32)
    painter = QPainter(img)
    vp.paint_scene(painter, RECT)
    painter.end()
    return img


def test_view_mode_reaches_camera_and_walls(viewport, store):
    store.set_2d_view(True)
    assert viewport.controller.is_2d
    assert viewport.walls.view_2d
    assert viewport.hud.btn_2d.isChecked()
    assert viewport.hud.btn_walls.isEnabled()
    store.set_2d_view(False)
    assert not viewport.controller.is_2d


def test_hud_buttons_drive_store(viewport, store):
    viewport.hud.btn_2d.setChecked(True)
    viewport.hud.btn_walls.setChecked(True)
    assert store.is_2d_view and store.creating_walls
    assert viewport.walls.active


def test_two_clicks_in_viewport_add_a_wall(viewport, store):
    store.set_2d_view(True)
    store.set_wall_mode(True)
    cam = viewport.controller.camera
    a = screen_of(cam, (1, 0, 1))
    b = screen_of(cam, (4, 0, 5))
    assert QApplication.sendEvent(viewport, mouse_event(QEvent.MouseButtonPress, a))
    assert viewport.walls.state == WallGesture.AWAITING_ENDPOINT
    QApplication.sendEvent(viewport, mouse_event(QEvent.MouseMove, b))
    assert viewport.walls.arena.preview is not None
    QApplication.sendEvent(viewport, mouse_event(QEvent.MouseButtonPress, b))
    walls = store.walls()
    assert len(walls) == 1
    assert walls[0].start == pytest.approx((1, 0, 1), abs=1e-6)
    assert walls[0].end == pytest.approx((4, 0, 5), abs=1e-6)
    assert walls[0].length() == pytest.approx(5.0, abs=1e-6)
    assert viewport.walls.arena.preview is None
    assert len(viewport.walls.arena.markers) == 2


def test_click_selects_object(viewport, store, cube):
    clicked = []
    viewport.objectClicked.connect(clicked.append)
    pos = screen_of(viewport.controller.camera, cube.position)
    assert viewport.object_at(pos) == cube.id
    QApplication.sendEvent(viewport, mouse_event(QEvent.MouseButtonPress, pos))
    assert store.selected_id == cube.id
    assert clicked == [cube.id]


def test_moving_object_follows_ground_pick(viewport, store, cube):
    store.set_moving(cube.id)
    height = cube.position[1]
    target = screen_of(viewport.controller.camera, (3, 0, 2))
    QApplication.sendEvent(viewport, mouse_event(QEvent.MouseMove, target))
    pos = store.object(cube.id).position
    assert tuple(pos) == pytest.approx((3, height, 2), abs=1e-6)
    QApplication.sendEvent(viewport, mouse_event(QEvent.MouseButtonPress, target))
    assert store.moving_id is None


@pytest.mark.parametrize("is_2d", [False, True])
def test_frame_renders_with_everything_on(viewport, store, cube, is_2d):
    store.set_2d_view(is_2d)
    store.add_wall((0, 0, 0), (2, 0, 0))
    store.toggle_dimensions(cube.id)
    store.select(cube.id)
    viewport.walls.arena.spawn_marker((1, 0, 1))
    viewport.walls.arena.update_preview((1, 0, 1), (2, 0, 3))
    img = render(viewport)
    assert not img.isNull()
