import numpy as np
import pytest
from PySide6.QtCore import QPointF, QRectF

from planner3d import CameraController, GroundPicker, GroundSurface
from planner3d.picking import pointer_to_ndc

from tests.helpers import RECT, screen_of


@pytest.fixture
def ctl():
    c = CameraController()
    c.set_viewport_size(RECT.width(), RECT.height())
    c.set_mode(True)
    return c


def test_pointer_to_ndc_corners_and_center():
    assert pointer_to_ndc(QPointF(0, 0), RECT) == (-1, 1)
    assert pointer_to_ndc(QPointF(800, 600), RECT) == (1, -1)
    assert pointer_to_ndc(QPointF(400, 300), RECT) == (0, 0)
    assert pointer_to_ndc(QPointF(801, 10), RECT) is None
    assert pointer_to_ndc(QPointF(0, 0), QRectF(0, 0, 0, 0)) is None


def test_center_pick_in_2d_hits_origin(ctl):
    hit = GroundPicker().pick(QPointF(400, 300), RECT, ctl.camera, GroundSurface(), is_2d=True)
    np.testing.assert_allclose(hit, (0, 0, 0), atol=1e-6)
    assert hit[1] == 0.0


def test_pick_recovers_projected_world_point(ctl):
    target = (-2.0, 0.0, 1.0)
    pos = screen_of(ctl.camera, target)
    hit = GroundPicker().pick(pos, RECT, ctl.camera, GroundSurface(), is_2d=True)
    np.testing.assert_allclose(hit, target, atol=1e-6)


def test_2d_pick_is_pinned_to_ground_level(ctl):
    raised = GroundSurface(center=(0.0, 0.3, 0.0))
    for px, py in ((10, 10), (400, 300), (790, 20), (123, 456)):
        hit = GroundPicker().pick(QPointF(px, py), RECT, ctl.camera, raised, is_2d=True)
        assert hit is not None
        assert hit[1] == 0.0


def test_3d_pick_keeps_surface_height():
    c = CameraController()
    c.set_viewport_size(RECT.width(), RECT.height())
    c.mount()
    raised = GroundSurface(center=(0.0, 0.3, 0.0))
    hit = GroundPicker().pick(QPointF(400, 300), RECT, c.camera, raised, is_2d=False)
    assert hit[1] == pytest.approx(0.3)


def test_no_ground_means_no_point(ctl):
    assert GroundPicker().pick(QPointF(400, 300), RECT, ctl.camera, None, is_2d=True) is None


def test_pointer_outside_viewport_means_no_point(ctl):
    assert GroundPicker().pick(QPointF(-5, 300), RECT, ctl.camera, GroundSurface(), True) is None


def test_ray_above_horizon_misses():
    c = CameraController()
    c.set_viewport_size(600, 600)
    c.mount()
    rect = QRectF(0, 0, 600, 600)
    assert GroundPicker().pick(QPointF(300, 0), rect, c.camera, GroundSurface()) is None


def test_pick_outside_surface_extent_misses(ctl):
    small = GroundSurface(width=1.0, depth=1.0)
    assert GroundPicker().pick(QPointF(5, 5), RECT, ctl.camera, small, True) is None
    assert GroundPicker().pick(QPointF(400, 300), RECT, ctl.camera, small, True) is not None
