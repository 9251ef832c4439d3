import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtWidgets import QApplication

from planner3d import GroundSurface, ObjectFactory, SceneStore, CatalogEntry


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def store():
    s = SceneStore()
    s.set_ground(GroundSurface())
    return s


@pytest.fixture
def cube(store):
    factory = ObjectFactory(store, [CatalogEntry("Куб", "models/cube.glb", 50.0, (1.0, 1.0, 1.0),
                                                 "textures/Cube_BaseColor.png", "Куб")])
    return factory.create_from_entry(factory.catalog[0])

