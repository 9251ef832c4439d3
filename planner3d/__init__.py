from .models import SceneObject, WallSegment, CameraState, CatalogEntry, ProjectionMode, WallGesture, RotationGesture
from .camera import ViewportCamera, CameraController
from .picking import GroundSurface, GroundPicker
from .scenegraph import SceneGraph
from .walls import WallGestureMachine
from .state import SceneStore, UnknownObjectError
from .transform_sync import ObjectTransformSync, RotationDragSession
from .factory import ObjectFactory, DEFAULT_CATALOG
from .pricing import volume_price
from .scene import SceneViewport
from .palette import CatalogPanel
from .properties import ObjectPanel

__all__ = [
    "SceneObject", "WallSegment", "CameraState", "CatalogEntry",
    "ProjectionMode", "WallGesture", "RotationGesture",
    "ViewportCamera", "CameraController", "GroundSurface", "GroundPicker",
    "SceneGraph", "WallGestureMachine", "SceneStore", "UnknownObjectError",
    "ObjectTransformSync", "RotationDragSession", "ObjectFactory", "DEFAULT_CATALOG",
    "volume_price", "SceneViewport", "CatalogPanel", "ObjectPanel",
]
