from __future__ import annotations
import itertools
from typing import List, Optional

from .models import CatalogEntry, SceneObject
from .pricing import volume_price
from .utils import DEFAULT_TEXTURE, vec3

DEFAULT_CATALOG: List[CatalogEntry] = [
    CatalogEntry("Куб", "models/cube.glb", 50.0, (1.0, 1.0, 1.0), DEFAULT_TEXTURE,
                 "Базовый куб 1×1×1 м."),
    CatalogEntry("Стол", "models/table.glb", 120.0, (1.6, 0.75, 0.8), DEFAULT_TEXTURE,
                 "Обеденный стол."),
    CatalogEntry("Шкаф", "models/wardrobe.glb", 300.0, (1.2, 2.0, 0.6), "textures/concrete_texture.jpg",
                 "Шкаф для одежды."),
    CatalogEntry("Кровать", "models/bed.glb", 450.0, (1.6, 0.5, 2.0), DEFAULT_TEXTURE,
                 "Двуспальная кровать."),
]


class ObjectFactory:
    def __init__(self, store, catalog: Optional[List[CatalogEntry]] = None):
        self.store = store
        self.catalog = list(catalog if catalog is not None else DEFAULT_CATALOG)
        self._ids = itertools.count(1)

    def _next_id(self) -> str:
        while True:
            oid = f"obj-{next(self._ids)}"
            if oid not in self.store:
                return oid

    def create_from_entry(self, entry: CatalogEntry, position=(0.0, 0.0, 0.0)) -> SceneObject:
        obj = SceneObject(
            id=self._next_id(), asset=entry.asset, name=entry.name,
            position=vec3(position), texture=entry.texture or DEFAULT_TEXTURE,
            price=volume_price(entry.base_price, (1.0, 1.0, 1.0)),
            base_price=entry.base_price, base_size=entry.base_size, details=entry.details,
        )
        # объект ставим на пол, а не утапливаем наполовину
        obj.position[1] = max(obj.position[1], obj.dimensions[1] / 2.0)
        return self.store.add_object(obj)
