"""Scene description and storage.

Components:
    entities: Immutable scene description and the packed entity snapshot
    store: Taichi fields holding the uploaded entities and light
    reference: The reference scene (four spheres over a ground plane)
"""

from .entities import (
    DEFAULT_ALBEDO,
    MAX_ENTITIES,
    EntityArrays,
    Light,
    Plane,
    Primitive,
    PrimitiveKind,
    Scene,
    Sphere,
    pack_entities,
)
from .reference import create_reference_scene

# Note: store is NOT imported here since it allocates Taichi fields.

__all__ = [
    "DEFAULT_ALBEDO",
    "MAX_ENTITIES",
    "EntityArrays",
    "Light",
    "Plane",
    "Primitive",
    "PrimitiveKind",
    "Scene",
    "Sphere",
    "create_reference_scene",
    "pack_entities",
]
