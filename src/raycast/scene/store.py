"""GPU-side entity store and light parameters.

The packed ``EntityArrays`` snapshot is uploaded into preallocated Taichi
fields (Structure of Arrays layout) before a kernel launch. Kernels only read
these fields, so every logical thread of the render grid shares one copy of
the scene without per-thread duplication.

Intersection and normal queries dispatch on the stored ``PrimitiveKind`` tag.
A tag that matches no known kind falls back to "no hit" and a zero normal
instead of faulting inside the kernel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycast.scene.entities import pack_entities
    >>> from raycast.scene.store import load_entities, load_light
    >>> load_entities(pack_entities(scene.entities))
    >>> load_light(scene.light)
    >>> # Use intersect_entity / entity_normal within a Taichi kernel
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from raycast.geometry.plane import hit_plane, plane_normal
from raycast.geometry.sphere import hit_sphere, sphere_normal
from raycast.scene.entities import MAX_ENTITIES, EntityArrays, Light, PrimitiveKind

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Kind tags as plain ints for comparison inside kernels
_SPHERE = int(PrimitiveKind.SPHERE)
_PLANE = int(PrimitiveKind.PLANE)

# Entity storage: Structure of Arrays layout for GPU efficiency
entity_kinds = ti.field(dtype=ti.i32, shape=MAX_ENTITIES)
entity_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_ENTITIES)
entity_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_ENTITIES)
entity_albedos = ti.field(dtype=ti.f32, shape=MAX_ENTITIES)
entity_radii = ti.field(dtype=ti.f32, shape=MAX_ENTITIES)
entity_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_ENTITIES)
num_entities = ti.field(dtype=ti.i32, shape=())

# Directional light
light_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
light_color = ti.Vector.field(3, dtype=ti.f32, shape=())
light_intensity = ti.field(dtype=ti.f32, shape=())


def _pad(array: np.ndarray, dtype: type) -> np.ndarray:
    """Copy ``array`` into a zeroed buffer of MAX_ENTITIES rows."""
    padded = np.zeros((MAX_ENTITIES,) + array.shape[1:], dtype=dtype)
    padded[: array.shape[0]] = array
    return padded


def clear_entities() -> None:
    """Remove all entities from the store.

    Resets the entity count to zero. The field data is not cleared but will
    be overwritten by the next load.
    """
    num_entities[None] = 0


def load_entities(arrays: EntityArrays) -> int:
    """Upload a packed entity snapshot into the Taichi fields.

    Args:
        arrays: The packed entities.

    Returns:
        The number of entities loaded.

    Raises:
        RuntimeError: If the snapshot holds more than MAX_ENTITIES entities.
    """
    count = len(arrays)
    if count > MAX_ENTITIES:
        raise RuntimeError(f"Maximum number of entities ({MAX_ENTITIES}) exceeded")

    entity_kinds.from_numpy(_pad(arrays.kinds, np.int32))
    entity_positions.from_numpy(_pad(arrays.positions, np.float32))
    entity_colors.from_numpy(_pad(arrays.colors, np.float32))
    entity_albedos.from_numpy(_pad(arrays.albedos, np.float32))
    entity_radii.from_numpy(_pad(arrays.radii, np.float32))
    entity_normals.from_numpy(_pad(arrays.normals, np.float32))
    num_entities[None] = count
    return count


def load_light(light: Light) -> None:
    """Store the directional light parameters."""
    light_direction[None] = list(light.direction)
    light_color[None] = list(light.color)
    light_intensity[None] = light.intensity


def get_entity_count() -> int:
    """Get the number of entities in the store."""
    return int(num_entities[None])


@ti.func
def intersect_entity(index: ti.i32, ray_origin: vec3, ray_direction: vec3):
    """Intersect a ray with the stored entity at ``index``.

    Args:
        index: Entity index in the store.
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.

    Returns:
        Tuple of (hit, distance). Unknown kinds report no hit.
    """
    kind = entity_kinds[index]
    did_hit = 0
    distance = 0.0

    if kind == _SPHERE:
        did_hit, distance = hit_sphere(
            ray_origin, ray_direction, entity_positions[index], entity_radii[index]
        )
    elif kind == _PLANE:
        did_hit, distance = hit_plane(
            ray_origin, ray_direction, entity_positions[index], entity_normals[index]
        )

    return did_hit, distance


@ti.func
def entity_normal(index: ti.i32, hit_point: vec3) -> vec3:
    """Unit shading normal of the stored entity at a hit point.

    Unknown kinds yield the zero vector.
    """
    kind = entity_kinds[index]
    normal = vec3(0.0, 0.0, 0.0)

    if kind == _SPHERE:
        normal = sphere_normal(entity_positions[index], hit_point)
    elif kind == _PLANE:
        normal = plane_normal(entity_normals[index])

    return normal


@ti.func
def entity_color(index: ti.i32) -> vec3:
    return entity_colors[index]


@ti.func
def entity_albedo(index: ti.i32) -> ti.f32:
    return entity_albedos[index]
