"""Nearest-hit tracing over the entity store.

``trace`` performs a brute-force linear scan over every entity, keeping the
smallest strictly positive distance. The comparison is a strict ``<`` so, for
two entities at exactly the same distance, the one earlier in scene order
wins. The same scan serves camera rays and shadow rays: a shadow test is
simply ``trace(shadow_ray).entity_index == NO_HIT``.

The positive-distance filter here is what discards the negative near root the
sphere test reports for rays starting inside a sphere.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycast.core.tracer import NO_HIT, trace
    >>> # Use trace within a Taichi kernel after load_entities()
"""

import taichi as ti
import taichi.math as tm

from raycast.core.ray import FAR, NO_HIT, Ray
from raycast.scene.store import intersect_entity, num_entities

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class Intersection:
    """Result of tracing a ray through the scene.

    Attributes:
        distance: Distance along the ray to the nearest hit. FAR on a miss.
        entity_index: Index of the hit entity, or NO_HIT (-1).
    """

    distance: ti.f32
    entity_index: ti.i32


@ti.func
def trace(ray: Ray) -> Intersection:
    """Find the nearest positive-distance intersection along a ray.

    Args:
        ray: The ray to trace (unit direction).

    Returns:
        An Intersection; ``entity_index`` is NO_HIT when nothing qualifies.
    """
    closest = FAR
    index = NO_HIT

    for i in range(num_entities[None]):
        did_hit, distance = intersect_entity(i, ray.origin, ray.direction)
        if did_hit == 1 and distance > 0.0 and distance < closest:
            closest = distance
            index = i

    return Intersection(distance=closest, entity_index=index)

