"""Lambertian shading with a hard shadow test.

For a hit on entity ``e`` along ray ``r`` at distance ``t``:

    hit_point = r.origin + t * r.direction
    normal    = surface normal of e at hit_point
    to_light  = normalize(-light.direction)
    lit       = trace(Ray(hit_point + normal * SHADOW_BIAS, to_light)) misses
    power     = dot(normal, to_light) * (light.intensity if lit else 0)
    color     = e.color * light.color * power * e.albedo / pi

``power`` is not clamped at zero: a surface facing away from the
light yields a negative color, which is left for the image encoder to clamp.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycast.core.shader import shade
    >>> # Use shade within a Taichi kernel after load_entities()/load_light()
"""

import taichi as ti
import taichi.math as tm

from raycast.core.ray import NO_HIT, SHADOW_BIAS, Ray, make_ray, ray_at
from raycast.core.tracer import Intersection, trace
from raycast.scene.store import (
    entity_albedo,
    entity_color,
    entity_normal,
    light_color,
    light_direction,
    light_intensity,
)

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def shade(ray: Ray, intersection: Intersection) -> vec3:
    """Compute the direct-light color of a hit.

    Args:
        ray: The ray that produced the intersection.
        intersection: A hit (``entity_index`` must not be NO_HIT).

    Returns:
        Linear RGB color, unclamped.
    """
    index = intersection.entity_index
    hit_point = ray_at(ray, intersection.distance)
    normal = entity_normal(index, hit_point)
    to_light = tm.normalize(-light_direction[None])

    # Bias along the normal keeps the shadow ray off the surface it starts on
    shadow_ray = make_ray(hit_point + normal * SHADOW_BIAS, to_light)
    in_light = trace(shadow_ray).entity_index == NO_HIT

    intensity = 0.0
    if in_light:
        intensity = light_intensity[None]

    power = tm.dot(normal, to_light) * intensity
    reflected = entity_albedo(index) / tm.pi

    return entity_color(index) * light_color[None] * power * reflected
