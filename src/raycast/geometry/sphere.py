"""Sphere primitive intersection using the geometric method.

The ray-sphere test projects the vector from the ray origin to the sphere
center onto the ray direction, then compares the squared perpendicular
distance against the squared radius:

    L   = center - origin
    adj = dot(L, direction)           (length of the adjacent side)
    d2  = dot(L, L) - adj^2           (squared length of the opposite side)
    thc = sqrt(radius^2 - d2)         (half chord length)
    t0, t1 = adj - thc, adj + thc

The reported distance is always ``min(t0, t1)``, even when that root is
negative (ray origin inside the sphere). This function does NOT filter it:
callers must go through the tracer, whose strictly-positive distance filter
drops such hits. Consuming ``(hit, distance)`` directly without that filter
renders spheres that contain the camera incorrectly.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycast.geometry.sphere import hit_sphere, vec3
    >>> # Use hit_sphere within a Taichi kernel
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    center: vec3,
    radius: ti.f32,
):
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        center: The sphere center.
        radius: The sphere radius.

    Returns:
        Tuple of (hit, distance) where hit is 1 on intersection and distance
        is the near root. The near root may be negative when the origin lies
        inside the sphere.
    """
    line = center - ray_origin
    adjacent = tm.dot(line, ray_direction)
    length2 = tm.dot(line, line) - adjacent * adjacent
    radius2 = radius * radius

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    distance = 0.0

    if length2 <= radius2:
        thc = ti.sqrt(radius2 - length2)
        t0 = adjacent - thc
        t1 = adjacent + thc

        # Both roots behind the origin: sphere is entirely behind the ray
        if not (t0 < 0.0 and t1 < 0.0):
            did_hit = 1
            distance = tm.min(t0, t1)

    return did_hit, distance


@ti.func
def sphere_normal(center: vec3, hit_point: vec3) -> vec3:
    """Outward unit normal of a sphere at a surface point."""
    return tm.normalize(hit_point - center)


# =============================================================================
# Batch (NumPy) Counterparts
# =============================================================================


def hit_sphere_batch(
    origins: npt.NDArray[np.float64],
    directions: npt.NDArray[np.float64],
    center: npt.NDArray[np.float64],
    radius: float,
) -> tuple[npt.NDArray[np.bool_], npt.NDArray[np.float64]]:
    """Vectorized ray-sphere test for a batch of rays against one sphere.

    Same arithmetic and the same negative-root behavior as ``hit_sphere``.

    Args:
        origins: Ray origins, shape ``(N, 3)``.
        directions: Unit ray directions, shape ``(N, 3)``.
        center: Sphere center, shape ``(3,)``.
        radius: Sphere radius.

    Returns:
        Tuple of (hit, distance), each of shape ``(N,)``. Distance is zero
        where hit is False.
    """
    line = center - origins
    adjacent = np.sum(line * directions, axis=-1)
    length2 = np.sum(line * line, axis=-1) - adjacent * adjacent
    radius2 = radius * radius

    hit = length2 <= radius2
    thc = np.sqrt(np.where(hit, radius2 - length2, 0.0))
    t0 = adjacent - thc
    t1 = adjacent + thc
    hit &= ~((t0 < 0.0) & (t1 < 0.0))

    distance = np.where(hit, np.minimum(t0, t1), 0.0)
    return hit, distance


def sphere_normal_batch(
    center: npt.NDArray[np.float64],
    hit_points: npt.NDArray[np.float64],
) -> npt.NDArray[np.float64]:
    """Outward unit normals for a batch of points on one sphere."""
    offset = hit_points - center
    return offset / np.linalg.norm(offset, axis=-1, keepdims=True)
