"""Infinite plane intersection.

A plane is a point ``position`` and a unit ``normal``. Only rays travelling
along the normal register a hit:

    denom = dot(normal, direction)
    hit   = denom > PLANE_EPSILON
    t     = dot(position - origin, normal) / denom,  rejected when t < 0

so a plane authored with its normal pointing away from the camera (e.g. a floor
at y = -2 with normal (0, -1, 0)) is visible from above and invisible from
below. The shading normal is the negated normal, which then faces the viewer.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycast.geometry.plane import hit_plane, vec3
    >>> # Use hit_plane within a Taichi kernel
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Minimum dot(normal, direction) for a ray to count as hitting the plane
PLANE_EPSILON = 1e-6


@ti.func
def hit_plane(
    ray_origin: vec3,
    ray_direction: vec3,
    position: vec3,
    normal: vec3,
):
    """Test for ray-plane intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        position: Any point on the plane.
        normal: The plane normal (expected unit length, not re-normalized).

    Returns:
        Tuple of (hit, distance) where hit is 1 on intersection.
    """
    denom = tm.dot(normal, ray_direction)

    did_hit = 0
    distance = 0.0

    if denom > PLANE_EPSILON:
        t = tm.dot(position - ray_origin, normal) / denom
        if t >= 0.0:
            did_hit = 1
            distance = t

    return did_hit, distance


@ti.func
def plane_normal(normal: vec3) -> vec3:
    """Shading normal of a plane: the negated, normalized plane normal."""
    return -tm.normalize(normal)


# =============================================================================
# Batch (NumPy) Counterparts
# =============================================================================


def hit_plane_batch(
    origins: npt.NDArray[np.float64],
    directions: npt.NDArray[np.float64],
    position: npt.NDArray[np.float64],
    normal: npt.NDArray[np.float64],
) -> tuple[npt.NDArray[np.bool_], npt.NDArray[np.float64]]:
    """Vectorized ray-plane test for a batch of rays against one plane.

    Args:
        origins: Ray origins, shape ``(N, 3)``.
        directions: Unit ray directions, shape ``(N, 3)``.
        position: Point on the plane, shape ``(3,)``.
        normal: Plane normal, shape ``(3,)``.

    Returns:
        Tuple of (hit, distance), each of shape ``(N,)``. Distance is zero
        where hit is False.
    """
    denom = np.sum(directions * normal, axis=-1)
    hit = denom > PLANE_EPSILON

    safe_denom = np.where(hit, denom, 1.0)
    t = np.sum((position - origins) * normal, axis=-1) / safe_denom
    hit &= t >= 0.0

    distance = np.where(hit, t, 0.0)
    return hit, distance


def plane_normal_batch(normal: npt.NDArray[np.float64], count: int) -> npt.NDArray[np.float64]:
    """Shading normals for ``count`` points on one plane."""
    unit = -normal / np.linalg.norm(normal)
    return np.broadcast_to(unit, (count, 3))
