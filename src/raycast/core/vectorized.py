"""NumPy implementation of the trace and shade pipeline.

These functions mirror ``raycast.core.tracer`` and ``raycast.core.shader``
operation for operation, but work on whole batches of rays at once so a
row-segment worker can process its rows with a handful of array operations
per entity. Arithmetic is done in float64.

This module declares no Taichi fields and can be used without ``ti.init()``.
"""

import numpy as np
import numpy.typing as npt

from raycast.core.ray import FAR, NO_HIT, SHADOW_BIAS, dot_batch, normalize_batch, ray_at_batch
from raycast.geometry.plane import hit_plane_batch, plane_normal_batch
from raycast.geometry.sphere import hit_sphere_batch, sphere_normal_batch
from raycast.scene.entities import EntityArrays, Light, PrimitiveKind

FloatArray = npt.NDArray[np.float64]


def intersect_entity_batch(
    arrays: EntityArrays,
    index: int,
    origins: FloatArray,
    directions: FloatArray,
) -> tuple[npt.NDArray[np.bool_], FloatArray]:
    """Intersect a batch of rays with one packed entity.

    Unknown kinds report no hit for every ray.
    """
    kind = arrays.kinds[index]
    if kind == PrimitiveKind.SPHERE:
        return hit_sphere_batch(origins, directions, arrays.positions[index], arrays.radii[index])
    if kind == PrimitiveKind.PLANE:
        return hit_plane_batch(origins, directions, arrays.positions[index], arrays.normals[index])

    count = origins.shape[0]
    return np.zeros(count, dtype=bool), np.zeros(count, dtype=np.float64)


def entity_normals_batch(
    arrays: EntityArrays,
    index: int,
    hit_points: FloatArray,
) -> FloatArray:
    """Shading normals of one packed entity at a batch of points.

    Unknown kinds yield zero vectors.
    """
    kind = arrays.kinds[index]
    if kind == PrimitiveKind.SPHERE:
        return sphere_normal_batch(arrays.positions[index], hit_points)
    if kind == PrimitiveKind.PLANE:
        return plane_normal_batch(arrays.normals[index], hit_points.shape[0])
    return np.zeros_like(hit_points)


def trace_batch(
    arrays: EntityArrays,
    origins: FloatArray,
    directions: FloatArray,
) -> tuple[FloatArray, npt.NDArray[np.int32]]:
    """Find the nearest positive-distance hit for a batch of rays.

    Args:
        arrays: The packed entity snapshot.
        origins: Ray origins, shape (N, 3).
        directions: Unit ray directions, shape (N, 3).

    Returns:
        Tuple of (distance, entity_index), each of shape (N,). Misses carry
        FAR and NO_HIT.
    """
    count = origins.shape[0]
    closest = np.full(count, FAR, dtype=np.float64)
    index = np.full(count, NO_HIT, dtype=np.int32)

    for i in range(len(arrays)):
        hit, distance = intersect_entity_batch(arrays, i, origins, directions)
        # Strict comparison: earlier entities win exact ties
        closer = hit & (distance > 0.0) & (distance < closest)
        closest = np.where(closer, distance, closest)
        index = np.where(closer, i, index)

    return closest, index


def shade_batch(
    arrays: EntityArrays,
    light: Light,
    origins: FloatArray,
    directions: FloatArray,
    distance: FloatArray,
    index: npt.NDArray[np.int32],
) -> FloatArray:
    """Shade a batch of hits.

    Every entry of ``index`` must be a valid entity index; callers filter out
    misses first.

    Returns:
        Linear RGB colors, shape (N, 3), unclamped.
    """
    hit_points = ray_at_batch(origins, directions, distance)

    normals = np.zeros_like(hit_points)
    for i in np.unique(index):
        mask = index == i
        normals[mask] = entity_normals_batch(arrays, int(i), hit_points[mask])

    to_light = normalize_batch(-np.asarray(light.direction, dtype=np.float64)[None, :])
    to_light = np.broadcast_to(to_light, hit_points.shape)

    shadow_origins = hit_points + normals * SHADOW_BIAS
    _, blocker = trace_batch(arrays, shadow_origins, to_light)
    intensity = np.where(blocker == NO_HIT, light.intensity, 0.0)

    power = dot_batch(normals, to_light) * intensity
    reflected = arrays.albedos[index] / np.pi

    light_color = np.asarray(light.color, dtype=np.float64)
    return arrays.colors[index] * light_color * (power * reflected)[:, None]
