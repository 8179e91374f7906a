"""Geometry module containing primitive shapes and intersection routines.

Primitives:
    sphere: Ray-sphere intersection using the geometric method
    plane: Infinite plane intersection, visible from one side only
"""

from .plane import PLANE_EPSILON, hit_plane, hit_plane_batch, plane_normal, plane_normal_batch
from .sphere import hit_sphere, hit_sphere_batch, sphere_normal, sphere_normal_batch

__all__ = [
    "PLANE_EPSILON",
    "hit_plane",
    "hit_plane_batch",
    "hit_sphere",
    "hit_sphere_batch",
    "plane_normal",
    "plane_normal_batch",
    "sphere_normal",
    "sphere_normal_batch",
]
