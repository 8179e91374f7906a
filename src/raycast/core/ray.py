"""Ray data structure and vector utilities.

Every function here comes in two forms, one per render backend: a
``@ti.func`` form used inside Taichi kernels, and a ``*_batch`` NumPy form that
operates on ``(N, 3)`` arrays for the row-segment workers.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Entity index meaning "the ray hit nothing"
NO_HIT = -1

# Distance reported alongside NO_HIT
FAR = 1e30

# Offset along the surface normal applied to shadow ray origins
SHADOW_BIAS = 1e-4


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Must be unit length;
            primary rays are normalized by the sensor and shadow rays by the
            shader.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a kernel."""
    return Ray(origin=origin, direction=direction)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length."""
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


# =============================================================================
# Batch (NumPy) Counterparts
# =============================================================================


def dot_batch(a: npt.NDArray[np.float64], b: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Row-wise dot product of two ``(N, 3)`` arrays (one side may be ``(3,)``).

    Args:
        a: First vector array.
        b: Second vector array.

    Returns:
        Array of shape ``(N,)``.
    """
    return np.sum(a * b, axis=-1)


def normalize_batch(v: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Normalize every row of an ``(N, 3)`` array to unit length.

    Zero-length rows come back as NaN, matching ``tm.normalize`` which divides
    by the length without a guard.
    """
    with np.errstate(invalid="ignore", divide="ignore"):
        return v / np.linalg.norm(v, axis=-1, keepdims=True)


def ray_at_batch(
    origins: npt.NDArray[np.float64],
    directions: npt.NDArray[np.float64],
    t: npt.NDArray[np.float64],
) -> npt.NDArray[np.float64]:
    """Evaluate ``origin + t * direction`` for a batch of rays."""
    return origins + directions * t[:, None]
