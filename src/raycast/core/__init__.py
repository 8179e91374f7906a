"""Core rendering module.

Components:
    ray: Ray data structure, shared constants and vector utilities
    tracer: Nearest-hit linear scan over the entity store
    shader: Lambertian shading with a hard shadow test
    vectorized: NumPy trace and shade pipeline for the thread backend
    integrator: Data-parallel Taichi render kernel
    threaded: Row-segment thread pool renderer
    renderer: Backend selection and the Renderer wrapper
"""

from .ray import FAR, NO_HIT, SHADOW_BIAS, Ray, dot, make_ray, normalize, ray_at, vec3

# Note: the other modules are NOT imported here. tracer, shader and integrator
# declare Taichi fields, which must only happen after ti.init(), and renderer
# depends on the camera package which itself imports from core.ray.
# Import them directly when needed, e.g.:
#   from raycast.core.renderer import Renderer, RenderSettings

__all__ = [
    "FAR",
    "NO_HIT",
    "SHADOW_BIAS",
    "Ray",
    "dot",
    "make_ray",
    "normalize",
    "ray_at",
    "vec3",
]
