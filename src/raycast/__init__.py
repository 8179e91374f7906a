"""Minimal offline ray tracer built on Taichi and NumPy.

This package renders a still image by casting one (or four jittered) rays per
pixel into a small scene of spheres and planes, shading the nearest hit with a
single directional light and a hard shadow test.

Subpackages:
    core: Ray utilities, tracer, shader and the two render backends
    geometry: Analytic sphere and plane intersection
    scene: Typed primitives, scene description and the packed entity store
    camera: Primary ray generation and the antialiasing jitter table
    preview: Clamping, PNG export and Matplotlib preview
"""

__version__ = "0.1.0"
