"""Data-parallel render kernel.

One Taichi kernel launch renders the whole image: the outermost
``ti.ndrange(height, width)`` loop is parallelized with one logical thread per
pixel. Each thread generates its primary ray(s), traces, shades, and writes
exactly one cell of the color buffer. Threads only read the entity and light
fields, which are uploaded once by ``setup_scene`` before the launch.

The color buffer is indexed ``[row, column]`` with row 0 at the top, so the
active region copied out with ``to_numpy()`` is already in row-major image
order.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from raycast.core.integrator import render_image
    >>> from raycast.scene.reference import create_reference_scene
    >>>
    >>> scene = create_reference_scene(640, 360)
    >>> image = render_image(scene, antialias=True)  # (360, 640, 3) float32
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raycast.camera.sensor import JITTER_TABLE, PIXEL_CENTER, Sensor, primary_ray, sensor_params
from raycast.core.ray import NO_HIT
from raycast.core.shader import shade
from raycast.core.tracer import trace
from raycast.scene.entities import EntityArrays, Scene, pack_entities
from raycast.scene.store import load_entities, load_light

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Number of samples averaged per pixel when antialiasing
NUM_SAMPLES = len(JITTER_TABLE)

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions of the last render
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Color buffer, indexed [row, column]
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Flag to track if a render has been written to the buffer
_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Result of a single-pixel render
_pixel_result = ti.Vector.field(3, dtype=ti.f32, shape=())


def _check_dimensions(width: int, height: int) -> None:
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )


def _check_render_target_initialized() -> None:
    """Check if an image has been rendered and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Nothing rendered yet. Call render_image() first.")


def clear_render_target() -> None:
    """Clear the color buffer and forget the last render."""
    _color_buffer.fill(0.0)
    _render_target_initialized[None] = 0


def setup_scene(scene: Scene) -> EntityArrays:
    """Upload a scene's entities and light into the Taichi fields.

    Args:
        scene: The scene to render.

    Returns:
        The packed entity snapshot that was uploaded.

    Raises:
        TypeError: If an entity is neither a Sphere nor a Plane.
        RuntimeError: If the scene holds more than MAX_ENTITIES entities.
    """
    arrays = pack_entities(scene.entities)
    load_entities(arrays)
    load_light(scene.light)
    return arrays


# =============================================================================
# Per-Pixel Pipeline
# =============================================================================


@ti.func
def _sample(
    sensor: Sensor,
    x: ti.i32,
    y: ti.i32,
    offset_x: ti.f32,
    offset_y: ti.f32,
    background: vec3,
) -> vec3:
    """Trace and shade one camera ray through pixel (x, y)."""
    ray = primary_ray(sensor, x, y, offset_x, offset_y)
    intersection = trace(ray)

    color = background
    if intersection.entity_index != NO_HIT:
        color = shade(ray, intersection)
    return color


@ti.func
def render_pixel_impl(
    sensor: Sensor,
    x: ti.i32,
    y: ti.i32,
    antialias: ti.i32,
    background: vec3,
) -> vec3:
    """Compute the final color of pixel (x, y).

    With antialiasing, one sample per JITTER_TABLE entry is averaged.
    """
    color = vec3(0.0, 0.0, 0.0)
    if antialias == 1:
        for s in ti.static(range(NUM_SAMPLES)):
            color += _sample(sensor, x, y, JITTER_TABLE[s][0], JITTER_TABLE[s][1], background)
        color = color / NUM_SAMPLES
    else:
        color = _sample(sensor, x, y, PIXEL_CENTER[0], PIXEL_CENTER[1], background)
    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_kernel(
    width: ti.i32,
    height: ti.i32,
    sensor_width: ti.f32,
    sensor_height: ti.f32,
    aspect_ratio: ti.f32,
    fov_adjustment: ti.f32,
    antialias: ti.i32,
    bg_r: ti.f32,
    bg_g: ti.f32,
    bg_b: ti.f32,
):
    """Render every pixel of the image into the color buffer."""
    for y, x in ti.ndrange(height, width):
        sensor = Sensor(
            width=sensor_width,
            height=sensor_height,
            aspect_ratio=aspect_ratio,
            fov_adjustment=fov_adjustment,
        )
        _color_buffer[y, x] = render_pixel_impl(sensor, x, y, antialias, vec3(bg_r, bg_g, bg_b))


@ti.kernel
def _render_single_pixel(
    x: ti.i32,
    y: ti.i32,
    sensor_width: ti.f32,
    sensor_height: ti.f32,
    aspect_ratio: ti.f32,
    fov_adjustment: ti.f32,
    antialias: ti.i32,
    bg_r: ti.f32,
    bg_g: ti.f32,
    bg_b: ti.f32,
):
    """Render a specific pixel into _pixel_result. Used for testing and debugging."""
    # Single-iteration outer loop keeps the entity scan in trace() serial
    for _ in range(1):
        sensor = Sensor(
            width=sensor_width,
            height=sensor_height,
            aspect_ratio=aspect_ratio,
            fov_adjustment=fov_adjustment,
        )
        _pixel_result[None] = render_pixel_impl(sensor, x, y, antialias, vec3(bg_r, bg_g, bg_b))


# =============================================================================
# Public Rendering API
# =============================================================================


def render_image(
    scene: Scene,
    antialias: bool = False,
    background: tuple[float, float, float] = (0.0, 0.0, 0.0),
) -> npt.NDArray[np.float32]:
    """Render a scene on the Taichi backend.

    Args:
        scene: The scene to render.
        antialias: Average the four JITTER_TABLE samples per pixel.
        background: Color written to pixels whose ray hits nothing.

    Returns:
        Linear, unclamped image of shape (height, width, 3), float32.

    Raises:
        ValueError: If the resolution exceeds the preallocated buffer.
    """
    _check_dimensions(scene.width, scene.height)
    setup_scene(scene)

    _image_width[None] = scene.width
    _image_height[None] = scene.height

    logger.debug(
        "Launching render kernel for %dx%d (antialias=%s)", scene.width, scene.height, antialias
    )
    _render_kernel(
        scene.width,
        scene.height,
        *sensor_params(scene),
        int(antialias),
        *background,
    )
    _render_target_initialized[None] = 1

    return get_image_numpy()


def render_pixel(
    scene: Scene,
    x: int,
    y: int,
    antialias: bool = False,
    background: tuple[float, float, float] = (0.0, 0.0, 0.0),
) -> tuple[float, float, float]:
    """Render a single pixel of a scene.

    This is a Python-callable function for testing. For production rendering,
    use render_image() which processes all pixels in parallel.

    Returns:
        Tuple of (R, G, B) color values.
    """
    setup_scene(scene)
    _render_single_pixel(x, y, *sensor_params(scene), int(antialias), *background)
    color = _pixel_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def get_image_dimensions() -> tuple[int, int]:
    """Get the dimensions of the last render as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Copy the active region of the color buffer out as a NumPy array.

    Returns:
        Array of shape (height, width, 3) with dtype float32. Values are
        linear and not clamped.

    Raises:
        RuntimeError: If nothing has been rendered yet.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()
    return np.ascontiguousarray(full_image[:height, :width, :], dtype=np.float32)
