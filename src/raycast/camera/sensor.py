"""Primary ray generation from pixel coordinates.

The camera sits at the world origin looking down -z with no transform. A pixel
``(x, y)`` plus a sub-pixel offset ``(ox, oy)`` maps to sensor coordinates:

    sensor_x = (2 * (x + ox) / width - 1) * aspect_ratio * tan(fov / 2)
    sensor_y = (1 - 2 * (y + oy) / height) * tan(fov / 2)

and the ray direction is ``normalize((sensor_x, sensor_y, -1))``. Pixel
``(0, 0)`` is the top-left corner. Without antialiasing the offset is the pixel
center ``(0.5, 0.5)``; with antialiasing each entry of ``JITTER_TABLE`` is used
once and the four shaded colors are averaged.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycast.camera.sensor import Sensor, primary_ray, sensor_params
    >>> width, height, aspect, scale = sensor_params(scene)
    >>>
    >>> @ti.kernel
    ... def render(w: ti.f32, h: ti.f32, a: ti.f32, s: ti.f32):
    ...     sensor = Sensor(width=w, height=h, aspect_ratio=a, fov_adjustment=s)
    ...     ray = primary_ray(sensor, 0, 0, 0.5, 0.5)  # Top-left pixel center
"""

import math

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raycast.core.ray import Ray, make_ray, normalize_batch, vec3
from raycast.scene.entities import Scene

# Offset of the pixel center, used when antialiasing is off
PIXEL_CENTER = (0.5, 0.5)

# Fixed sub-pixel offsets, one sample per entry when antialiasing is on
JITTER_TABLE = (
    (-0.25, 0.75),
    (0.75, 1.0 / 3.0),
    (-0.75, -0.25),
    (0.25, -0.75),
)


@ti.dataclass
class Sensor:
    """Sensor parameters shared by every primary ray of a render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        aspect_ratio: Width divided by height.
        fov_adjustment: ``tan(fov / 2)`` scale applied to sensor coordinates.
    """

    width: ti.f32
    height: ti.f32
    aspect_ratio: ti.f32
    fov_adjustment: ti.f32


def fov_adjustment(field_of_view: float) -> float:
    """Scale factor ``tan(fov / 2)`` for a field of view in degrees."""
    return math.tan(math.radians(field_of_view) / 2.0)


def sensor_params(scene: Scene) -> tuple[float, float, float, float]:
    """Flatten a scene's sensor parameters for passing as kernel arguments.

    Returns:
        Tuple of (width, height, aspect_ratio, fov_adjustment), in the field
        order of ``Sensor``.
    """
    return (
        float(scene.width),
        float(scene.height),
        scene.aspect_ratio,
        fov_adjustment(scene.field_of_view),
    )


@ti.func
def primary_ray(sensor: Sensor, x: ti.i32, y: ti.i32, offset_x: ti.f32, offset_y: ti.f32) -> Ray:
    """Generate the camera ray through a point of pixel ``(x, y)``.

    Args:
        sensor: Resolution and field of view of the render.
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).
        offset_x: Horizontal sub-pixel offset (0.5 = center).
        offset_y: Vertical sub-pixel offset (0.5 = center).

    Returns:
        A unit-direction ray from the origin.
    """
    sensor_x = ((ti.cast(x, ti.f32) + offset_x) / sensor.width * 2.0 - 1.0) * sensor.aspect_ratio
    sensor_y = 1.0 - (ti.cast(y, ti.f32) + offset_y) / sensor.height * 2.0

    scale = sensor.fov_adjustment
    direction = tm.normalize(vec3(sensor_x * scale, sensor_y * scale, -1.0))
    return make_ray(vec3(0.0, 0.0, 0.0), direction)


# =============================================================================
# Batch (NumPy) Counterpart
# =============================================================================


def primary_rays_batch(
    scene: Scene,
    xs: npt.NDArray[np.int_],
    ys: npt.NDArray[np.int_],
    offset: tuple[float, float] = PIXEL_CENTER,
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """Generate camera rays for a batch of pixels.

    Args:
        scene: The scene providing resolution and field of view.
        xs: Pixel columns, shape (N,).
        ys: Pixel rows, shape (N,).
        offset: Sub-pixel offset shared by every pixel in the batch.

    Returns:
        Tuple of (origins, directions), each of shape (N, 3).
    """
    scale = fov_adjustment(scene.field_of_view)
    sensor_x = ((xs + offset[0]) / scene.width * 2.0 - 1.0) * scene.aspect_ratio
    sensor_y = 1.0 - (ys + offset[1]) / scene.height * 2.0

    directions = np.stack(
        [sensor_x * scale, sensor_y * scale, np.full(sensor_x.shape, -1.0)],
        axis=-1,
    )
    origins = np.zeros_like(directions)
    return origins, normalize_batch(directions)
