"""Row-segment parallel renderer.

The image rows are split into contiguous, disjoint segments, one per worker
thread. Each worker renders its rows with the vectorized NumPy pipeline and
writes only ``out[start:stop]``, so no locks are needed: write sets are
disjoint by construction, and the packed entity snapshot every worker reads is
immutable. Waiting on every future is the only synchronization; it is also
where a worker's exception surfaces.

NumPy releases the GIL inside its array kernels, which is what lets the
threads overlap.

Example:
    >>> from raycast.core.threaded import render_threaded
    >>> from raycast.scene.reference import create_reference_scene
    >>>
    >>> scene = create_reference_scene(640, 360)
    >>> image = render_threaded(scene, workers=8, antialias=True)
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import numpy.typing as npt

from raycast.camera.sensor import JITTER_TABLE, PIXEL_CENTER, primary_rays_batch
from raycast.core.ray import NO_HIT
from raycast.core.vectorized import shade_batch, trace_batch
from raycast.scene.entities import EntityArrays, Scene, pack_entities

logger = logging.getLogger(__name__)


def partition_rows(height: int, segments: int) -> list[tuple[int, int]]:
    """Split ``range(height)`` into contiguous ``(start, stop)`` row slices.

    Slices are disjoint, cover every row exactly once, and differ in size by
    at most one row. Never returns more slices than rows.

    Args:
        height: Number of image rows.
        segments: Requested number of slices (at least 1).

    Returns:
        List of (start, stop) pairs in ascending order.

    Raises:
        ValueError: If segments is less than 1.
    """
    if segments < 1:
        raise ValueError(f"segments must be at least 1, got {segments}")

    segments = min(segments, height)
    base, extra = divmod(height, segments)

    slices = []
    start = 0
    for i in range(segments):
        stop = start + base + (1 if i < extra else 0)
        slices.append((start, stop))
        start = stop
    return slices


def _render_samples(
    scene: Scene,
    arrays: EntityArrays,
    xs: npt.NDArray[np.int_],
    ys: npt.NDArray[np.int_],
    offset: tuple[float, float],
    background: npt.NDArray[np.float64],
) -> npt.NDArray[np.float64]:
    """Trace and shade one camera ray per (x, y) pair."""
    origins, directions = primary_rays_batch(scene, xs, ys, offset)
    distance, index = trace_batch(arrays, origins, directions)

    colors = np.tile(background, (xs.shape[0], 1))
    hit = index != NO_HIT
    if np.any(hit):
        colors[hit] = shade_batch(
            arrays,
            scene.light,
            origins[hit],
            directions[hit],
            distance[hit],
            index[hit],
        )
    return colors


def render_rows(
    scene: Scene,
    arrays: EntityArrays,
    start: int,
    stop: int,
    out: npt.NDArray[np.float32],
    antialias: bool = False,
    background: tuple[float, float, float] = (0.0, 0.0, 0.0),
) -> None:
    """Render rows ``[start, stop)`` of the image into ``out``.

    Args:
        scene: The scene to render.
        arrays: Packed entities of ``scene``.
        start: First row (inclusive).
        stop: Last row (exclusive).
        out: The full (height, width, 3) output buffer. Only
            ``out[start:stop]`` is written.
        antialias: Average the four JITTER_TABLE samples per pixel.
        background: Color for pixels whose ray hits nothing.
    """
    ys, xs = np.mgrid[start:stop, 0 : scene.width]
    xs = xs.ravel()
    ys = ys.ravel()
    bg = np.asarray(background, dtype=np.float64)

    offsets = JITTER_TABLE if antialias else (PIXEL_CENTER,)
    color = np.zeros((xs.shape[0], 3), dtype=np.float64)
    for offset in offsets:
        color += _render_samples(scene, arrays, xs, ys, offset, bg)
    color /= len(offsets)

    out[start:stop] = color.reshape(stop - start, scene.width, 3)


def render_threaded(
    scene: Scene,
    workers: int | None = None,
    antialias: bool = False,
    background: tuple[float, float, float] = (0.0, 0.0, 0.0),
) -> npt.NDArray[np.float32]:
    """Render a scene with a pool of row-segment worker threads.

    Args:
        scene: The scene to render.
        workers: Number of row segments / threads. Defaults to the CPU count.
        antialias: Average the four JITTER_TABLE samples per pixel.
        background: Color for pixels whose ray hits nothing.

    Returns:
        Linear, unclamped image of shape (height, width, 3), float32.

    Raises:
        ValueError: If workers is less than 1.
    """
    if workers is None:
        workers = os.cpu_count() or 1

    arrays = pack_entities(scene.entities)
    out = np.empty((scene.height, scene.width, 3), dtype=np.float32)
    segments = partition_rows(scene.height, workers)
    logger.debug("Rendering %d rows in %d segments", scene.height, len(segments))

    with ThreadPoolExecutor(max_workers=len(segments)) as pool:
        futures = [
            pool.submit(render_rows, scene, arrays, start, stop, out, antialias, background)
            for start, stop in segments
        ]
        for future in futures:
            future.result()

    return out
