"""Unified renderer over the two execution backends.

``render(scene, settings)`` is the single entry point of the core: it takes an
immutable Scene and returns a fully populated linear float32 buffer of shape
(height, width, 3). ``RenderSettings.backend`` selects where the per-pixel
work runs:

    "taichi"   one Taichi kernel launch, one logical thread per pixel
    "threads"  a thread pool over disjoint row segments (NumPy)

The Taichi backend requires ``ti.init()`` before the first render; its module
is only imported when that backend is selected, so the thread backend never
allocates Taichi fields.

The Renderer class wraps a scene and settings and keeps the last image around
for conversion and saving.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from raycast.core.renderer import Renderer, RenderSettings
    >>> from raycast.scene.reference import create_reference_scene
    >>>
    >>> renderer = Renderer(create_reference_scene(640, 360), RenderSettings(antialias=True))
    >>> image = renderer.render()
    >>> renderer.save_image("output.png")
"""

import logging
from dataclasses import dataclass
from typing import Literal

import numpy as np
import numpy.typing as npt

from raycast.core.threaded import render_threaded
from raycast.scene.entities import Scene

logger = logging.getLogger(__name__)

Backend = Literal["taichi", "threads"]

BACKENDS: tuple[Backend, ...] = ("taichi", "threads")


@dataclass(frozen=True)
class RenderSettings:
    """How to render a scene.

    Attributes:
        backend: "taichi" (data-parallel kernel) or "threads" (row segments).
        antialias: Average four jittered samples per pixel.
        workers: Row segments for the "threads" backend. None uses the CPU
            count. Ignored by the "taichi" backend.
        background: Color of pixels whose ray hits nothing.
    """

    backend: Backend = "taichi"
    antialias: bool = False
    workers: int | None = None
    background: tuple[float, float, float] = (0.0, 0.0, 0.0)


def render(scene: Scene, settings: RenderSettings | None = None) -> npt.NDArray[np.float32]:
    """Render a scene.

    Args:
        scene: The scene to render.
        settings: Backend and sampling options. Defaults to RenderSettings().

    Returns:
        Linear, unclamped image of shape (height, width, 3), float32.

    Raises:
        ValueError: If the backend name is unknown.
    """
    if settings is None:
        settings = RenderSettings()

    logger.debug(
        "Rendering %dx%d, %d entities, backend=%s, antialias=%s",
        scene.width,
        scene.height,
        len(scene.entities),
        settings.backend,
        settings.antialias,
    )

    if settings.backend == "taichi":
        from raycast.core.integrator import render_image

        return render_image(scene, antialias=settings.antialias, background=settings.background)

    if settings.backend == "threads":
        return render_threaded(
            scene,
            workers=settings.workers,
            antialias=settings.antialias,
            background=settings.background,
        )

    raise ValueError(f"Unknown backend {settings.backend!r}, expected one of {BACKENDS}")


class Renderer:
    """Render a fixed scene and keep the resulting image.

    Attributes:
        scene: The scene being rendered.
        settings: The render settings.
    """

    def __init__(self, scene: Scene, settings: RenderSettings | None = None) -> None:
        self.scene = scene
        self.settings = settings if settings is not None else RenderSettings()
        self._image: npt.NDArray[np.float32] | None = None

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.scene.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.scene.height

    @property
    def has_image(self) -> bool:
        """Whether render() has completed at least once."""
        return self._image is not None

    def render(self) -> npt.NDArray[np.float32]:
        """Render the scene and return the linear image."""
        self._image = render(self.scene, self.settings)
        return self._image

    def get_image_numpy(self, gamma: float = 1.0) -> npt.NDArray[np.float32]:
        """Get the last image clamped to [0, 1], optionally gamma encoded.

        Raises:
            RuntimeError: If render() has not been called.
        """
        from raycast.preview.display import process_image_for_display

        return process_image_for_display(self._require_image(), gamma=gamma)

    def get_image_uint8(self, gamma: float = 1.0) -> npt.NDArray[np.uint8]:
        """Get the last image as an 8-bit array of shape (height, width, 3).

        Raises:
            RuntimeError: If render() has not been called.
        """
        from raycast.preview.export import image_to_uint8

        return image_to_uint8(self._require_image(), gamma=gamma)

    def save_image(self, filepath: str, gamma: float = 1.0) -> None:
        """Save the last image as a PNG.

        Raises:
            RuntimeError: If render() has not been called.
        """
        from raycast.preview.export import save_png

        save_png(self._require_image(), filepath, gamma=gamma)

    def _require_image(self) -> npt.NDArray[np.float32]:
        if self._image is None:
            raise RuntimeError("Nothing rendered yet. Call render() first.")
        return self._image

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"backend={self.settings.backend!r}, antialias={self.settings.antialias})"
        )
