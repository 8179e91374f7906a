"""Reference scene configuration.

Four colored spheres at increasing depth over a grey ground plane, lit by a
white directional light coming from above and behind the camera, slightly
from the right. The ground plane at y = -5, on which the blue sphere rests, has its
normal pointing down, which is the orientation that makes it visible from a
camera above it.

Example:
    >>> from raycast.scene.reference import create_reference_scene
    >>> scene = create_reference_scene(1920, 1080)
"""

from dataclasses import dataclass

from raycast.scene.entities import DEFAULT_ALBEDO, Light, Plane, Scene, Sphere

# =============================================================================
# Reference Scene Constants
# =============================================================================

DEFAULT_WIDTH = 1920
DEFAULT_HEIGHT = 1080
DEFAULT_FIELD_OF_VIEW = 75.0

LIGHT_DIRECTION = (-0.25, -1.0, -1.0)
LIGHT_COLOR = (1.0, 1.0, 1.0)
LIGHT_INTENSITY = 20.0

GROUND_HEIGHT = -5.0
GROUND_COLOR = (0.6, 0.6, 0.6)


@dataclass
class ReferenceSceneParams:
    """Tunable parts of the reference scene.

    Attributes:
        light_intensity: Intensity of the directional light.
        light_color: RGB color of the light.
        include_ground: Whether to add the ground plane.
    """

    light_intensity: float = LIGHT_INTENSITY
    light_color: tuple[float, float, float] = LIGHT_COLOR
    include_ground: bool = True


def create_reference_scene(
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    field_of_view: float = DEFAULT_FIELD_OF_VIEW,
    params: ReferenceSceneParams | None = None,
) -> Scene:
    """Create the reference scene.

    Args:
        width: Output width in pixels.
        height: Output height in pixels.
        field_of_view: Field of view in degrees.
        params: Optional overrides for the light and ground plane.

    Returns:
        The immutable Scene.
    """
    if params is None:
        params = ReferenceSceneParams()

    entities = [
        Sphere(position=(0.0, 0.0, -5.0), color=(1.0, 0.0, 0.0), radius=1.0),
        Sphere(position=(0.0, 0.3, -3.0), color=(0.0, 1.0, 1.0), radius=0.5),
        Sphere(position=(8.0, 0.0, -10.0), color=(0.0, 1.0, 0.0), radius=1.0),
        Sphere(position=(-8.0, -4.0, -16.0), color=(0.0, 0.0, 1.0), radius=1.0),
    ]
    if params.include_ground:
        entities.append(
            Plane(
                position=(0.0, GROUND_HEIGHT, 0.0),
                color=GROUND_COLOR,
                normal=(0.0, -1.0, 0.0),
                albedo=DEFAULT_ALBEDO,
            )
        )

    return Scene(
        width=width,
        height=height,
        field_of_view=field_of_view,
        light=Light(
            direction=LIGHT_DIRECTION,
            color=params.light_color,
            intensity=params.light_intensity,
        ),
        entities=tuple(entities),
    )
