"""Scene description: primitives, light and the packed entity snapshot.

Primitives form a closed sum type, ``Primitive = Sphere | Plane``. Anything
else is rejected when the scene is packed, so the render backends only ever
see the two kinds enumerated by ``PrimitiveKind``.

``pack_entities`` turns the ordered entity tuple into a structure-of-arrays
``EntityArrays`` snapshot. Its arrays are marked read-only: the same snapshot
is handed to every row-segment worker and uploaded once into the Taichi
fields, and nobody may mutate it during a render.

Example:
    >>> from raycast.scene.entities import Light, Plane, Scene, Sphere
    >>> scene = Scene(
    ...     width=320,
    ...     height=240,
    ...     field_of_view=75.0,
    ...     light=Light(direction=(-0.25, -1.0, -1.0), color=(1, 1, 1), intensity=20.0),
    ...     entities=(
    ...         Sphere(position=(0, 0, -5), color=(1, 0, 0), radius=1.0),
    ...         Plane(position=(0, -2, 0), color=(0.5, 0.5, 0.5), normal=(0, -1, 0)),
    ...     ),
    ... )
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Union

import numpy as np
import numpy.typing as npt

Vec3 = tuple[float, float, float]

# Diffuse reflectance used when a primitive does not specify one
DEFAULT_ALBEDO = 0.18

# Maximum number of entities supported by the packed store
MAX_ENTITIES = 1024


class PrimitiveKind(IntEnum):
    """Tag stored alongside each packed entity for intersection dispatch."""

    SPHERE = 0
    PLANE = 1


def _as_vec3(value: Iterable[float]) -> Vec3:
    x, y, z = (float(c) for c in value)
    return (x, y, z)


@dataclass(frozen=True)
class Sphere:
    """A sphere primitive.

    Attributes:
        position: Center of the sphere.
        color: Linear RGB surface color.
        radius: Sphere radius. Not validated; a zero radius still reports a
            hit at the exact center.
        albedo: Diffuse reflectance.
    """

    position: Vec3
    color: Vec3
    radius: float
    albedo: float = DEFAULT_ALBEDO

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", _as_vec3(self.position))
        object.__setattr__(self, "color", _as_vec3(self.color))
        object.__setattr__(self, "radius", float(self.radius))
        object.__setattr__(self, "albedo", float(self.albedo))


@dataclass(frozen=True)
class Plane:
    """An infinite plane primitive.

    Attributes:
        position: Any point on the plane.
        color: Linear RGB surface color.
        normal: Plane normal, expected to be unit length. It is stored as
            given; only the shading normal is normalized.
        albedo: Diffuse reflectance.
    """

    position: Vec3
    color: Vec3
    normal: Vec3
    albedo: float = DEFAULT_ALBEDO

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", _as_vec3(self.position))
        object.__setattr__(self, "color", _as_vec3(self.color))
        object.__setattr__(self, "normal", _as_vec3(self.normal))
        object.__setattr__(self, "albedo", float(self.albedo))


Primitive = Union[Sphere, Plane]


@dataclass(frozen=True)
class Light:
    """A directional light.

    Attributes:
        direction: Direction the light travels (from light toward the scene).
            Need not be normalized; shading normalizes it.
        color: Linear RGB light color.
        intensity: Non-negative scalar intensity.
    """

    direction: Vec3
    color: Vec3
    intensity: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", _as_vec3(self.direction))
        object.__setattr__(self, "color", _as_vec3(self.color))
        object.__setattr__(self, "intensity", float(self.intensity))
        if self.intensity < 0.0:
            raise ValueError(f"Light intensity must be non-negative, got {self.intensity}")


@dataclass(frozen=True)
class Scene:
    """Everything a render needs. Immutable for the lifetime of a render.

    Attributes:
        width: Output width in pixels.
        height: Output height in pixels.
        field_of_view: Field of view in degrees, in the open interval (0, 180).
        light: The single directional light.
        entities: Ordered primitives. Order only breaks exact distance ties.
    """

    width: int
    height: int
    field_of_view: float
    light: Light
    entities: tuple[Primitive, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entities", tuple(self.entities))
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Resolution must be positive, got {self.width}x{self.height}"
            )
        if not 0.0 < self.field_of_view < 180.0:
            raise ValueError(
                f"Field of view must be in (0, 180) degrees, got {self.field_of_view}"
            )

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> Scene:
        """Build a scene from a plain mapping.

        The mapping mirrors the scene descriptor::

            {
                "width": 640, "height": 480, "field_of_view_degrees": 75.0,
                "light": {"direction": [...], "color": [...], "intensity": 20.0},
                "entities": [
                    {"kind": "sphere", "position": [...], "color": [...], "radius": 1.0},
                    {"kind": "plane", "position": [...], "color": [...], "normal": [...]},
                ],
            }

        Args:
            config: The scene descriptor. The field of view is read from
                ``field_of_view_degrees``, or from ``field_of_view`` when that
                key is absent.

        Returns:
            The corresponding Scene.

        Raises:
            ValueError: If an entity kind is not "sphere" or "plane".
            KeyError: If a required key is missing.
        """
        entities: list[Primitive] = []
        for entry in config.get("entities", []):
            kind = entry["kind"]
            albedo = entry.get("albedo", DEFAULT_ALBEDO)
            if kind == "sphere":
                entities.append(
                    Sphere(entry["position"], entry["color"], entry["radius"], albedo)
                )
            elif kind == "plane":
                entities.append(
                    Plane(entry["position"], entry["color"], entry["normal"], albedo)
                )
            else:
                raise ValueError(f"Unknown primitive kind: {kind!r}")

        if "field_of_view_degrees" in config:
            field_of_view = config["field_of_view_degrees"]
        else:
            field_of_view = config["field_of_view"]

        light = config["light"]
        return cls(
            width=int(config["width"]),
            height=int(config["height"]),
            field_of_view=float(field_of_view),
            light=Light(light["direction"], light["color"], light["intensity"]),
            entities=tuple(entities),
        )


# =============================================================================
# Packed Entity Snapshot
# =============================================================================


@dataclass(frozen=True)
class EntityArrays:
    """Structure-of-arrays snapshot of a scene's entities.

    Index ``i`` in every array refers to ``scene.entities[i]``. Fields that do
    not apply to an entity's kind are zero.

    Attributes:
        kinds: PrimitiveKind tags, shape (N,).
        positions: Positions, shape (N, 3).
        colors: Linear RGB colors, shape (N, 3).
        albedos: Diffuse reflectances, shape (N,).
        radii: Sphere radii, shape (N,).
        normals: Plane normals, shape (N, 3).
    """

    kinds: npt.NDArray[np.int32]
    positions: npt.NDArray[np.float64]
    colors: npt.NDArray[np.float64]
    albedos: npt.NDArray[np.float64]
    radii: npt.NDArray[np.float64]
    normals: npt.NDArray[np.float64]

    def __len__(self) -> int:
        return int(self.kinds.shape[0])


def pack_entities(entities: Iterable[Primitive]) -> EntityArrays:
    """Pack primitives into a read-only EntityArrays snapshot.

    Args:
        entities: Ordered primitives.

    Returns:
        The packed snapshot.

    Raises:
        TypeError: If an entity is neither a Sphere nor a Plane.
        RuntimeError: If there are more than MAX_ENTITIES entities.
    """
    entities = list(entities)
    count = len(entities)
    if count > MAX_ENTITIES:
        raise RuntimeError(f"Maximum number of entities ({MAX_ENTITIES}) exceeded")

    kinds = np.zeros(count, dtype=np.int32)
    positions = np.zeros((count, 3), dtype=np.float64)
    colors = np.zeros((count, 3), dtype=np.float64)
    albedos = np.zeros(count, dtype=np.float64)
    radii = np.zeros(count, dtype=np.float64)
    normals = np.zeros((count, 3), dtype=np.float64)

    for i, entity in enumerate(entities):
        if isinstance(entity, Sphere):
            kinds[i] = PrimitiveKind.SPHERE
            radii[i] = entity.radius
        elif isinstance(entity, Plane):
            kinds[i] = PrimitiveKind.PLANE
            normals[i] = entity.normal
        else:
            raise TypeError(f"Unsupported primitive type: {type(entity).__name__}")
        positions[i] = entity.position
        colors[i] = entity.color
        albedos[i] = entity.albedo

    for array in (kinds, positions, colors, albedos, radii, normals):
        array.setflags(write=False)

    return EntityArrays(
        kinds=kinds,
        positions=positions,
        colors=colors,
        albedos=albedos,
        radii=radii,
        normals=normals,
    )
