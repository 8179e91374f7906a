"""Tests for nearest-hit tracing.

Covers both the Taichi scan over the entity store and the NumPy batch scan:
- Nearest hit regardless of scene order
- Exact ties resolved in favor of the earlier entity
- Negative near roots (camera inside a sphere) filtered out
- Empty scenes
"""

import numpy as np
import taichi as ti


def _sphere(z, radius=1.0, color=(1.0, 0.0, 0.0)):
    from raycast.scene.entities import Sphere

    return Sphere(position=(0.0, 0.0, z), color=color, radius=radius)


def _trace_kernel(entities, origin=(0.0, 0.0, 0.0), direction=(0.0, 0.0, -1.0)):
    """Load entities and trace a single ray through the store."""
    from raycast.core.ray import make_ray, vec3
    from raycast.core.tracer import trace
    from raycast.scene.entities import pack_entities
    from raycast.scene.store import load_entities

    load_entities(pack_entities(entities))

    index = ti.field(dtype=ti.i32, shape=())
    distance = ti.field(dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32):
        # Outer loop keeps the entity scan inside trace() serial
        for _ in range(1):
            result = trace(make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz)))
            index[None] = result.entity_index
            distance[None] = result.distance

    test_kernel(*origin, *direction)
    return index[None], distance[None]


class TestTrace:
    """Tests for the Taichi trace function."""

    def test_entity_count_follows_load_and_clear(self):
        """The store reports how many entities were uploaded."""
        from raycast.scene.entities import pack_entities
        from raycast.scene.store import clear_entities, get_entity_count, load_entities

        assert load_entities(pack_entities((_sphere(-5.0), _sphere(-10.0)))) == 2
        assert get_entity_count() == 2

        clear_entities()
        assert get_entity_count() == 0

    def test_empty_scene_misses(self):
        """Test that tracing an empty store reports NO_HIT and FAR."""
        from raycast.core.ray import FAR, NO_HIT

        index, distance = _trace_kernel(())
        assert index == NO_HIT
        assert distance > FAR * 0.99

    def test_nearest_hit_first_in_order(self):
        """Test the near sphere is found when it comes first."""
        index, distance = _trace_kernel((_sphere(-5.0), _sphere(-10.0)))
        assert index == 0
        assert abs(distance - 4.0) < 1e-5

    def test_nearest_hit_last_in_order(self):
        """Test the near sphere is found when it comes last."""
        index, distance = _trace_kernel((_sphere(-10.0), _sphere(-5.0)))
        assert index == 1
        assert abs(distance - 4.0) < 1e-5

    def test_exact_tie_keeps_earlier_entity(self):
        """Two entities at exactly the same distance resolve to the first."""
        red = _sphere(-5.0, color=(1.0, 0.0, 0.0))
        blue = _sphere(-5.0, color=(0.0, 0.0, 1.0))
        index, _ = _trace_kernel((_sphere(-20.0), red, blue))
        assert index == 1

    def test_inside_sphere_is_not_a_hit(self):
        """The negative near root of a sphere around the origin is ignored."""
        from raycast.core.ray import NO_HIT

        index, _ = _trace_kernel((_sphere(0.0, radius=10.0),))
        assert index == NO_HIT

    def test_inside_sphere_sees_inner_object(self):
        """An object inside the enclosing sphere is still found."""
        index, distance = _trace_kernel((_sphere(0.0, radius=10.0), _sphere(-5.0)))
        assert index == 1
        assert abs(distance - 4.0) < 1e-5

    def test_plane_and_sphere(self):
        """A ray toward the floor hits the plane, not the sphere."""
        from raycast.scene.entities import Plane

        floor = Plane(position=(0.0, -2.0, 0.0), color=(1.0, 1.0, 1.0), normal=(0.0, -1.0, 0.0))
        index, distance = _trace_kernel((_sphere(-5.0), floor), direction=(0.0, -1.0, 0.0))
        assert index == 1
        assert abs(distance - 2.0) < 1e-5


class TestTraceBatch:
    """Tests for the NumPy batch trace."""

    def test_batch_nearest_and_miss(self):
        """Test hits and misses in one batch."""
        from raycast.core.ray import FAR, NO_HIT
        from raycast.core.vectorized import trace_batch
        from raycast.scene.entities import pack_entities

        arrays = pack_entities((_sphere(-10.0), _sphere(-5.0)))
        origins = np.zeros((2, 3))
        directions = np.array([[0.0, 0.0, -1.0], [0.0, 1.0, 0.0]])

        distance, index = trace_batch(arrays, origins, directions)
        assert index.tolist() == [1, NO_HIT]
        assert distance[0] == 4.0
        assert distance[1] == FAR

    def test_batch_tie_keeps_earlier_entity(self):
        """Test exact ties in the batch trace."""
        from raycast.core.vectorized import trace_batch
        from raycast.scene.entities import pack_entities

        arrays = pack_entities((_sphere(-5.0), _sphere(-5.0)))
        _, index = trace_batch(arrays, np.zeros((1, 3)), np.array([[0.0, 0.0, -1.0]]))
        assert index.tolist() == [0]

    def test_batch_inside_sphere_filtered(self):
        """Test the negative near root is filtered in the batch trace."""
        from raycast.core.ray import NO_HIT
        from raycast.core.vectorized import trace_batch
        from raycast.scene.entities import pack_entities

        arrays = pack_entities((_sphere(0.0, radius=10.0),))
        _, index = trace_batch(arrays, np.zeros((1, 3)), np.array([[0.0, 0.0, -1.0]]))
        assert index.tolist() == [NO_HIT]

    def test_batch_empty_scene(self):
        """Test tracing against no entities."""
        from raycast.core.ray import NO_HIT
        from raycast.core.vectorized import trace_batch
        from raycast.scene.entities import pack_entities

        distance, index = trace_batch(pack_entities(()), np.zeros((3, 3)), np.ones((3, 3)))
        assert np.all(index == NO_HIT)
        assert distance.shape == (3,)
