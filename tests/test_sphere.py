"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside
- Ray missing sphere
- Ray starting inside sphere (negative near root)
- Sphere entirely behind the ray
- Outward normals
- Agreement of the NumPy batch form with the kernel form
"""

import numpy as np
import taichi as ti


def _run_hit_sphere(origin, direction, center, radius):
    """Run hit_sphere in a kernel and return (hit, distance)."""
    from raycast.geometry.sphere import hit_sphere, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        cx: ti.f32, cy: ti.f32, cz: ti.f32,
        r: ti.f32,
    ):
        did_hit, distance = hit_sphere(vec3(ox, oy, oz), vec3(dx, dy, dz), vec3(cx, cy, cz), r)
        hit[None] = did_hit
        t_val[None] = distance

    test_kernel(*origin, *direction, *center, radius)
    return hit[None], t_val[None]


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_hit_sphere_direct_hit(self):
        """Test ray hitting sphere head-on from outside."""
        hit, t = _run_hit_sphere((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert hit == 1
        # Front of the sphere is at z=1, so t=4
        assert abs(t - 4.0) < 1e-5

    def test_hit_sphere_miss(self):
        """Test ray passing well beside the sphere."""
        hit, _ = _run_hit_sphere((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (5.0, 5.0, -5.0), 1.0)
        assert hit == 0

    def test_hit_sphere_off_center(self):
        """Test ray hitting sphere off its center line."""
        hit, t = _run_hit_sphere((0.0, 0.6, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -5.0), 1.0)
        assert hit == 1
        # Half chord is sqrt(1 - 0.36) = 0.8
        assert abs(t - 4.2) < 1e-5

    def test_hit_sphere_from_inside_reports_negative_root(self):
        """A ray starting inside reports the near root, which is negative."""
        hit, t = _run_hit_sphere((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert hit == 1
        assert abs(t + 1.0) < 1e-5

    def test_hit_sphere_behind_ray(self):
        """Test sphere entirely behind the ray origin."""
        hit, _ = _run_hit_sphere((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, 5.0), 1.0)
        assert hit == 0

    def test_hit_sphere_zero_radius_at_center(self):
        """A zero-radius sphere still registers a hit on its exact center."""
        hit, t = _run_hit_sphere((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -3.0), 0.0)
        assert hit == 1
        assert abs(t - 3.0) < 1e-5


class TestSphereNormal:
    """Tests for sphere surface normals."""

    def test_sphere_normal_points_outward(self):
        """Test the normal at the front of a sphere."""
        from raycast.geometry.sphere import sphere_normal, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = sphere_normal(vec3(0.0, 0.0, -5.0), vec3(0.0, 0.0, -3.0))

        test_kernel()
        n = result[None]
        assert abs(n[0]) < 1e-6
        assert abs(n[1]) < 1e-6
        assert abs(n[2] - 1.0) < 1e-6

    def test_sphere_normal_batch_is_unit_length(self):
        """Test that batch normals are unit length and outward."""
        from raycast.geometry.sphere import sphere_normal_batch

        center = np.array([1.0, 2.0, 3.0])
        points = center + np.array([[2.0, 0.0, 0.0], [0.0, -2.0, 0.0], [1.0, 1.0, 1.0]])
        normals = sphere_normal_batch(center, points)

        assert np.allclose(np.linalg.norm(normals, axis=1), 1.0)
        assert np.allclose(normals[0], [1.0, 0.0, 0.0])
        assert np.allclose(normals[1], [0.0, -1.0, 0.0])


class TestSphereBatch:
    """Tests for the NumPy batch intersection."""

    def test_batch_matches_single_cases(self):
        """Hit, miss, inside and behind cases in one batch."""
        from raycast.geometry.sphere import hit_sphere_batch

        origins = np.array(
            [
                [0.0, 0.0, 5.0],
                [5.0, 5.0, 5.0],
                [0.0, 0.0, 0.0],
                [0.0, 0.0, -5.0],
            ]
        )
        directions = np.tile([0.0, 0.0, -1.0], (4, 1))
        hit, distance = hit_sphere_batch(origins, directions, np.zeros(3), 1.0)

        assert hit.tolist() == [True, False, True, False]
        assert distance[0] == 4.0
        assert distance[2] == -1.0
        # Misses carry zero distance
        assert distance[1] == 0.0
        assert distance[3] == 0.0

    def test_batch_agrees_with_kernel(self):
        """Test the batch form against the kernel form for random rays."""
        from raycast.core.ray import normalize_batch
        from raycast.geometry.sphere import hit_sphere_batch

        origins = np.zeros((4, 3))
        directions = normalize_batch(
            np.array([[0.0, 0.0, -1.0], [0.1, 0.1, -1.0], [-0.2, 0.05, -1.0], [0.5, 0.5, -1.0]])
        )
        center = np.array([0.1, -0.2, -4.0])

        hit, distance = hit_sphere_batch(origins, directions, center, 1.0)
        for i in range(4):
            k_hit, k_t = _run_hit_sphere(origins[i], directions[i], center, 1.0)
            assert k_hit == int(hit[i])
            if k_hit:
                assert abs(k_t - distance[i]) < 1e-4
