"""Unit tests for scene-level intersection.

Tests cover:
- Object table storage, kinds and material assignment
- Object contract dispatch (intersection_check, surface_normal)
- Nearest hit selection across spheres and planes
- Scene-order tie-break and the HIT_EPSILON lower bound
- Shadow ray queries (any_hit)
"""

import pytest
import taichi as ti


def _nearest(origin, direction):
    """Run find_nearest for one ray and return (hit, t, object_index)."""
    from phongtracer.core.ray import vec3
    from phongtracer.scene.intersection import find_nearest

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f64, shape=())
    index = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(ox: ti.f64, oy: ti.f64, oz: ti.f64, dx: ti.f64, dy: ti.f64, dz: ti.f64):
        result = find_nearest(vec3(ox, oy, oz), vec3(dx, dy, dz))
        hit[None] = result.hit
        t_val[None] = result.t
        index[None] = result.object_index

    test_kernel(*origin, *direction)
    return hit[None], t_val[None], index[None]


def _any_hit(origin, direction):
    """Run any_hit for one ray and return the flag."""
    from phongtracer.core.ray import vec3
    from phongtracer.scene.intersection import any_hit

    hit = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(ox: ti.f64, oy: ti.f64, oz: ti.f64, dx: ti.f64, dy: ti.f64, dz: ti.f64):
        hit[None] = any_hit(vec3(ox, oy, oz), vec3(dx, dy, dz))

    test_kernel(*origin, *direction)
    return hit[None]


class TestObjectStorage:
    """Tests for the object table."""

    def test_add_objects_in_order(self):
        """Test spheres and planes share one index sequence."""
        from phongtracer.scene.intersection import (
            ObjectKind,
            add_plane,
            add_sphere,
            get_object_count,
            get_object_kind,
        )

        assert add_sphere((0.0, 0.0, 0.0), 1.0, material_id=0) == 0
        assert add_plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), material_id=0) == 1
        assert add_sphere((5.0, 0.0, 0.0), 1.0, material_id=0) == 2
        assert get_object_count() == 3
        assert get_object_kind(0) == ObjectKind.SPHERE
        assert get_object_kind(1) == ObjectKind.PLANE
        assert get_object_kind(2) == ObjectKind.SPHERE

    def test_clear_objects(self):
        """Test clearing empties the table."""
        from phongtracer.scene.intersection import add_sphere, clear_objects, get_object_count

        add_sphere((0.0, 0.0, 0.0), 1.0, material_id=0)
        clear_objects()
        assert get_object_count() == 0

    def test_material_assignment(self):
        """Test the last material assigned to an object wins."""
        from phongtracer.scene.intersection import (
            add_sphere,
            get_object_material,
            set_object_material,
        )

        idx = add_sphere((0.0, 0.0, 0.0), 1.0, material_id=3)
        assert get_object_material(idx) == 3
        set_object_material(idx, 1)
        set_object_material(idx, 2)
        assert get_object_material(idx) == 2

    def test_invalid_object_index_raises(self):
        """Test accessors reject indices outside the table."""
        from phongtracer.scene.intersection import (
            add_sphere,
            get_object_kind,
            get_object_material,
            set_object_material,
        )

        add_sphere((0.0, 0.0, 0.0), 1.0, material_id=0)
        with pytest.raises(ValueError):
            get_object_kind(1)
        with pytest.raises(ValueError):
            get_object_material(-1)
        with pytest.raises(ValueError):
            set_object_material(5, 0)

    def test_capacity_exceeded_raises(self):
        """Test adding past MAX_OBJECTS raises RuntimeError."""
        from phongtracer.scene.intersection import MAX_OBJECTS, add_sphere

        for i in range(MAX_OBJECTS):
            add_sphere((float(i), 0.0, 0.0), 0.1, material_id=0)
        with pytest.raises(RuntimeError):
            add_sphere((0.0, 0.0, 0.0), 0.1, material_id=0)


class TestObjectDispatch:
    """Tests for dispatch of the object contract by kind."""

    def test_intersection_check_dispatch(self):
        """Test intersection_check uses the right primitive for each kind."""
        from phongtracer.core.ray import vec3
        from phongtracer.scene.intersection import add_plane, add_sphere, intersection_check

        add_sphere((0.0, 0.0, 100.0), 50.0, material_id=0)
        add_plane((0.0, -10.0, 0.0), (0.0, 1.0, 0.0), material_id=0)

        sphere_t = ti.field(dtype=ti.f64, shape=())
        plane_t = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            sphere_t[None] = intersection_check(0, vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, 1.0)).t
            plane_t[None] = intersection_check(1, vec3(0.0, 0.0, 0.0), vec3(0.0, -1.0, 0.0)).t

        test_kernel()
        assert sphere_t[None] == pytest.approx(50.0, abs=1e-9)
        assert plane_t[None] == pytest.approx(10.0, abs=1e-12)

    def test_surface_normal_dispatch(self):
        """Test surface_normal uses the right primitive for each kind."""
        from phongtracer.core.ray import vec3
        from phongtracer.scene.intersection import add_plane, add_sphere, surface_normal

        add_sphere((0.0, 0.0, 100.0), 50.0, material_id=0)
        add_plane((0.0, -10.0, 0.0), (0.0, 1.0, 0.0), material_id=0)

        sphere_n = ti.Vector.field(3, dtype=ti.f64, shape=())
        plane_n = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            sphere_n[None] = surface_normal(0, vec3(50.0, 0.0, 100.0))
            plane_n[None] = surface_normal(1, vec3(3.0, -10.0, 7.0))

        test_kernel()
        assert tuple(sphere_n[None]) == pytest.approx((1.0, 0.0, 0.0))
        assert tuple(plane_n[None]) == pytest.approx((0.0, 1.0, 0.0))


class TestFindNearest:
    """Tests for the nearest-hit search."""

    def test_empty_scene_misses(self):
        """Test a scene without objects never reports a hit."""
        hit, _, index = _nearest((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 0
        assert index == -1

    def test_nearest_of_two_spheres(self):
        """Test the closer sphere wins regardless of insertion order."""
        from phongtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, 200.0), 50.0, material_id=0)
        add_sphere((0.0, 0.0, 100.0), 20.0, material_id=1)

        hit, t, index = _nearest((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 1
        assert index == 1
        assert t == pytest.approx(80.0, abs=1e-9)

    def test_sphere_in_front_of_plane(self):
        """Test a sphere occludes a plane behind it."""
        from phongtracer.scene.intersection import add_plane, add_sphere

        add_plane((0.0, 0.0, 500.0), (0.0, 0.0, -1.0), material_id=0)
        add_sphere((0.0, 0.0, 100.0), 50.0, material_id=1)

        hit, t, index = _nearest((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 1
        assert index == 1
        assert t == pytest.approx(50.0, abs=1e-9)

        # Beside the sphere the plane is visible
        hit, t, index = _nearest((0.0, 100.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 1
        assert index == 0
        assert t == pytest.approx(500.0, abs=1e-9)

    def test_tie_goes_to_first_object(self):
        """Test coincident objects resolve to the one added first."""
        from phongtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, 100.0), 50.0, material_id=0)
        add_sphere((0.0, 0.0, 100.0), 50.0, material_id=1)

        hit, _, index = _nearest((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 1
        assert index == 0

    def test_hits_within_epsilon_are_ignored(self):
        """Test a hit at t <= HIT_EPSILON does not count."""
        from phongtracer.scene.intersection import HIT_EPSILON, add_plane

        add_plane((0.0, 0.0, HIT_EPSILON / 2.0), (0.0, 0.0, -1.0), material_id=0)

        hit, _, _ = _nearest((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 0

    def test_hits_beyond_epsilon_count(self):
        """Test a hit just past HIT_EPSILON is reported."""
        from phongtracer.scene.intersection import HIT_EPSILON, add_plane

        add_plane((0.0, 0.0, HIT_EPSILON * 2.0), (0.0, 0.0, -1.0), material_id=0)

        hit, t, _ = _nearest((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 1
        assert t == pytest.approx(HIT_EPSILON * 2.0, rel=1e-9)

    def test_epsilon_skips_to_next_object(self):
        """Test an ignored near hit lets a farther object win."""
        from phongtracer.scene.intersection import HIT_EPSILON, add_plane

        add_plane((0.0, 0.0, HIT_EPSILON / 2.0), (0.0, 0.0, -1.0), material_id=0)
        add_plane((0.0, 0.0, 10.0), (0.0, 0.0, -1.0), material_id=0)

        hit, t, index = _nearest((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 1
        assert index == 1
        assert t == pytest.approx(10.0, abs=1e-12)


class TestAnyHit:
    """Tests for shadow ray queries."""

    def test_no_objects(self):
        """Test any_hit is false for an empty scene."""
        assert _any_hit((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)) == 0

    def test_blocked(self):
        """Test any_hit detects an object along the ray."""
        from phongtracer.scene.intersection import add_sphere

        add_sphere((0.0, 100.0, 0.0), 10.0, material_id=0)
        assert _any_hit((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)) == 1

    def test_not_blocked(self):
        """Test any_hit ignores objects off the ray."""
        from phongtracer.scene.intersection import add_sphere

        add_sphere((100.0, 100.0, 0.0), 10.0, material_id=0)
        assert _any_hit((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)) == 0

    def test_surface_point_does_not_block_itself(self):
        """Test a ray leaving a sphere surface outward is not blocked by it."""
        from phongtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, 0.0), 50.0, material_id=0)
        assert _any_hit((0.0, 50.0, 0.0), (0.0, 1.0, 0.0)) == 0

    def test_no_upper_distance_bound(self):
        """Test objects at any distance along the ray count as blockers."""
        from phongtracer.scene.intersection import add_sphere

        add_sphere((0.0, 1.0e6, 0.0), 10.0, material_id=0)
        assert _any_hit((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)) == 1
