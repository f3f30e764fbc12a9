"""Tests for scene storage, lights and scene-level queries.

Tests cover:
- Adding spheres, planes and lights to the fields
- Nearest-hit selection and tie-breaking
- Shadow queries, including the light's own sphere being skipped
- The host-side Scene and Light containers
"""

import pytest
import taichi as ti


def _nearest(origin, direction):
    from src.whitted.scene.intersection import intersect_nearest, vec3

    result = ti.field(dtype=ti.i32, shape=2)
    distance = ti.field(dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3):
        rec = intersect_nearest(o, ti.math.normalize(d))
        result[0] = rec.hit
        result[1] = rec.index
        distance[None] = rec.t

    test_kernel(vec3(*origin), vec3(*direction))
    return result[0], result[1], distance[None]


def _occluded(origin, direction, max_distance, skip_index):
    from src.whitted.scene.intersection import is_occluded, vec3

    result = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, m: ti.f32, s: ti.i32):
        result[None] = is_occluded(o, ti.math.normalize(d), m, s)

    test_kernel(vec3(*origin), vec3(*direction), max_distance, skip_index)
    return result[None]


class TestSceneStorage:
    """Tests for the object fields."""

    def test_add_objects_returns_indices(self):
        """Test that entries are indexed in insertion order."""
        from src.whitted.scene.intersection import (
            add_light,
            add_plane,
            add_sphere,
            get_light_count,
            get_object_count,
        )

        assert add_sphere((0.0, 0.0, 5.0), 1.0) == 0
        assert add_plane((0.0, -1.0, 0.0), (0.0, 1.0, 0.0)) == 1
        assert add_light((0.0, 5.0, 0.0), 0.1) == 2
        assert get_object_count() == 3
        assert get_light_count() == 1

    def test_clear_scene(self):
        """Test that clearing resets object and light counts."""
        from src.whitted.scene.intersection import (
            add_light,
            add_sphere,
            clear_scene,
            get_light_count,
            get_object_count,
        )

        add_sphere((0.0, 0.0, 5.0), 1.0)
        add_light((0.0, 5.0, 0.0), 0.1)
        clear_scene()
        assert get_object_count() == 0
        assert get_light_count() == 0

    def test_capacity_exceeded_raises(self):
        """Test that adding past MAX_OBJECTS raises RuntimeError."""
        from src.whitted.scene.intersection import MAX_OBJECTS, add_sphere, num_objects

        num_objects[None] = MAX_OBJECTS
        with pytest.raises(RuntimeError):
            add_sphere((0.0, 0.0, 0.0), 1.0)


class TestIntersectNearest:
    """Tests for the nearest-hit scan."""

    def test_empty_scene_misses(self):
        """Test that nothing is hit in an empty scene."""
        hit, index, _ = _nearest((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 0
        assert index == -1

    def test_nearest_of_two_spheres(self):
        """Test that the closer sphere wins regardless of insertion order."""
        from src.whitted.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, 10.0), 1.0)
        add_sphere((0.0, 0.0, 5.0), 1.0)

        hit, index, t = _nearest((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 1
        assert index == 1
        assert t == pytest.approx(4.0, abs=1e-5)

    def test_tie_keeps_first_entry(self):
        """Test that identical distances resolve to the earlier entry."""
        from src.whitted.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, 5.0), 1.0)
        add_sphere((0.0, 0.0, 5.0), 1.0)

        _, index, _ = _nearest((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert index == 0

    def test_plane_and_light_are_intersectable(self):
        """Test that planes and lights take part in the nearest-hit scan."""
        from src.whitted.scene.intersection import add_light, add_plane

        add_plane((0.0, -2.0, 0.0), (0.0, 1.0, 0.0))
        add_light((0.0, 3.0, 0.0), 0.5)

        hit, index, t = _nearest((0.0, 0.0, 0.0), (0.0, -1.0, 0.0))
        assert (hit, index) == (1, 0)
        assert t == pytest.approx(2.0, abs=1e-5)

        hit, index, t = _nearest((0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        assert (hit, index) == (1, 1)
        assert t == pytest.approx(2.5, abs=1e-5)


class TestIsOccluded:
    """Tests for shadow queries."""

    def test_blocker_between_point_and_light(self):
        """Test that a sphere between the point and the light occludes."""
        from src.whitted.scene.intersection import add_light, add_sphere

        add_sphere((0.0, 5.0, 0.0), 1.0)
        light = add_light((0.0, 10.0, 0.0), 0.5)

        assert _occluded((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 10.0, light) == 1

    def test_blocker_beyond_light(self):
        """Test that objects behind the light do not occlude."""
        from src.whitted.scene.intersection import add_light, add_sphere

        light = add_light((0.0, 10.0, 0.0), 0.5)
        add_sphere((0.0, 20.0, 0.0), 1.0)

        assert _occluded((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 10.0, light) == 0

    def test_light_does_not_shadow_itself(self):
        """Test that the sampled light's sphere is skipped."""
        from src.whitted.scene.intersection import add_light

        light = add_light((0.0, 10.0, 0.0), 3.0)

        assert _occluded((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 10.0, light) == 0

    def test_other_light_occludes(self):
        """Test that a second light between point and light blocks it."""
        from src.whitted.scene.intersection import add_light

        add_light((0.0, 5.0, 0.0), 1.0)
        light = add_light((0.0, 10.0, 0.0), 0.5)

        assert _occluded((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 10.0, light) == 1


class TestLight:
    """Tests for the Light container."""

    def test_light_fields(self):
        """Test that a light stores floats and exposes its sphere."""
        from src.whitted.scene.light import Light

        light = Light((0, 5, 5), 0.1, (0.6, 0.6, 0.6))
        assert light.center == (0.0, 5.0, 5.0)
        assert light.sphere.radius == 0.1
        assert light.material.color == (0.6, 0.6, 0.6)

    def test_invalid_light_raises(self):
        """Test that bad radii and colors are rejected."""
        from src.whitted.scene.light import Light

        with pytest.raises(ValueError):
            Light((0.0, 0.0, 0.0), 0.0, (1.0, 1.0, 1.0))
        with pytest.raises(ValueError):
            Light((0.0, 0.0, 0.0), 1.0, (1.0, -1.0, 1.0))


class TestScene:
    """Tests for the host-side Scene container."""

    def test_add_returns_object_indices(self):
        """Test that surfaces and lights share one index space."""
        from src.whitted.geometry import Plane, Sphere
        from src.whitted.scene import Light, Scene

        scene = Scene()
        assert scene.add_object(Sphere((0.0, 0.0, 5.0), 1.0)) == 0
        assert scene.add_light(Light((0.0, 5.0, 0.0), 0.1, (1.0, 1.0, 1.0))) == 1
        assert scene.add_object(Plane((0.0, -1.0, 0.0), (0.0, 1.0, 0.0))) == 2
        assert len(scene) == 3
        assert len(scene.lights) == 1

    def test_add_object_rejects_lights(self):
        """Test that lights must be added with add_light."""
        from src.whitted.scene import Light, Scene

        with pytest.raises(TypeError):
            Scene().add_object(Light((0.0, 5.0, 0.0), 0.1, (1.0, 1.0, 1.0)))

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"refractive_index": 0.0},
            {"max_ray_depth": -1},
            {"max_ray_depth": 33},
            {"background_color": (0.0, -1.0, 0.0)},
        ],
    )
    def test_invalid_scene_raises(self, kwargs):
        """Test scene parameter validation."""
        from src.whitted.scene import Scene

        with pytest.raises(ValueError):
            Scene(**kwargs)

    def test_upload_fills_fields(self):
        """Test that upload registers every entry and its material."""
        from src.whitted.geometry import Sphere
        from src.whitted.materials.material import get_material_count
        from src.whitted.scene import Light, Scene, get_light_count, get_object_count

        scene = Scene()
        scene.add_object(Sphere((0.0, 0.0, 5.0), 1.0))
        scene.add_light(Light((0.0, 5.0, 0.0), 0.1, (1.0, 1.0, 1.0)))
        scene.upload()

        assert get_object_count() == 2
        assert get_light_count() == 1
        assert get_material_count() == 2

    def test_upload_replaces_previous_scene(self):
        """Test that uploading twice does not accumulate entries."""
        from src.whitted.geometry import Sphere
        from src.whitted.scene import Scene, get_object_count

        scene = Scene()
        scene.add_object(Sphere((0.0, 0.0, 5.0), 1.0))
        scene.upload()
        scene.upload()

        assert get_object_count() == 1
