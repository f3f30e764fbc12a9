"""Unit tests for the pinhole camera.

Tests cover:
- Image plane parameters from field of view and plane dimensions
- Orientation basis, including the degenerate look-straight-up case
- Primary rays through pixel centers
- Sub-pixel ray grids and their preconditions
"""

import math

import numpy as np
import pytest
import taichi as ti


class TestCameraConstruction:
    """Tests for Camera constructors and validation."""

    def test_from_field_of_view(self):
        """Test image plane parameters for a 90 degree square camera."""
        from src.whitted.camera.pinhole import Camera

        camera = Camera.from_field_of_view(90.0, 2, 2)
        assert camera.y_max == pytest.approx(1.0)
        assert camera.x_min == pytest.approx(-1.0)
        assert camera.pixel_width == pytest.approx(1.0)
        assert camera.pixel_height == pytest.approx(1.0)

    def test_from_field_of_view_aspect(self):
        """Test that the horizontal extent follows the aspect ratio."""
        from src.whitted.camera.pinhole import Camera

        camera = Camera.from_field_of_view(30.0, 640, 480)
        y_max = math.tan(math.radians(15.0))
        assert camera.y_max == pytest.approx(y_max)
        assert camera.x_min == pytest.approx(-y_max * 640 / 480)
        assert camera.pixel_width == pytest.approx(camera.pixel_height)

    def test_from_plane_dimensions(self):
        """Test image plane parameters from a physical plane size."""
        from src.whitted.camera.pinhole import Camera

        camera = Camera.from_plane_dimensions(
            8.0, 6.0, 800, 600, position=(0.0, 0.0, -5.0), plane_distance=5.0
        )
        assert camera.x_min == pytest.approx(-4.0)
        assert camera.y_max == pytest.approx(3.0)
        assert camera.pixel_width == pytest.approx(0.01)
        assert camera.pixel_height == pytest.approx(0.01)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"field_of_view": 0.0, "width": 4, "height": 4},
            {"field_of_view": 180.0, "width": 4, "height": 4},
            {"field_of_view": 60.0, "width": 0, "height": 4},
            {"field_of_view": 60.0, "width": 4, "height": 4, "plane_distance": 0.0},
        ],
    )
    def test_invalid_parameters_raise(self, kwargs):
        """Test that invalid camera parameters are rejected."""
        from src.whitted.camera.pinhole import Camera

        with pytest.raises(ValueError):
            Camera.from_field_of_view(**kwargs)

    def test_position_equal_to_look_at_raises(self):
        """Test that a camera without a view direction is rejected."""
        from src.whitted.camera.pinhole import Camera

        with pytest.raises(ValueError):
            Camera.from_field_of_view(60.0, 4, 4, position=(1.0, 2.0, 3.0), look_at=(1.0, 2.0, 3.0))


class TestOrientation:
    """Tests for the camera basis."""

    def test_default_basis(self):
        """Test that looking down +z gives the world axes."""
        from src.whitted.camera.pinhole import Camera

        right, up, forward = Camera.from_field_of_view(60.0, 4, 4).compute_orientation()
        np.testing.assert_allclose(right, [1.0, 0.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(up, [0.0, 1.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(forward, [0.0, 0.0, 1.0], atol=1e-12)

    def test_basis_is_orthonormal(self):
        """Test orthonormality for an arbitrary view direction."""
        from src.whitted.camera.pinhole import Camera

        camera = Camera.from_field_of_view(
            45.0, 4, 4, position=(1.0, 2.0, 3.0), look_at=(-2.0, 0.5, 7.0)
        )
        basis = np.array(camera.compute_orientation())
        np.testing.assert_allclose(basis @ basis.T, np.eye(3), atol=1e-12)

    def test_looking_straight_down_uses_world_forward(self):
        """Test the degenerate case where forward is parallel to world up."""
        from src.whitted.camera.pinhole import Camera

        camera = Camera.from_field_of_view(60.0, 4, 4, look_at=(0.0, -1.0, 0.0))
        right, up, forward = camera.compute_orientation()
        np.testing.assert_allclose(forward, [0.0, -1.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(right, [1.0, 0.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(up, [0.0, 0.0, 1.0], atol=1e-12)

    def test_to_world(self):
        """Test the camera-space to world-space mapping."""
        from src.whitted.camera.pinhole import Camera

        camera = Camera.from_field_of_view(60.0, 4, 4, position=(1.0, 1.0, 1.0), look_at=(1.0, 1.0, 2.0))
        assert camera.to_world((0.5, -0.5, 2.0)) == pytest.approx((1.5, 0.5, 3.0))


class TestPrimaryRays:
    """Tests for primary ray generation."""

    def test_primary_ray_through_pixel_center(self):
        """Test the top-left pixel ray of a 90 degree 2x2 camera."""
        from src.whitted.camera.pinhole import Camera, generate_primary_ray

        camera = Camera.from_field_of_view(90.0, 2, 2)
        origin, direction = generate_primary_ray(camera, 0, 0)

        expected = np.array([-0.5, 0.5, 1.0]) / math.sqrt(1.5)
        assert origin == pytest.approx((0.0, 0.0, 0.0))
        assert direction == pytest.approx(tuple(expected), abs=1e-6)

    def test_rows_grow_downward(self):
        """Test that row 0 is the top of the image."""
        from src.whitted.camera.pinhole import Camera, generate_primary_ray

        camera = Camera.from_field_of_view(60.0, 4, 4)
        _, top = generate_primary_ray(camera, 0, 1)
        _, bottom = generate_primary_ray(camera, 3, 1)
        assert top[1] > 0.0 > bottom[1]

    def test_primary_ray_from_offset_camera(self):
        """Test the center ray of a plane-dimension camera looks at the target."""
        from src.whitted.camera.pinhole import Camera, generate_primary_ray

        camera = Camera.from_plane_dimensions(
            2.0, 2.0, 2, 2, position=(0.0, 0.0, -5.0), look_at=(0.0, 0.0, 1.0), plane_distance=5.0
        )
        origin, direction = generate_primary_ray(camera, 1, 1)

        expected = np.array([0.5, -0.5, 5.0])
        expected /= np.linalg.norm(expected)
        assert origin == pytest.approx((0.0, 0.0, -5.0))
        assert direction == pytest.approx(tuple(expected), abs=1e-6)

    def test_pixel_out_of_range_raises(self):
        """Test that pixels outside the image are rejected."""
        from src.whitted.camera.pinhole import Camera, generate_primary_ray

        camera = Camera.from_field_of_view(60.0, 4, 3)
        with pytest.raises(IndexError):
            generate_primary_ray(camera, 3, 0)
        with pytest.raises(IndexError):
            generate_primary_ray(camera, 0, -1)

    def test_primary_ray_in_kernel(self):
        """Test primary_ray used directly inside a kernel."""
        from src.whitted.camera.pinhole import Camera, primary_ray, setup_camera

        setup_camera(Camera.from_field_of_view(90.0, 2, 2))
        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = primary_ray(1, 1).direction

        test_kernel()
        d = result[None]
        expected = np.array([0.5, -0.5, 1.0]) / math.sqrt(1.5)
        assert (d[0], d[1], d[2]) == pytest.approx(tuple(expected), abs=1e-6)

    def test_camera_info(self):
        """Test the debug view of the uploaded camera."""
        from src.whitted.camera.pinhole import Camera, get_camera_info, setup_camera

        setup_camera(Camera.from_field_of_view(60.0, 4, 4, position=(0.0, 1.0, 0.0), look_at=(0.0, 1.0, 5.0)))
        info = get_camera_info()
        assert info["origin"] == pytest.approx((0.0, 1.0, 0.0))
        assert info["forward"] == pytest.approx((0.0, 0.0, 1.0))
        assert info["right"] == pytest.approx((1.0, 0.0, 0.0))


class TestSubRays:
    """Tests for supersampling ray grids."""

    def test_grid_spans_pixel_corners(self):
        """Test that the 3x3 grid runs from corner to corner of the pixel."""
        from src.whitted.camera.pinhole import Camera, generate_sub_rays

        camera = Camera.from_field_of_view(90.0, 2, 2)
        origins, directions = generate_sub_rays(camera, 0, 0)

        assert origins.shape == (3, 3, 3)
        assert directions.shape == (3, 3, 3)

        top_left = np.array([-1.0, 1.0, 1.0]) / math.sqrt(3.0)
        bottom_right = np.array([0.0, 0.0, 1.0])
        np.testing.assert_allclose(directions[0, 0], top_left, atol=1e-6)
        np.testing.assert_allclose(directions[2, 2], bottom_right, atol=1e-6)

    def test_grid_center_matches_primary_ray(self):
        """Test that the middle sub-ray passes through the pixel center."""
        from src.whitted.camera.pinhole import Camera, generate_primary_ray, generate_sub_rays

        camera = Camera.from_field_of_view(40.0, 7, 5)
        _, directions = generate_sub_rays(camera, 2, 4)
        _, primary = generate_primary_ray(camera, 2, 4)
        np.testing.assert_allclose(directions[1, 1], primary, atol=1e-6)

    def test_rectangular_grid(self):
        """Test a non-square sub-ray grid."""
        from src.whitted.camera.pinhole import Camera, generate_sub_rays

        origins, _ = generate_sub_rays(Camera.from_field_of_view(40.0, 4, 4), 0, 0, (2, 4))
        assert origins.shape == (2, 4, 3)

    def test_grid_too_small_raises(self):
        """Test that grids below 2x2 are rejected."""
        from src.whitted.camera.pinhole import Camera, generate_sub_rays

        camera = Camera.from_field_of_view(40.0, 4, 4)
        with pytest.raises(ValueError):
            generate_sub_rays(camera, 0, 0, (1, 3))

    def test_sub_rays_pixel_out_of_range(self):
        """Test that sub-rays of pixels outside the image are rejected."""
        from src.whitted.camera.pinhole import Camera, generate_sub_rays

        with pytest.raises(IndexError):
            generate_sub_rays(Camera.from_field_of_view(40.0, 4, 4), 0, 4)
