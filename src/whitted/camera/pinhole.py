"""Pinhole camera model for primary and supersampling ray generation.

The camera looks from position toward look_at. Its orientation is an
orthonormal basis built from the view direction and the world up axis:

    forward = normalize(look_at - position)
    right   = normalize(cross(world_up, forward))
    up      = cross(forward, right)

A camera-space point (x, y, z) maps to position + x*right + y*up + z*forward.
The image plane sits at distance plane_distance along forward. Pixel (row,
column) is sampled through the center of its cell; row 0 is the top row.

A camera is built either from a vertical field of view or from the physical
size of its image plane. setup_camera() stores the derived quantities in
Taichi fields so primary_ray() and sub_ray() can be called inside kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.camera.pinhole import Camera, setup_camera, primary_ray
    >>> camera = Camera.from_field_of_view(
    ...     field_of_view=30.0, width=640, height=480,
    ...     position=(0.0, 0.0, 0.0), look_at=(0.0, 0.0, 1.0),
    ... )
    >>> setup_camera(camera)
    >>> @ti.kernel
    ... def render():
    ...     ray = primary_ray(240, 320)  # Ray through the image center
"""

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import Ray, make_ray, vec3

WORLD_UP = (0.0, 1.0, 0.0)

# Replaces WORLD_UP when the view direction is parallel to it
WORLD_FORWARD = (0.0, 0.0, 1.0)

# =============================================================================
# Camera Data Structures
# =============================================================================


def _basis(
    position: tuple[float, float, float], look_at: tuple[float, float, float]
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    forward = np.asarray(look_at, dtype=np.float64) - np.asarray(position, dtype=np.float64)
    norm = np.linalg.norm(forward)
    if norm < 1e-12:
        raise ValueError(f"Camera position and look_at must differ, both are {tuple(position)}")
    forward = forward / norm

    right = np.cross(np.asarray(WORLD_UP), forward)
    if np.linalg.norm(right) < 1e-9:
        right = np.cross(np.asarray(WORLD_FORWARD), forward)
    right = right / np.linalg.norm(right)

    up = np.cross(forward, right)
    return right, up, forward


@dataclass(frozen=True)
class Camera:
    """Configuration for a pinhole camera.

    Use from_field_of_view() or from_plane_dimensions() rather than building
    the image-plane parameters by hand.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        position: Camera position in world space.
        look_at: Point the camera looks at.
        plane_distance: Distance from the camera to the image plane.
        x_min: Camera-space x of the image plane's left edge.
        y_max: Camera-space y of the image plane's top edge.
        pixel_width: Image plane width covered by one pixel.
        pixel_height: Image plane height covered by one pixel.
    """

    width: int
    height: int
    position: tuple[float, float, float]
    look_at: tuple[float, float, float]
    plane_distance: float
    x_min: float
    y_max: float
    pixel_width: float
    pixel_height: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.plane_distance <= 0.0:
            raise ValueError(f"plane_distance must be positive, got {self.plane_distance}")
        # Fails early on a degenerate view direction
        _basis(self.position, self.look_at)

    @classmethod
    def from_field_of_view(
        cls,
        field_of_view: float,
        width: int,
        height: int,
        position: tuple[float, float, float] = (0.0, 0.0, 0.0),
        look_at: tuple[float, float, float] = (0.0, 0.0, 1.0),
        plane_distance: float = 1.0,
    ) -> "Camera":
        """Build a camera from a vertical field of view.

        Args:
            field_of_view: Vertical field of view in degrees, in (0, 180).
            width: Image width in pixels.
            height: Image height in pixels.
            position: Camera position.
            look_at: Point the camera looks at.
            plane_distance: Distance to the image plane.

        Raises:
            ValueError: If the field of view or the image size is invalid.
        """
        if not 0.0 < field_of_view < 180.0:
            raise ValueError(f"field_of_view must be in (0, 180) degrees, got {field_of_view}")
        if width <= 0 or height <= 0:
            raise ValueError(f"Image size must be positive, got {width}x{height}")

        y_max = math.tan(math.radians(field_of_view) / 2.0) * plane_distance
        x_min = -y_max * width / height
        return cls(
            width=width,
            height=height,
            position=position,
            look_at=look_at,
            plane_distance=plane_distance,
            x_min=x_min,
            y_max=y_max,
            pixel_width=-2.0 * x_min / width,
            pixel_height=2.0 * y_max / height,
        )

    @classmethod
    def from_plane_dimensions(
        cls,
        plane_width: float,
        plane_height: float,
        width: int,
        height: int,
        position: tuple[float, float, float] = (0.0, 0.0, 0.0),
        look_at: tuple[float, float, float] = (0.0, 0.0, 1.0),
        plane_distance: float = 1.0,
    ) -> "Camera":
        """Build a camera from the physical size of its image plane.

        Raises:
            ValueError: If a plane dimension or the image size is not positive.
        """
        if plane_width <= 0.0 or plane_height <= 0.0:
            raise ValueError(f"Plane dimensions must be positive, got {plane_width}x{plane_height}")
        if width <= 0 or height <= 0:
            raise ValueError(f"Image size must be positive, got {width}x{height}")

        return cls(
            width=width,
            height=height,
            position=position,
            look_at=look_at,
            plane_distance=plane_distance,
            x_min=-plane_width / 2.0,
            y_max=plane_height / 2.0,
            pixel_width=plane_width / width,
            pixel_height=plane_height / height,
        )

    def compute_orientation(
        self,
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """Orthonormal (right, up, forward) basis of the camera."""
        return _basis(self.position, self.look_at)

    def to_world(self, point: tuple[float, float, float]) -> tuple[float, float, float]:
        """Map a camera-space point to world space."""
        right, up, forward = self.compute_orientation()
        world = np.asarray(self.position) + point[0] * right + point[1] * up + point[2] * forward
        return (float(world[0]), float(world[1]), float(world[2]))

    def pixel_center(self, row: int, column: int) -> tuple[float, float, float]:
        """Camera-space center of a pixel on the image plane."""
        return (
            self.x_min + self.pixel_width * (column + 0.5),
            self.y_max - self.pixel_height * (row + 0.5),
            self.plane_distance,
        )


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_forward = ti.Vector.field(3, dtype=ti.f32, shape=())

# Image plane geometry in camera space
_plane_x_min = ti.field(dtype=ti.f32, shape=())
_plane_y_max = ti.field(dtype=ti.f32, shape=())
_pixel_width = ti.field(dtype=ti.f32, shape=())
_pixel_height = ti.field(dtype=ti.f32, shape=())
_plane_distance = ti.field(dtype=ti.f32, shape=())


def setup_camera(camera: Camera) -> None:
    """Store the camera's basis and image-plane geometry in Taichi fields.

    Must be called before primary_ray() or sub_ray() are used in a kernel.
    """
    right, up, forward = camera.compute_orientation()

    _camera_origin[None] = list(camera.position)
    _camera_right[None] = right.tolist()
    _camera_up[None] = up.tolist()
    _camera_forward[None] = forward.tolist()

    _plane_x_min[None] = camera.x_min
    _plane_y_max[None] = camera.y_max
    _pixel_width[None] = camera.pixel_width
    _pixel_height[None] = camera.pixel_height
    _plane_distance[None] = camera.plane_distance


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def ray_through(x: ti.f32, y: ti.f32) -> Ray:
    """Ray from the camera through camera-space point (x, y, plane_distance)."""
    origin = _camera_origin[None]
    target = (
        origin
        + x * _camera_right[None]
        + y * _camera_up[None]
        + _plane_distance[None] * _camera_forward[None]
    )
    return make_ray(origin, tm.normalize(target - origin))


@ti.func
def primary_ray(row: ti.i32, column: ti.i32) -> Ray:
    """Ray through the center of pixel (row, column); row 0 is the top."""
    x = _plane_x_min[None] + _pixel_width[None] * (ti.cast(column, ti.f32) + 0.5)
    y = _plane_y_max[None] - _pixel_height[None] * (ti.cast(row, ti.f32) + 0.5)
    return ray_through(x, y)


@ti.func
def sub_ray(
    row: ti.i32,
    column: ti.i32,
    sub_row: ti.i32,
    sub_column: ti.i32,
    rows: ti.i32,
    columns: ti.i32,
) -> Ray:
    """Ray through one point of a rows x columns grid spanning a pixel.

    The grid includes the pixel's corners: sub-ray (0, 0) passes through the
    top-left corner and (rows - 1, columns - 1) through the bottom-right one.
    """
    x0 = _plane_x_min[None] + _pixel_width[None] * ti.cast(column, ti.f32)
    y0 = _plane_y_max[None] - _pixel_height[None] * ti.cast(row, ti.f32)
    step_x = _pixel_width[None] / ti.cast(columns - 1, ti.f32)
    step_y = _pixel_height[None] / ti.cast(rows - 1, ti.f32)
    x = x0 + step_x * ti.cast(sub_column, ti.f32)
    y = y0 - step_y * ti.cast(sub_row, ti.f32)
    return ray_through(x, y)


# =============================================================================
# Host-side Ray Generation
# =============================================================================


@ti.kernel
def _primary_rays_kernel(
    pixels: ti.types.ndarray(dtype=ti.i32, ndim=2),
    origins: ti.types.ndarray(dtype=ti.f32, ndim=2),
    directions: ti.types.ndarray(dtype=ti.f32, ndim=2),
):
    for i in range(pixels.shape[0]):
        ray = primary_ray(pixels[i, 0], pixels[i, 1])
        for c in ti.static(range(3)):
            origins[i, c] = ray.origin[c]
            directions[i, c] = ray.direction[c]


@ti.kernel
def _sub_rays_kernel(
    row: ti.i32,
    column: ti.i32,
    origins: ti.types.ndarray(dtype=ti.f32, ndim=3),
    directions: ti.types.ndarray(dtype=ti.f32, ndim=3),
):
    rows = origins.shape[0]
    columns = origins.shape[1]
    for i, j in ti.ndrange(rows, columns):
        ray = sub_ray(row, column, i, j, rows, columns)
        for c in ti.static(range(3)):
            origins[i, j, c] = ray.origin[c]
            directions[i, j, c] = ray.direction[c]


def _check_pixel(camera: Camera, row: int, column: int) -> None:
    if not (0 <= row < camera.height and 0 <= column < camera.width):
        raise IndexError(
            f"Pixel ({row}, {column}) outside {camera.height}x{camera.width} image"
        )


def generate_primary_ray(
    camera: Camera, row: int, column: int
) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
    """Primary ray of a pixel, computed on the host.

    Returns:
        Tuple of (origin, unit direction).

    Raises:
        IndexError: If the pixel is outside the image.
    """
    _check_pixel(camera, row, column)
    setup_camera(camera)

    pixels = np.array([[row, column]], dtype=np.int32)
    origins = np.zeros((1, 3), dtype=np.float32)
    directions = np.zeros((1, 3), dtype=np.float32)
    _primary_rays_kernel(pixels, origins, directions)

    o = origins[0]
    d = directions[0]
    return (float(o[0]), float(o[1]), float(o[2])), (float(d[0]), float(d[1]), float(d[2]))


def generate_sub_rays(
    camera: Camera, row: int, column: int, grid_shape: tuple[int, int] = (3, 3)
) -> tuple[npt.NDArray[np.float32], npt.NDArray[np.float32]]:
    """Supersampling rays of a pixel, computed on the host.

    Args:
        camera: The camera.
        row: Pixel row.
        column: Pixel column.
        grid_shape: Sub-ray grid as (rows, columns).

    Returns:
        Tuple of (origins, directions), each of shape (rows, columns, 3).

    Raises:
        ValueError: If the grid is smaller than 2 in either dimension.
        IndexError: If the pixel is outside the image.
    """
    rows, columns = grid_shape
    if rows < 2 or columns < 2:
        raise ValueError(f"Sub-ray grid must be at least 2x2, got {rows}x{columns}")
    _check_pixel(camera, row, column)
    setup_camera(camera)

    origins = np.zeros((rows, columns, 3), dtype=np.float32)
    directions = np.zeros((rows, columns, 3), dtype=np.float32)
    _sub_rays_kernel(row, column, origins, directions)
    return origins, directions


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, right, up and forward vectors.
    """
    origin_vec = _camera_origin[None]
    right_vec = _camera_right[None]
    up_vec = _camera_up[None]
    forward_vec = _camera_forward[None]

    return {
        "origin": (float(origin_vec[0]), float(origin_vec[1]), float(origin_vec[2])),
        "right": (float(right_vec[0]), float(right_vec[1]), float(right_vec[2])),
        "up": (float(up_vec[0]), float(up_vec[1]), float(up_vec[2])),
        "forward": (float(forward_vec[0]), float(forward_vec[1]), float(forward_vec[2])),
    }
