# camera/camera.py
import math
import random
from dataclasses import dataclass, field
from typing import Optional

from pathtracer.core.ray import Ray
from pathtracer.core.utils import degrees_to_radians, random_in_unit_disk
from pathtracer.core.vector import Color, Point3, Vector3


@dataclass
class ImageSettings:
    """Output image and sampling parameters."""
    aspect_ratio: float = 16.0 / 9.0
    image_width: int = 400
    quality: int = 95               # JPEG quality when saving
    samples_per_pixel: int = 10
    max_depth: int = 10             # Maximum number of ray bounces
    background: Optional[Color] = None  # None renders a sky gradient


@dataclass
class CameraSettings:
    """Placement and lens of the camera."""
    vfov: float = 90.0              # Vertical view angle in degrees
    look_from: Point3 = field(default_factory=lambda: Point3(0, 0, 0))
    look_at: Point3 = field(default_factory=lambda: Point3(0, 0, -1))
    vup: Vector3 = field(default_factory=lambda: Vector3(0, 1, 0))
    defocus_angle: float = 0.0      # Variation angle of rays through each pixel
    focus_dist: float = 10.0        # Distance from look_from to the plane of perfect focus


class Camera:
    """
    Pinhole or thin-lens camera producing primary rays for pixel (i, j).

    Each pixel is divided into sqrt_spp x sqrt_spp strata; one jittered
    ray is cast per stratum, so the effective sample count is sqrt_spp².
    """
    def __init__(self, image_settings: ImageSettings, camera_settings: CameraSettings):
        if image_settings.image_width < 1:
            raise ValueError("image_width must be at least 1")
        if image_settings.samples_per_pixel < 1:
            raise ValueError("samples_per_pixel must be at least 1")
        self.image_settings = image_settings
        self.camera_settings = camera_settings
        self.update_camera()

    @property
    def max_depth(self) -> int:
        return self.image_settings.max_depth

    @property
    def background(self) -> Optional[Color]:
        return self.image_settings.background

    def update_camera(self):
        """Updates the camera's basis vectors and viewport."""
        img = self.image_settings
        cam = self.camera_settings

        self.image_width = img.image_width
        self.image_height = max(1, int(img.image_width / img.aspect_ratio))

        self.sqrt_spp = max(1, int(math.sqrt(img.samples_per_pixel)))
        self.pixel_samples_scale = 1.0 / (self.sqrt_spp * self.sqrt_spp)
        self.recip_sqrt_spp = 1.0 / self.sqrt_spp

        self.center = cam.look_from

        # Compute viewport dimensions based on fov
        theta = degrees_to_radians(cam.vfov)
        h = math.tan(theta / 2)
        viewport_height = 2 * h * cam.focus_dist
        viewport_width = viewport_height * (self.image_width / self.image_height)

        # Calculate the u, v, w unit basis vectors for the camera coordinate frame
        self.w = (cam.look_from - cam.look_at).normalize()
        self.u = cam.vup.cross(self.w).normalize()
        self.v = self.w.cross(self.u)

        # Vectors across the horizontal and down the vertical viewport edges
        viewport_u = self.u * viewport_width
        viewport_v = -self.v * viewport_height

        self.pixel_delta_u = viewport_u / self.image_width
        self.pixel_delta_v = viewport_v / self.image_height

        viewport_upper_left = (self.center
                               - self.w * cam.focus_dist
                               - viewport_u / 2
                               - viewport_v / 2)
        self.pixel00_loc = viewport_upper_left + (self.pixel_delta_u + self.pixel_delta_v) * 0.5

        # Calculate the camera defocus disk basis vectors
        defocus_radius = cam.focus_dist * math.tan(degrees_to_radians(cam.defocus_angle / 2))
        self.defocus_disk_u = self.u * defocus_radius
        self.defocus_disk_v = self.v * defocus_radius

    def get_ray(self, i: int, j: int, s_i: int, s_j: int, rng: random.Random) -> Ray:
        """
        Construct a camera ray originating from the defocus disk and directed
        at a randomly sampled point inside stratum (s_i, s_j) of pixel (i, j).
        """
        offset = self.sample_square_stratified(s_i, s_j, rng)
        pixel_sample = (self.pixel00_loc
                        + self.pixel_delta_u * (i + offset.x)
                        + self.pixel_delta_v * (j + offset.y))

        if self.camera_settings.defocus_angle <= 0:
            ray_origin = self.center
        else:
            ray_origin = self.defocus_disk_sample(rng)
        ray_direction = pixel_sample - ray_origin
        ray_time = rng.random()

        return Ray(ray_origin, ray_direction, ray_time)

    def sample_square_stratified(self, s_i: int, s_j: int, rng: random.Random) -> Vector3:
        # Point in the [-.5,-.5]-[+.5,+.5] unit square, restricted to stratum (s_i, s_j)
        px = ((s_i + rng.random()) * self.recip_sqrt_spp) - 0.5
        py = ((s_j + rng.random()) * self.recip_sqrt_spp) - 0.5
        return Vector3(px, py, 0)

    def defocus_disk_sample(self, rng: random.Random) -> Point3:
        """Generate random point in the camera defocus disk."""
        p = random_in_unit_disk(rng)
        return self.center + self.defocus_disk_u * p.x + self.defocus_disk_v * p.y
