# camera/camera.py
import math
from pathtracer.core.vector import Vector3
from pathtracer.core.ray import Ray
from pathtracer.core.utils import degrees_to_radians, random_in_unit_disk

class Camera:
    """
    Thin-lens camera. All view geometry is derived once in the constructor and
    the camera is read-only afterwards.
    """
    def __init__(self, lookfrom: Vector3, lookat: Vector3, vup: Vector3,
                 vfov: float, aspect_ratio: float, aperture: float = 0.0,
                 focus_dist: float = 1.0):
        if aspect_ratio <= 0:
            raise ValueError(f"aspect ratio must be positive, got {aspect_ratio}")
        if focus_dist <= 0:
            raise ValueError(f"focus distance must be positive, got {focus_dist}")
        if aperture < 0:
            raise ValueError(f"aperture must be non-negative, got {aperture}")

        self.vfov = vfov  # Vertical field of view, in degrees
        self.aspect_ratio = aspect_ratio
        self.aperture = aperture
        self.focus_dist = focus_dist  # Distance to the plane in perfect focus
        self.lens_radius = aperture / 2.0

        theta = degrees_to_radians(vfov)
        viewport_height = 2.0 * math.tan(theta / 2)
        viewport_width = aspect_ratio * viewport_height

        # Orthonormal basis: w points backwards, u right, v up
        self.w = (lookfrom - lookat).normalize()
        self.u = vup.cross(self.w).normalize()
        self.v = self.w.cross(self.u)

        self.origin = lookfrom
        self.horizontal = self.u * (focus_dist * viewport_width)
        self.vertical = self.v * (focus_dist * viewport_height)
        self.lower_left_corner = (self.origin -
                                  self.horizontal / 2 -
                                  self.vertical / 2 -
                                  self.w * focus_dist)

    def get_ray(self, s: float, t: float, rng) -> Ray:
        """
        Generates a ray through viewport coordinates (s, t) in [0, 1]^2,
        starting from a random point on the lens for defocus blur.
        """
        target = self.lower_left_corner + self.horizontal * s + self.vertical * t

        if self.lens_radius <= 0:
            return Ray(self.origin, target - self.origin)

        rd = random_in_unit_disk(rng) * self.lens_radius
        offset = self.u * rd.x + self.v * rd.y

        ray_origin = self.origin + offset
        return Ray(ray_origin, target - ray_origin)
