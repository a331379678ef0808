# geometry/sphere.py
import math
from typing import Optional
from pathtracer.core.vector import Vector3
from pathtracer.core.ray import Ray
from pathtracer.geometry.hittable import Hittable, HitRecord

class Sphere(Hittable):
    """
    A sphere with a single material.

    A negative radius keeps the same surface but flips the outward normal,
    which turns the sphere into a hollow shell when nested inside another
    sphere of the same material.
    """
    def __init__(self, center: Vector3, radius: float, material):
        if radius == 0:
            raise ValueError("sphere radius must be non-zero")
        self.center = center
        self.radius = radius
        self.material = material

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        # Quadratic in t with b = 2 * half_b
        oc = ray.origin - self.center
        a = ray.direction.length_squared()
        half_b = oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius

        discriminant = half_b * half_b - a * c
        if discriminant < 0:
            return None
        sqrtd = math.sqrt(discriminant)

        for root in ((-half_b - sqrtd) / a, (-half_b + sqrtd) / a):
            if t_min < root < t_max:
                break
        else:
            return None

        p = ray.at(root)
        rec = HitRecord(p=p, t=root, material=self.material)
        rec.set_face_normal(ray, (p - self.center) / self.radius)
        return rec

    def __repr__(self) -> str:
        return f"Sphere({self.center!r}, {self.radius}, {self.material!r})"
