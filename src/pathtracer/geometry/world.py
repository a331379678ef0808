# geometry/world.py
from typing import Iterable, List, Optional
from pathtracer.core.ray import Ray
from pathtracer.geometry.hittable import Hittable, HitRecord

class HittableList(Hittable):
    """
    The scene: an ordered list of Hittable objects.

    It is filled once before rendering and only read afterwards, which is what
    lets every render worker query it without locking. Intersection is a plain
    linear scan over the children.
    """
    def __init__(self, objects: Iterable[Hittable] = ()):
        self.objects: List[Hittable] = list(objects)

    def add(self, obj: Hittable):
        self.objects.append(obj)

    def clear(self):
        self.objects.clear()

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self):
        return iter(self.objects)

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        hit_record = None
        closest_so_far = t_max
        for obj in self.objects:
            rec = obj.hit(ray, t_min, closest_so_far)
            if rec is not None:
                closest_so_far = rec.t
                hit_record = rec
        return hit_record
