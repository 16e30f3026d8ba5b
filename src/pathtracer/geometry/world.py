# geometry/world.py
import random
from typing import Iterable, List, Optional

from pathtracer.core.aabb import AABB
from pathtracer.core.interval import Interval
from pathtracer.core.ray import Ray
from pathtracer.core.vector import Point3, Vector3
from pathtracer.geometry.bvh import BVHNode
from pathtracer.geometry.hittable import Hittable, HitRecord


class HittableList(Hittable):
    """
    A list of Hittable objects searched linearly for the closest hit.

    Used both as the scene container (usually wrapping a single BVH) and as
    the collection of light sources handed to the integrator.
    """
    def __init__(self, objects: Optional[Iterable[Hittable]] = None):
        self.objects: List[Hittable] = []
        self.bbox = AABB()
        for obj in objects or ():
            self.add(obj)

    def add(self, obj: Hittable):
        self.objects.append(obj)
        self.bbox = AABB.union(self.bbox, obj.bounding_box())

    def __len__(self) -> int:
        return len(self.objects)

    def build_bvh(self) -> "HittableList":
        """
        Returns a list holding a single BVH over this list's objects.
        The objects are reordered in place while building.
        """
        if not self.objects:
            return HittableList()
        return HittableList([BVHNode.from_list(self)])

    def hit(self, ray: Ray, ray_t: Interval,
            rng: Optional[random.Random] = None) -> Optional[HitRecord]:
        hit_record = None
        closest_so_far = ray_t.max
        for obj in self.objects:
            rec = obj.hit(ray, Interval(ray_t.min, closest_so_far), rng)
            if rec is not None:
                closest_so_far = rec.t
                hit_record = rec
        return hit_record

    def bounding_box(self) -> AABB:
        return self.bbox

    def pdf_value(self, origin: Point3, direction: Vector3) -> float:
        # Each member is picked with equal probability by random().
        if not self.objects:
            return 0.0
        weight = 1.0 / len(self.objects)
        return sum(weight * obj.pdf_value(origin, direction) for obj in self.objects)

    def random(self, origin: Point3, rng: random.Random) -> Vector3:
        if not self.objects:
            return Vector3(1, 0, 0)
        return self.objects[rng.randrange(len(self.objects))].random(origin, rng)
