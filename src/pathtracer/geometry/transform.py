# geometry/transform.py
import math
import random
from typing import Optional

from pathtracer.core.aabb import AABB
from pathtracer.core.interval import Interval
from pathtracer.core.ray import Ray
from pathtracer.core.utils import degrees_to_radians
from pathtracer.core.vector import Point3, Vector3
from pathtracer.geometry.hittable import Hittable, HitRecord


class Translate(Hittable):
    """Instance of a Hittable moved by a fixed offset."""

    def __init__(self, obj: Hittable, offset: Vector3):
        self.object = obj
        self.offset = offset
        self.bbox = obj.bounding_box() + offset

    def hit(self, ray: Ray, ray_t: Interval,
            rng: Optional[random.Random] = None) -> Optional[HitRecord]:
        # Move the ray backwards by the offset
        offset_r = Ray(ray.origin - self.offset, ray.direction, ray.time)

        rec = self.object.hit(offset_r, ray_t, rng)
        if rec is None:
            return None

        # Move the intersection point forwards by the offset
        rec.p = rec.p + self.offset
        return rec

    def bounding_box(self) -> AABB:
        return self.bbox


class RotateY(Hittable):
    """Instance of a Hittable rotated about the y axis (angle in degrees)."""

    def __init__(self, obj: Hittable, angle: float):
        self.object = obj
        radians = degrees_to_radians(angle)
        self.sin_theta = math.sin(radians)
        self.cos_theta = math.cos(radians)

        bbox = obj.bounding_box()
        low = [math.inf, math.inf, math.inf]
        high = [-math.inf, -math.inf, -math.inf]
        for x in (bbox.x.min, bbox.x.max):
            for y in (bbox.y.min, bbox.y.max):
                for z in (bbox.z.min, bbox.z.max):
                    corner = self._to_world(Vector3(x, y, z))
                    for c in range(3):
                        low[c] = min(low[c], corner[c])
                        high[c] = max(high[c], corner[c])
        self.bbox = AABB.from_points(Point3(*low), Point3(*high))

    def _to_object(self, p: Vector3) -> Vector3:
        return Vector3(self.cos_theta * p.x - self.sin_theta * p.z,
                       p.y,
                       self.sin_theta * p.x + self.cos_theta * p.z)

    def _to_world(self, p: Vector3) -> Vector3:
        return Vector3(self.cos_theta * p.x + self.sin_theta * p.z,
                       p.y,
                       -self.sin_theta * p.x + self.cos_theta * p.z)

    def hit(self, ray: Ray, ray_t: Interval,
            rng: Optional[random.Random] = None) -> Optional[HitRecord]:
        rotated_r = Ray(self._to_object(ray.origin), self._to_object(ray.direction), ray.time)

        rec = self.object.hit(rotated_r, ray_t, rng)
        if rec is None:
            return None

        rec.p = self._to_world(rec.p)
        rec.normal = self._to_world(rec.normal)
        return rec

    def bounding_box(self) -> AABB:
        return self.bbox
