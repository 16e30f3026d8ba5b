# geometry/bvh.py
import logging
import random
from typing import List, Optional

from pathtracer.core.aabb import AABB
from pathtracer.core.interval import Interval
from pathtracer.core.ray import Ray
from pathtracer.geometry.hittable import Hittable, HitRecord

logger = logging.getLogger(__name__)


class BVHNode(Hittable):
    """
    Binary bounding volume hierarchy over a list of Hittables.

    Built once by recursive median split along the longest axis of the
    enclosing box and never modified afterwards; render workers each
    traverse their own copy.
    """
    def __init__(self, objects: List[Hittable], start: int, end: int):
        object_span = end - start
        if object_span < 1:
            raise ValueError("BVHNode needs at least one object")

        self.box = AABB()
        for i in range(start, end):
            self.box = AABB.union(self.box, objects[i].bounding_box())

        if object_span == 1:
            # Both children alias the single primitive
            self.left = self.right = objects[start]
        elif object_span == 2:
            self.left = objects[start]
            self.right = objects[start + 1]
        else:
            axis = self.box.longest_axis()
            objects[start:end] = sorted(
                objects[start:end],
                key=lambda obj: obj.bounding_box().axis_interval(axis).min)

            mid = start + object_span // 2
            self.left = BVHNode(objects, start, mid)
            self.right = BVHNode(objects, mid, end)

    @classmethod
    def from_list(cls, hittable_list) -> "BVHNode":
        objects = hittable_list.objects
        logger.debug("Building BVH over %d objects", len(objects))
        return cls(objects, 0, len(objects))

    def hit(self, ray: Ray, ray_t: Interval,
            rng: Optional[random.Random] = None) -> Optional[HitRecord]:
        if not self.box.hit(ray, ray_t):
            return None

        hit_left = self.left.hit(ray, ray_t, rng)
        if self.left is self.right:
            return hit_left
        if hit_left is None:
            return self.right.hit(ray, ray_t, rng)

        # The right child only needs to beat the left hit; equal t keeps left.
        hit_right = self.right.hit(ray, Interval(ray_t.min, hit_left.t), rng)
        return hit_right if hit_right is not None else hit_left

    def bounding_box(self) -> AABB:
        return self.box
