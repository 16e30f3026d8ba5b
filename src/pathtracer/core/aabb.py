# core/aabb.py
import math

from pathtracer.core.interval import Interval
from pathtracer.core.ray import Ray
from pathtracer.core.vector import Point3, Vector3

# Minimum thickness of any box axis; keeps axis-aligned planar primitives hittable.
MIN_THICKNESS = 0.0001


class AABB:
    """
    Axis-aligned bounding box stored as one Interval per axis.
    """
    def __init__(self, x: Interval = None, y: Interval = None, z: Interval = None):
        # Default box is empty
        self.x = x if x is not None else Interval()
        self.y = y if y is not None else Interval()
        self.z = z if z is not None else Interval()
        self._pad_to_minimums()

    @classmethod
    def from_points(cls, a: Point3, b: Point3) -> "AABB":
        """Box spanning two corner points given in any order."""
        return cls(
            Interval(min(a.x, b.x), max(a.x, b.x)),
            Interval(min(a.y, b.y), max(a.y, b.y)),
            Interval(min(a.z, b.z), max(a.z, b.z)),
        )

    @staticmethod
    def union(box0: "AABB", box1: "AABB") -> "AABB":
        return AABB(
            Interval.union(box0.x, box1.x),
            Interval.union(box0.y, box1.y),
            Interval.union(box0.z, box1.z),
        )

    def _pad_to_minimums(self):
        # Empty intervals have negative size and are left alone.
        if 0 <= self.x.size() < MIN_THICKNESS:
            self.x = self.x.expand(MIN_THICKNESS)
        if 0 <= self.y.size() < MIN_THICKNESS:
            self.y = self.y.expand(MIN_THICKNESS)
        if 0 <= self.z.size() < MIN_THICKNESS:
            self.z = self.z.expand(MIN_THICKNESS)

    def axis_interval(self, n: int) -> Interval:
        if n == 1:
            return self.y
        if n == 2:
            return self.z
        return self.x

    def hit(self, ray: Ray, ray_t: Interval) -> bool:
        # Slab method: shrink [t_min, t_max] by each axis' entry/exit parameters.
        t_min = ray_t.min
        t_max = ray_t.max
        for axis in range(3):
            ax = self.axis_interval(axis)
            d = ray.direction[axis]
            # IEEE semantics: a zero component gives an infinite slab.
            adinv = 1.0 / d if d != 0.0 else math.copysign(math.inf, d)
            o = ray.origin[axis]

            t0 = (ax.min - o) * adinv
            t1 = (ax.max - o) * adinv
            if adinv < 0:
                t0, t1 = t1, t0

            if t0 > t_min:
                t_min = t0
            if t1 < t_max:
                t_max = t1
            if t_max <= t_min:
                return False
        return True

    def longest_axis(self) -> int:
        """Index of the widest axis; ties go to the later axis."""
        if self.x.size() > self.y.size():
            return 0 if self.x.size() > self.z.size() else 2
        return 1 if self.y.size() > self.z.size() else 2

    def __add__(self, offset: Vector3) -> "AABB":
        return AABB(self.x + offset.x, self.y + offset.y, self.z + offset.z)

    def __repr__(self) -> str:
        return f"AABB({self.x!r}, {self.y!r}, {self.z!r})"

