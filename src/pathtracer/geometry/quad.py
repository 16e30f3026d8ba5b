# geometry/quad.py
import math
import random
from typing import Optional

from pathtracer.core.aabb import AABB
from pathtracer.core.interval import Interval
from pathtracer.core.ray import Ray
from pathtracer.core.vector import Point3, Vector3
from pathtracer.geometry.bvh import BVHNode
from pathtracer.geometry.hittable import Hittable, HitRecord
from pathtracer.geometry.world import HittableList

UNIT_INTERVAL = Interval(0.0, 1.0)


class PlanarPrimitive(Hittable):
    """
    Shared plane setup for primitives spanned by a corner Q and edges u, v.

    Subclasses decide which planar coordinates (alpha, beta) are inside
    the shape and what the surface area is.
    """
    def __init__(self, q: Point3, u: Vector3, v: Vector3, material):
        self.q = q
        self.u = u
        self.v = v
        self.material = material

        n = u.cross(v)
        self.normal = n.normalize()
        self.d = self.normal.dot(q)
        n_dot_n = n.dot(n)
        self.w = n / n_dot_n if n_dot_n > 0 else Vector3(0, 0, 0)
        self.area = n.length()
        self.bbox = self._compute_bounding_box()

    def _compute_bounding_box(self) -> AABB:
        diagonal1 = AABB.from_points(self.q, self.q + self.u + self.v)
        diagonal2 = AABB.from_points(self.q + self.u, self.q + self.v)
        return AABB.union(diagonal1, diagonal2)

    def is_interior(self, alpha: float, beta: float) -> bool:
        raise NotImplementedError("is_interior() must be implemented by subclasses.")

    def hit(self, ray: Ray, ray_t: Interval,
            rng: Optional[random.Random] = None) -> Optional[HitRecord]:
        denom = self.normal.dot(ray.direction)

        # No hit if the ray is parallel to the plane
        if abs(denom) < 1e-8:
            return None

        t = (self.d - self.normal.dot(ray.origin)) / denom
        if not ray_t.surrounds(t):
            return None

        intersection = ray.at(t)
        planar_hitpt = intersection - self.q
        alpha = self.w.dot(planar_hitpt.cross(self.v))
        beta = self.w.dot(self.u.cross(planar_hitpt))
        if not self.is_interior(alpha, beta):
            return None

        rec = HitRecord(p=intersection, t=t, material=self.material, u=alpha, v=beta)
        rec.set_face_normal(ray, self.normal)
        return rec

    def bounding_box(self) -> AABB:
        return self.bbox

    def pdf_value(self, origin: Point3, direction: Vector3) -> float:
        rec = self.hit(Ray(origin, direction), Interval(0.001, math.inf))
        if rec is None:
            return 0.0

        distance_squared = rec.t * rec.t * direction.length_squared()
        cosine = abs(direction.dot(rec.normal)) / direction.length()
        if cosine < 1e-8 or self.area <= 0.0:
            return 0.0
        return distance_squared / (cosine * self.area)


class Quad(PlanarPrimitive):
    """Parallelogram with corner Q and edges u, v."""

    def is_interior(self, alpha: float, beta: float) -> bool:
        return UNIT_INTERVAL.contains(alpha) and UNIT_INTERVAL.contains(beta)

    def random(self, origin: Point3, rng: random.Random) -> Vector3:
        p = self.q + self.u * rng.random() + self.v * rng.random()
        return p - origin


def box(a: Point3, b: Point3, material) -> BVHNode:
    """
    Returns the 3D box (six sides) that contains the two opposite vertices a & b.
    """
    sides = HittableList()

    low = Point3(min(a.x, b.x), min(a.y, b.y), min(a.z, b.z))
    high = Point3(max(a.x, b.x), max(a.y, b.y), max(a.z, b.z))

    dx = Vector3(high.x - low.x, 0, 0)
    dy = Vector3(0, high.y - low.y, 0)
    dz = Vector3(0, 0, high.z - low.z)

    sides.add(Quad(Point3(low.x, low.y, high.z), dx, dy, material))    # front
    sides.add(Quad(Point3(high.x, low.y, high.z), -dz, dy, material))  # right
    sides.add(Quad(Point3(high.x, low.y, low.z), -dx, dy, material))   # back
    sides.add(Quad(Point3(low.x, low.y, low.z), dz, dy, material))     # left
    sides.add(Quad(Point3(low.x, high.y, high.z), dx, -dz, material))  # top
    sides.add(Quad(Point3(low.x, low.y, low.z), dx, dz, material))     # bottom

    return BVHNode.from_list(sides)
