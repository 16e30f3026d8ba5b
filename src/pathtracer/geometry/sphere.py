# geometry/sphere.py
import math
import random
from typing import Optional, Tuple

from pathtracer.core.aabb import AABB
from pathtracer.core.interval import Interval
from pathtracer.core.onb import ONB
from pathtracer.core.ray import Ray
from pathtracer.core.utils import random_to_sphere
from pathtracer.core.vector import Point3, Vector3
from pathtracer.geometry.hittable import Hittable, HitRecord


class Sphere(Hittable):
    """
    Represents a sphere defined by its center, radius, and material.

    Passing `center2` makes the sphere move linearly from `center` at
    time 0 to `center2` at time 1.
    """
    def __init__(self, center: Point3, radius: float, material,
                 center2: Optional[Point3] = None):
        self.center = center
        self.radius = max(0.0, radius)
        self.material = material
        self.is_moving = center2 is not None
        self.center_vec = (center2 - center) if self.is_moving else Vector3(0, 0, 0)

        # The bounding box of a sphere is center ± radius, swept over its motion
        offset = Vector3(self.radius, self.radius, self.radius)
        self.bbox = AABB.from_points(center - offset, center + offset)
        if self.is_moving:
            box2 = AABB.from_points(center2 - offset, center2 + offset)
            self.bbox = AABB.union(self.bbox, box2)

    def center_at(self, time: float) -> Point3:
        if not self.is_moving:
            return self.center
        return self.center + self.center_vec * time

    def hit(self, ray: Ray, ray_t: Interval,
            rng: Optional[random.Random] = None) -> Optional[HitRecord]:
        center = self.center_at(ray.time)
        oc = center - ray.origin
        a = ray.direction.length_squared()
        if a < 1e-16:
            return None
        h = ray.direction.dot(oc)
        c = oc.length_squared() - self.radius * self.radius
        discriminant = h * h - a * c

        if discriminant < 0:
            return None

        sqrt_disc = math.sqrt(discriminant)
        # Find the nearest root that lies in the acceptable range
        root = (h - sqrt_disc) / a
        if not ray_t.surrounds(root):
            root = (h + sqrt_disc) / a
            if not ray_t.surrounds(root):
                return None

        rec = HitRecord()
        rec.t = root
        rec.p = ray.at(rec.t)
        outward_normal = (rec.p - center) / self.radius
        rec.set_face_normal(ray, outward_normal)
        rec.u, rec.v = get_sphere_uv(outward_normal)
        rec.material = self.material
        return rec

    def bounding_box(self) -> AABB:
        return self.bbox

    def pdf_value(self, origin: Point3, direction: Vector3) -> float:
        # Only valid for stationary spheres.
        if self.hit(Ray(origin, direction), Interval(0.001, math.inf)) is None:
            return 0.0

        dist_squared = (self.center - origin).length_squared()
        cos_theta_max = math.sqrt(max(0.0, 1 - self.radius * self.radius / dist_squared))
        solid_angle = 2 * math.pi * (1 - cos_theta_max)
        if solid_angle <= 0.0:
            return 0.0
        return 1 / solid_angle

    def random(self, origin: Point3, rng: random.Random) -> Vector3:
        direction = self.center - origin
        distance_squared = direction.length_squared()
        uvw = ONB(direction)
        return uvw.local(random_to_sphere(self.radius, distance_squared, rng))


def get_sphere_uv(p: Point3) -> Tuple[float, float]:
    """
    Texture coordinates of a point on the unit sphere.

    u: angle around the Y axis from X=-1, mapped to [0, 1].
    v: angle from Y=-1 to Y=+1, mapped to [0, 1].
    """
    theta = math.acos(max(-1.0, min(1.0, -p.y)))
    phi = math.atan2(-p.z, p.x) + math.pi
    return phi / (2 * math.pi), theta / math.pi
