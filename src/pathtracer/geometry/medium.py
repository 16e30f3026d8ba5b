# geometry/medium.py
import math
import random
from typing import Optional, Union

from pathtracer.core.aabb import AABB
from pathtracer.core.interval import UNIVERSE, Interval
from pathtracer.core.ray import Ray
from pathtracer.core.vector import Color, Vector3
from pathtracer.geometry.hittable import Hittable, HitRecord
from pathtracer.materials.isotropic import Isotropic
from pathtracer.materials.textures import Texture


class ConstantMedium(Hittable):
    """
    Homogeneous participating medium (fog, smoke) filling a convex boundary.

    A ray passing through travels an exponentially distributed free-flight
    distance before scattering; if that distance exceeds the chord through
    the boundary the ray passes through untouched.
    """
    def __init__(self, boundary: Hittable, density: float, albedo: Union[Color, Texture]):
        if density <= 0:
            raise ValueError(f"Medium density must be positive, got {density}")
        self.boundary = boundary
        self.density = density
        self.neg_inv_density = -1.0 / density
        self.phase_function = Isotropic(albedo)

    def hit(self, ray: Ray, ray_t: Interval,
            rng: Optional[random.Random] = None) -> Optional[HitRecord]:
        rng = rng or random
        rec1 = self.boundary.hit(ray, UNIVERSE, rng)
        if rec1 is None:
            return None
        rec2 = self.boundary.hit(ray, Interval(rec1.t + 0.0001, math.inf), rng)
        if rec2 is None:
            return None

        t_enter = max(rec1.t, ray_t.min)
        t_exit = min(rec2.t, ray_t.max)
        # Also rejects a ray grazing the boundary at t=0
        if t_enter >= t_exit:
            return None
        t_enter = max(t_enter, 0.0)

        ray_length = ray.direction.length()
        distance_inside_boundary = (t_exit - t_enter) * ray_length
        # 1 - random() lies in (0, 1], keeping log() finite
        hit_distance = self.neg_inv_density * math.log(1.0 - rng.random())

        if hit_distance > distance_inside_boundary:
            return None

        t = t_enter + hit_distance / ray_length
        return HitRecord(
            p=ray.at(t),
            normal=Vector3(1, 0, 0),  # arbitrary
            t=t,
            front_face=True,          # also arbitrary
            material=self.phase_function,
            u=rec1.u,
            v=rec1.v,
        )

    def bounding_box(self) -> AABB:
        return self.boundary.bounding_box()
