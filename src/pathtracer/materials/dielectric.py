# materials/dielectric.py
import math
import random

from pathtracer.core.ray import Ray
from pathtracer.core.utils import reflect, refract
from pathtracer.core.vector import white
from pathtracer.geometry.hittable import HitRecord
from pathtracer.materials.material import Material, ScatterRecord


class Dielectric(Material):
    """
    Clear refractive material (glass, water). Chooses stochastically
    between reflection and refraction using Schlick's approximation.
    """
    def __init__(self, refraction_index: float):
        # Refractive index in vacuum or air, or the ratio of the material's
        # index over the index of the enclosing medium
        self.refraction_index = refraction_index

    def scatter(self, ray_in: Ray, rec: HitRecord, rng: random.Random) -> ScatterRecord:
        attenuation = white()  # Glass doesn't absorb light

        # Determine if we're entering or exiting the material
        ri = 1.0 / self.refraction_index if rec.front_face else self.refraction_index

        unit_direction = ray_in.direction.normalize()
        cos_theta = min(-unit_direction.dot(rec.normal), 1.0)
        sin_theta = math.sqrt(max(0.0, 1.0 - cos_theta * cos_theta))

        cannot_refract = ri * sin_theta > 1.0
        if cannot_refract or reflectance(cos_theta, ri) > rng.random():
            direction = reflect(unit_direction, rec.normal)
        else:
            direction = refract(unit_direction, rec.normal, ri)

        return ScatterRecord(attenuation, skip_pdf_ray=Ray(rec.p, direction, ray_in.time))


def reflectance(cosine: float, refraction_index: float) -> float:
    """Schlick's approximation for reflectance."""
    r0 = (1.0 - refraction_index) / (1.0 + refraction_index)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * math.pow((1.0 - cosine), 5)
