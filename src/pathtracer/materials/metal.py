# materials/metal.py
import random
from typing import Optional, Union

from pathtracer.core.ray import Ray
from pathtracer.core.utils import random_unit_vector, reflect
from pathtracer.core.vector import Color
from pathtracer.geometry.hittable import HitRecord
from pathtracer.materials.material import Material, ScatterRecord
from pathtracer.materials.textures import Texture, as_texture


class Metal(Material):
    """
    Metal material with reflective properties and optional texture support.
    `fuzz` in [0, 1] blurs the reflection.
    """
    def __init__(self, albedo: Union[Color, Texture], fuzz: float = 0.0):
        self.texture = as_texture(albedo)
        self.fuzz = min(max(fuzz, 0.0), 1.0)

    def scatter(self, ray_in: Ray, rec: HitRecord, rng: random.Random) -> Optional[ScatterRecord]:
        reflected = reflect(ray_in.direction, rec.normal).normalize()
        reflected = (reflected + random_unit_vector(rng) * self.fuzz).normalize()

        # Absorb the ray if the fuzzed reflection points into the surface
        if reflected.dot(rec.normal) <= 0:
            return None

        attenuation = self.texture.value(rec.u, rec.v, rec.p)
        return ScatterRecord(attenuation, skip_pdf_ray=Ray(rec.p, reflected, ray_in.time))
