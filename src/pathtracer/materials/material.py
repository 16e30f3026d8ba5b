# materials/material.py
import random
from typing import Optional

from pathtracer.core.ray import Ray
from pathtracer.core.vector import Color, Point3, black
from pathtracer.geometry.hittable import HitRecord
from pathtracer.materials.pdf import PDF


class ScatterRecord:
    """
    Outcome of a scatter event.

    Either `pdf` is set and the integrator importance-samples the next
    direction from it, or `skip_pdf_ray` is set and the path simply
    continues along that ray (specular materials).
    """
    def __init__(self, attenuation: Color, pdf: Optional[PDF] = None,
                 skip_pdf_ray: Optional[Ray] = None):
        self.attenuation = attenuation
        self.pdf = pdf
        self.skip_pdf_ray = skip_pdf_ray

    @property
    def skip_pdf(self) -> bool:
        return self.skip_pdf_ray is not None


class Material:
    """
    Abstract material class. Subclasses override scatter() and, for
    PDF-sampled materials, scattering_pdf(); emitters override emitted().
    """
    def scatter(self, ray_in: Ray, rec: HitRecord, rng: random.Random) -> Optional[ScatterRecord]:
        """
        Computes how an incoming ray scatters at the hit point.
        Returns None if the ray is absorbed.
        """
        return None

    def scattering_pdf(self, ray_in: Ray, rec: HitRecord, scattered: Ray) -> float:
        return 0.0

    def emitted(self, ray_in: Ray, rec: HitRecord, u: float, v: float, p: Point3) -> Color:
        return black()

