# materials/pdf.py
import math
import random

from pathtracer.core.onb import ONB
from pathtracer.core.utils import random_cosine_direction, random_unit_vector
from pathtracer.core.vector import Point3, Vector3


class PDF:
    """
    Importance-sampling strategy over directions.
    """
    def value(self, direction: Vector3) -> float:
        """Probability density (per steradian) of sampling `direction`."""
        return 0.0

    def generate(self, rng: random.Random) -> Vector3:
        """Draw a direction distributed according to value()."""
        return Vector3(1, 0, 0)


class SpherePDF(PDF):
    """Uniform density over the whole sphere of directions."""

    def value(self, direction: Vector3) -> float:
        return 1 / (4 * math.pi)

    def generate(self, rng: random.Random) -> Vector3:
        return random_unit_vector(rng)


class CosinePDF(PDF):
    """Cosine-weighted hemisphere about a surface normal."""

    def __init__(self, w: Vector3):
        self.uvw = ONB(w)

    def value(self, direction: Vector3) -> float:
        cosine_theta = direction.normalize().dot(self.uvw.w)
        return max(0.0, cosine_theta / math.pi)

    def generate(self, rng: random.Random) -> Vector3:
        return self.uvw.local(random_cosine_direction(rng))


class HittablePDF(PDF):
    """
    Samples directions from `origin` toward a Hittable used as a light.
    """
    def __init__(self, objects, origin: Point3):
        self.objects = objects
        self.origin = origin

    def value(self, direction: Vector3) -> float:
        return self.objects.pdf_value(self.origin, direction)

    def generate(self, rng: random.Random) -> Vector3:
        return self.objects.random(self.origin, rng)


class MixturePDF(PDF):
    """Equal-weight blend of two PDFs."""

    def __init__(self, p0: PDF, p1: PDF):
        self.p = (p0, p1)

    def value(self, direction: Vector3) -> float:
        return 0.5 * self.p[0].value(direction) + 0.5 * self.p[1].value(direction)

    def generate(self, rng: random.Random) -> Vector3:
        if rng.random() < 0.5:
            return self.p[0].generate(rng)
        return self.p[1].generate(rng)
