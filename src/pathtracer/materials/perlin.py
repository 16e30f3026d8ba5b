# materials/perlin.py
import math
import random
from typing import Optional

import numpy as np

from pathtracer.core.vector import Point3, Vector3


class Perlin:
    """
    Gradient noise over 3D space with a 256-entry lattice.

    Permutation tables and gradient vectors are generated once with numpy
    and stored as plain lists for fast scalar lookups.
    """
    POINT_COUNT = 256

    def __init__(self, rng: Optional[random.Random] = None):
        seed = rng.getrandbits(64) if rng is not None else None
        gen = np.random.default_rng(seed)

        vectors = gen.uniform(-1.0, 1.0, size=(self.POINT_COUNT, 3))
        norms = np.linalg.norm(vectors, axis=1, keepdims=True)
        vectors = vectors / np.where(norms > 0, norms, 1.0)
        self.ranvec = [Vector3(*row) for row in vectors.tolist()]

        self.perm_x = gen.permutation(self.POINT_COUNT).tolist()
        self.perm_y = gen.permutation(self.POINT_COUNT).tolist()
        self.perm_z = gen.permutation(self.POINT_COUNT).tolist()

    def noise(self, p: Point3) -> float:
        """Smooth noise value in roughly [-1, 1]."""
        u = p.x - math.floor(p.x)
        v = p.y - math.floor(p.y)
        w = p.z - math.floor(p.z)

        i = int(math.floor(p.x))
        j = int(math.floor(p.y))
        k = int(math.floor(p.z))

        c = [[[None, None], [None, None]], [[None, None], [None, None]]]
        for di in range(2):
            for dj in range(2):
                for dk in range(2):
                    c[di][dj][dk] = self.ranvec[
                        self.perm_x[(i + di) & 255]
                        ^ self.perm_y[(j + dj) & 255]
                        ^ self.perm_z[(k + dk) & 255]
                    ]
        return _perlin_interp(c, u, v, w)

    def turb(self, p: Point3, depth: int = 7) -> float:
        """Sum of `depth` octaves of absolute noise."""
        accum = 0.0
        temp_p = p
        weight = 1.0
        for _ in range(depth):
            accum += weight * self.noise(temp_p)
            weight *= 0.5
            temp_p = temp_p * 2
        return abs(accum)


def _perlin_interp(c, u: float, v: float, w: float) -> float:
    # Hermite smoothing of the fractional coordinates
    uu = u * u * (3 - 2 * u)
    vv = v * v * (3 - 2 * v)
    ww = w * w * (3 - 2 * w)
    accum = 0.0
    for i in range(2):
        for j in range(2):
            for k in range(2):
                weight_v = Vector3(u - i, v - j, w - k)
                accum += ((i * uu + (1 - i) * (1 - uu))
                          * (j * vv + (1 - j) * (1 - vv))
                          * (k * ww + (1 - k) * (1 - ww))
                          * c[i][j][k].dot(weight_v))
    return accum
