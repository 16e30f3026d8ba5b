# core/onb.py
from pathtracer.core.vector import Vector3


class ONB:
    """
    Orthonormal basis whose w axis is aligned with a given vector.
    """
    def __init__(self, n: Vector3):
        self.w = n.normalize()
        a = Vector3(0, 1, 0) if abs(self.w.x) > 0.9 else Vector3(1, 0, 0)
        self.v = self.w.cross(a).normalize()
        self.u = self.w.cross(self.v)

    def local(self, a: Vector3) -> Vector3:
        """Transform a vector expressed in this basis into world space."""
        return self.u * a.x + self.v * a.y + self.w * a.z
