# materials/diffuse_light.py
from typing import Union

from pathtracer.core.ray import Ray
from pathtracer.core.vector import Color, Point3, black
from pathtracer.geometry.hittable import HitRecord
from pathtracer.materials.material import Material
from pathtracer.materials.textures import Texture, as_texture


class DiffuseLight(Material):
    """
    Emissive material that provides constant radiance with optional texture support.

    Emission is one-sided: only the front face (the side the geometric
    normal points to) glows. The texture can be used to create patterns in
    the emitted light.
    """
    def __init__(self, emit: Union[Color, Texture]):
        self.texture = as_texture(emit)

    def emitted(self, ray_in: Ray, rec: HitRecord, u: float, v: float, p: Point3) -> Color:
        """
        Return the emitted radiance.

        Args:
            ray_in (Ray): The incoming ray.
            rec (HitRecord): The intersection being shaded.
            u (float): The horizontal texture coordinate.
            v (float): The vertical texture coordinate.
            p (Point3): The hit point.

        Returns:
            Color: The emission color from the texture, or black on the back face.
        """
        if not rec.front_face:
            return black()
        return self.texture.value(u, v, p)
