# materials/textures.py
import math
import random
from typing import Iterable, Optional, Union

from pathtracer.core.interval import Interval
from pathtracer.core.vector import Color, Point3
from pathtracer.materials.perlin import Perlin
from pathtracer.materials.texture_loader import ImageData

UNIT_INTERVAL = Interval(0.0, 1.0)


class Texture:
    """Base class for all textures."""
    def value(self, u: float, v: float, p: Point3) -> Color:
        """Color at surface coordinates (u, v) and hit point p."""
        raise NotImplementedError("value() must be implemented by texture subclasses.")


class SolidColor(Texture):
    """A solid color texture."""
    def __init__(self, albedo: Color):
        self.albedo = albedo

    def value(self, u: float, v: float, p: Point3) -> Color:
        return self.albedo


def as_texture(albedo: Union[Color, Texture]) -> Texture:
    """Wrap a plain color in a SolidColor texture; pass textures through."""
    if isinstance(albedo, Texture):
        return albedo
    return SolidColor(albedo)


class CheckerTexture(Texture):
    """
    A 3D checker pattern alternating between two textures in cells of
    side `scale`.
    """
    def __init__(self, scale: float, even: Union[Color, Texture], odd: Union[Color, Texture]):
        self.inv_scale = 1.0 / scale
        self.even = as_texture(even)
        self.odd = as_texture(odd)

    def value(self, u: float, v: float, p: Point3) -> Color:
        x = math.floor(self.inv_scale * p.x)
        y = math.floor(self.inv_scale * p.y)
        z = math.floor(self.inv_scale * p.z)
        is_even = (x + y + z) % 2 == 0
        return self.even.value(u, v, p) if is_even else self.odd.value(u, v, p)


class ImageTexture(Texture):
    """A texture from an image file, mapped by (u, v)."""
    def __init__(self, filename: str, search_dirs: Optional[Iterable[str]] = None):
        self.image = ImageData(filename, search_dirs)

    def value(self, u: float, v: float, p: Point3) -> Color:
        # Clamp input texture coordinates to [0,1] x [1,0]
        u = UNIT_INTERVAL.clamp(u)
        v = 1.0 - UNIT_INTERVAL.clamp(v)  # Flip V to image coordinates

        i = int(u * self.image.width)
        j = int(v * self.image.height)
        pixel = self.image.pixel_data(i, j)

        color_scale = 1.0 / 255.0
        return Color(
            gamma_to_linear(color_scale * pixel[0]),
            gamma_to_linear(color_scale * pixel[1]),
            gamma_to_linear(color_scale * pixel[2]),
        )


def gamma_to_linear(gamma_component: float) -> float:
    if gamma_component > 0:
        return gamma_component * gamma_component
    return 0.0


class NoiseTexture(Texture):
    """A marble-like procedural texture driven by Perlin turbulence."""
    def __init__(self, scale: float = 1.0, rng: Optional[random.Random] = None):
        self.noise = Perlin(rng)
        self.scale = scale

    def value(self, u: float, v: float, p: Point3) -> Color:
        return Color(0.5, 0.5, 0.5) * (1 + math.sin(self.scale * p.z + 10 * self.noise.turb(p, 7)))
