"""Demo scenes.

Each builder takes a `random.Random` used for any randomized placement and
returns a `Scene` ready to hand to the renderer.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from pathtracer.camera.camera import Camera, CameraSettings, ImageSettings
from pathtracer.core.vector import Color, Point3, Vector3, black
from pathtracer.geometry.medium import ConstantMedium
from pathtracer.geometry.mesh import load_obj
from pathtracer.geometry.quad import Quad, box
from pathtracer.geometry.sphere import Sphere
from pathtracer.geometry.transform import RotateY, Translate
from pathtracer.geometry.world import HittableList
from pathtracer.materials.dielectric import Dielectric
from pathtracer.materials.diffuse_light import DiffuseLight
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.metal import Metal
from pathtracer.materials.textures import CheckerTexture, ImageTexture, NoiseTexture

logger = logging.getLogger(__name__)

SKY = Color(0.7, 0.8, 1.0)


@dataclass
class Scene:
    world: HittableList
    lights: Optional[HittableList] = None
    image_settings: ImageSettings = field(default_factory=ImageSettings)
    camera_settings: CameraSettings = field(default_factory=CameraSettings)

    def camera(self) -> Camera:
        return Camera(self.image_settings, self.camera_settings)


def _random_color(rng: random.Random, low: float = 0.0, high: float = 1.0) -> Color:
    return Color(rng.uniform(low, high), rng.uniform(low, high), rng.uniform(low, high))


def bouncing_spheres(rng: random.Random) -> Scene:
    """Random field of small spheres around three large ones; diffuse ones move."""
    world = HittableList()

    checker = CheckerTexture(0.32, Color(0.2, 0.3, 0.1), Color(0.9, 0.9, 0.9))
    world.add(Sphere(Point3(0, -1000, 0), 1000, Lambertian(checker)))

    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = rng.random()
            center = Point3(a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random())

            if (center - Point3(4, 0.2, 0)).length() <= 0.9:
                continue

            if choose_mat < 0.8:
                # diffuse
                albedo = _random_color(rng) * _random_color(rng)
                center2 = center + Vector3(0, rng.uniform(0, 0.5), 0)
                world.add(Sphere(center, 0.2, Lambertian(albedo), center2))
            elif choose_mat < 0.95:
                # metal
                albedo = _random_color(rng, 0.5, 1.0)
                fuzz = rng.uniform(0, 0.5)
                world.add(Sphere(center, 0.2, Metal(albedo, fuzz)))
            else:
                # glass
                world.add(Sphere(center, 0.2, Dielectric(1.5)))

    world.add(Sphere(Point3(0, 1, 0), 1.0, Dielectric(1.5)))
    world.add(Sphere(Point3(-4, 1, 0), 1.0, Lambertian(Color(0.4, 0.2, 0.1))))
    world.add(Sphere(Point3(4, 1, 0), 1.0, Metal(Color(0.7, 0.6, 0.5), 0.0)))

    return Scene(
        world=world.build_bvh(),
        image_settings=ImageSettings(aspect_ratio=16.0 / 9.0, image_width=400,
                                     samples_per_pixel=100, max_depth=50, background=SKY),
        camera_settings=CameraSettings(vfov=20, look_from=Point3(13, 2, 3),
                                       look_at=Point3(0, 0, 0), defocus_angle=0.6,
                                       focus_dist=10.0),
    )


def checkered_spheres(rng: random.Random) -> Scene:
    world = HittableList()
    checker = CheckerTexture(0.32, Color(0.2, 0.3, 0.1), Color(0.9, 0.9, 0.9))
    world.add(Sphere(Point3(0, -10, 0), 10, Lambertian(checker)))
    world.add(Sphere(Point3(0, 10, 0), 10, Lambertian(checker)))

    return Scene(
        world=world.build_bvh(),
        image_settings=ImageSettings(image_width=400, samples_per_pixel=100,
                                     max_depth=50, background=SKY),
        camera_settings=CameraSettings(vfov=20, look_from=Point3(13, 2, 3),
                                       look_at=Point3(0, 0, 0)),
    )


def earth(rng: random.Random) -> Scene:
    """A globe textured from `earthmap.jpg`; renders magenta when the image is missing."""
    earth_surface = Lambertian(ImageTexture("earthmap.jpg"))
    world = HittableList([Sphere(Point3(0, 0, 0), 2, earth_surface)])

    return Scene(
        world=world.build_bvh(),
        image_settings=ImageSettings(image_width=400, samples_per_pixel=100,
                                     max_depth=50, background=SKY),
        camera_settings=CameraSettings(vfov=20, look_from=Point3(0, 0, 12),
                                       look_at=Point3(0, 0, 0)),
    )


def perlin_spheres(rng: random.Random) -> Scene:
    pertext = NoiseTexture(4, rng)
    world = HittableList()
    world.add(Sphere(Point3(0, -1000, 0), 1000, Lambertian(pertext)))
    world.add(Sphere(Point3(0, 2, 0), 2, Lambertian(pertext)))

    return Scene(
        world=world.build_bvh(),
        image_settings=ImageSettings(image_width=400, samples_per_pixel=100,
                                     max_depth=50, background=SKY),
        camera_settings=CameraSettings(vfov=20, look_from=Point3(13, 2, 3),
                                       look_at=Point3(0, 0, 0)),
    )


def quads(rng: random.Random) -> Scene:
    left_red = Lambertian(Color(1.0, 0.2, 0.2))
    back_green = Lambertian(NoiseTexture(4, rng))
    right_blue = Lambertian(Color(0.2, 0.2, 1.0))
    upper_orange = Lambertian(Color(1.0, 0.5, 0.0))
    lower_teal = Lambertian(Color(0.2, 0.8, 0.8))

    world = HittableList()
    world.add(Quad(Point3(-3, -2, 5), Vector3(0, 0, -4), Vector3(0, 4, 0), left_red))
    world.add(Quad(Point3(-2, -2, 0), Vector3(4, 0, 0), Vector3(0, 4, 0), back_green))
    world.add(Quad(Point3(3, -2, 1), Vector3(0, 0, 4), Vector3(0, 4, 0), right_blue))
    world.add(Quad(Point3(-2, 3, 1), Vector3(4, 0, 0), Vector3(0, 0, 4), upper_orange))
    world.add(Quad(Point3(-2, -3, 5), Vector3(4, 0, 0), Vector3(0, 0, -4), lower_teal))

    return Scene(
        world=world.build_bvh(),
        image_settings=ImageSettings(aspect_ratio=1.0, image_width=400,
                                     samples_per_pixel=100, max_depth=50, background=SKY),
        camera_settings=CameraSettings(vfov=80, look_from=Point3(0, 0, 9),
                                       look_at=Point3(0, 0, 0)),
    )


def simple_light(rng: random.Random) -> Scene:
    pertext = NoiseTexture(4, rng)
    world = HittableList()
    world.add(Sphere(Point3(0, -1000, 0), 1000, Lambertian(pertext)))
    world.add(Sphere(Point3(0, 2, 0), 2, Lambertian(pertext)))

    difflight = DiffuseLight(Color(4, 4, 4))
    light_sphere = Sphere(Point3(0, 7, 0), 2, difflight)
    light_quad = Quad(Point3(3, 1, -2), Vector3(2, 0, 0), Vector3(0, 2, 0), difflight)
    world.add(light_sphere)
    world.add(light_quad)

    return Scene(
        world=world.build_bvh(),
        lights=HittableList([light_sphere, light_quad]),
        image_settings=ImageSettings(image_width=400, samples_per_pixel=100,
                                     max_depth=50, background=black()),
        camera_settings=CameraSettings(vfov=20, look_from=Point3(26, 3, 6),
                                       look_at=Point3(0, 2, 0)),
    )


def _cornell_walls(world: HittableList) -> Quad:
    red = Lambertian(Color(0.65, 0.05, 0.05))
    white = Lambertian(Color(0.73, 0.73, 0.73))
    green = Lambertian(Color(0.12, 0.45, 0.15))
    light = DiffuseLight(Color(15, 15, 15))

    world.add(Quad(Point3(555, 0, 0), Vector3(0, 555, 0), Vector3(0, 0, 555), green))
    world.add(Quad(Point3(0, 0, 0), Vector3(0, 555, 0), Vector3(0, 0, 555), red))
    # Facing down, so only its underside emits
    ceiling_light = Quad(Point3(343, 554, 332), Vector3(-130, 0, 0), Vector3(0, 0, -105), light)
    world.add(ceiling_light)
    world.add(Quad(Point3(0, 0, 0), Vector3(555, 0, 0), Vector3(0, 0, 555), white))
    world.add(Quad(Point3(555, 555, 555), Vector3(-555, 0, 0), Vector3(0, 0, -555), white))
    world.add(Quad(Point3(0, 0, 555), Vector3(555, 0, 0), Vector3(0, 555, 0), white))
    return ceiling_light


_CORNELL_IMAGE = dict(aspect_ratio=1.0, image_width=600, samples_per_pixel=64,
                      max_depth=50, background=black())
_CORNELL_CAMERA = dict(vfov=40, look_from=Point3(278, 278, -800),
                       look_at=Point3(278, 278, 0))


def cornell_box(rng: random.Random) -> Scene:
    """Cornell box with an aluminium block and a glass sphere, both sampled as lights."""
    world = HittableList()
    ceiling_light = _cornell_walls(world)

    aluminum = Metal(Color(0.8, 0.85, 0.88), 0.0)
    box1 = box(Point3(0, 0, 0), Point3(165, 330, 165), aluminum)
    box1 = RotateY(box1, 15)
    box1 = Translate(box1, Vector3(265, 0, 295))
    world.add(box1)

    glass_sphere = Sphere(Point3(190, 90, 190), 90, Dielectric(1.5))
    world.add(glass_sphere)

    return Scene(
        world=world.build_bvh(),
        lights=HittableList([ceiling_light, glass_sphere]),
        image_settings=ImageSettings(**_CORNELL_IMAGE),
        camera_settings=CameraSettings(**_CORNELL_CAMERA),
    )


def cornell_mesh(rng: random.Random) -> Scene:
    """Cornell box with a pyramid mesh (materials from its MTL file) and a glass sphere."""
    world = HittableList()
    ceiling_light = _cornell_walls(world)

    pyramid = load_obj("pyramid.obj", scale=150)
    world.add(Translate(RotateY(pyramid, 30), Vector3(370, 0, 330)))

    glass_sphere = Sphere(Point3(170, 90, 190), 90, Dielectric(1.5))
    world.add(glass_sphere)

    return Scene(
        world=world.build_bvh(),
        lights=HittableList([ceiling_light, glass_sphere]),
        image_settings=ImageSettings(**_CORNELL_IMAGE),
        camera_settings=CameraSettings(**_CORNELL_CAMERA),
    )


def cornell_smoke(rng: random.Random) -> Scene:
    """Cornell box with two blocks of smoke, one dark and one light."""
    world = HittableList()
    ceiling_light = _cornell_walls(world)

    white = Lambertian(Color(0.73, 0.73, 0.73))
    box1 = box(Point3(0, 0, 0), Point3(165, 330, 165), white)
    box1 = Translate(RotateY(box1, 15), Vector3(265, 0, 295))
    box2 = box(Point3(0, 0, 0), Point3(165, 165, 165), white)
    box2 = Translate(RotateY(box2, -18), Vector3(130, 0, 65))

    world.add(ConstantMedium(box1, 0.01, Color(0, 0, 0)))
    world.add(ConstantMedium(box2, 0.01, Color(1, 1, 1)))

    return Scene(
        world=world.build_bvh(),
        lights=HittableList([ceiling_light]),
        image_settings=ImageSettings(**_CORNELL_IMAGE),
        camera_settings=CameraSettings(**_CORNELL_CAMERA),
    )


def final_scene(rng: random.Random) -> Scene:
    """Everything at once: boxes, motion blur, glass, fog, textures and instancing."""
    ground = Lambertian(Color(0.48, 0.83, 0.53))
    boxes1 = HittableList()
    boxes_per_side = 20
    for i in range(boxes_per_side):
        for j in range(boxes_per_side):
            w = 100.0
            x0 = -1000.0 + i * w
            z0 = -1000.0 + j * w
            y1 = rng.uniform(1, 101)
            boxes1.add(box(Point3(x0, 0.0, z0), Point3(x0 + w, y1, z0 + w), ground))

    world = HittableList()
    world.add(boxes1.build_bvh())

    light = DiffuseLight(Color(7, 7, 7))
    light_quad = Quad(Point3(123, 554, 147), Vector3(300, 0, 0), Vector3(0, 0, 265), light)
    world.add(light_quad)

    center1 = Point3(400, 400, 200)
    center2 = center1 + Vector3(30, 0, 0)
    world.add(Sphere(center1, 50, Lambertian(Color(0.7, 0.3, 0.1)), center2))

    world.add(Sphere(Point3(260, 150, 45), 50, Dielectric(1.5)))
    world.add(Sphere(Point3(0, 150, 145), 50, Metal(Color(0.8, 0.8, 0.9), 1.0)))

    boundary = Sphere(Point3(360, 150, 145), 70, Dielectric(1.5))
    world.add(boundary)
    world.add(ConstantMedium(boundary, 0.2, Color(0.2, 0.4, 0.9)))
    boundary = Sphere(Point3(0, 0, 0), 5000, Dielectric(1.5))
    world.add(ConstantMedium(boundary, 0.0001, Color(1, 1, 1)))

    world.add(Sphere(Point3(400, 200, 400), 100, Lambertian(ImageTexture("earthmap.jpg"))))
    world.add(Sphere(Point3(220, 280, 300), 80, Lambertian(NoiseTexture(0.2, rng))))

    white = Lambertian(Color(0.73, 0.73, 0.73))
    boxes2 = HittableList()
    for _ in range(1000):
        center = Point3(rng.uniform(0, 165), rng.uniform(0, 165), rng.uniform(0, 165))
        boxes2.add(Sphere(center, 10, white))
    world.add(Translate(RotateY(boxes2.build_bvh(), 15), Vector3(-100, 270, 395)))

    return Scene(
        world=world.build_bvh(),
        lights=HittableList([light_quad]),
        image_settings=ImageSettings(aspect_ratio=1.0, image_width=400,
                                     samples_per_pixel=250, max_depth=4, background=black()),
        camera_settings=CameraSettings(vfov=40, look_from=Point3(478, 278, -600),
                                       look_at=Point3(278, 278, 0)),
    )


SCENES: Dict[str, Callable[[random.Random], Scene]] = {
    "bouncing_spheres": bouncing_spheres,
    "checkered_spheres": checkered_spheres,
    "earth": earth,
    "perlin_spheres": perlin_spheres,
    "quads": quads,
    "simple_light": simple_light,
    "cornell_box": cornell_box,
    "cornell_mesh": cornell_mesh,
    "cornell_smoke": cornell_smoke,
    "final_scene": final_scene,
}


def build_scene(name: str, seed: Optional[int] = None) -> Scene:
    """Build the named demo scene; raises KeyError for unknown names."""
    builder = SCENES[name]
    logger.info("Building scene %r", name)
    return builder(random.Random(seed))
