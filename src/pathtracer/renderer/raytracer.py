# renderer/raytracer.py
import logging
import math
import random
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Callable, Iterable, List, Optional, Tuple, Union

import numpy as np

from pathtracer import config
from pathtracer.camera.camera import Camera
from pathtracer.core.interval import Interval
from pathtracer.core.ray import Ray
from pathtracer.core.vector import Color, black, white
from pathtracer.geometry.hittable import Hittable
from pathtracer.geometry.world import HittableList
from pathtracer.materials.pdf import HittablePDF, MixturePDF
from pathtracer.renderer.tone_mapping import tone_map

logger = logging.getLogger(__name__)

# Offset of the first accepted hit, avoids self-intersection ("shadow acne")
T_MIN = 0.001
SKY_BLUE = Color(0.5, 0.7, 1.0)

ProgressCallback = Callable[[int, int], None]


class Renderer:
    """
    CPU path tracer.

    The image is split into scanlines, each rendered as an independent job on
    a process pool (or inline when a single worker is requested). Every row
    owns a `random.Random` derived from the render seed, so a fixed seed
    reproduces the same image whatever the worker count or completion order.

    The camera, world and lights must be picklable: each worker process
    receives its own copy when the pool starts.
    """
    def __init__(self, camera: Camera, world: Hittable,
                 lights: Optional[Union[Hittable, Iterable[Hittable]]] = None,
                 workers: Optional[int] = None, seed: Optional[int] = None,
                 progress: Optional[ProgressCallback] = None):
        self.camera = camera
        self.world = world
        self.lights = self._as_light_list(lights)
        self.workers = workers if workers is not None else config.RENDER_WORKERS
        if self.workers < 1:
            raise ValueError("workers must be at least 1")
        self.seed = seed
        self.progress = progress

    @staticmethod
    def _as_light_list(lights) -> Optional[Hittable]:
        if lights is None:
            return None
        if not isinstance(lights, Hittable):
            lights = HittableList(lights)
        if isinstance(lights, HittableList) and len(lights) == 0:
            return None
        return lights

    def background_color(self, ray: Ray) -> Color:
        background = self.camera.background
        if background is not None:
            return background
        unit_direction = ray.direction.normalize()
        a = 0.5 * (unit_direction.y + 1.0)
        return white() * (1.0 - a) + SKY_BLUE * a

    def ray_color(self, ray: Ray, depth: int, rng: random.Random) -> Color:
        """Radiance arriving along `ray`, estimated with a single path."""
        # If we've exceeded the ray bounce limit, no more light is gathered.
        if depth <= 0:
            return black()

        rec = self.world.hit(ray, Interval(T_MIN, math.inf), rng)
        if rec is None:
            return self.background_color(ray)

        material = rec.material
        color_from_emission = material.emitted(ray, rec, rec.u, rec.v, rec.p)

        srec = material.scatter(ray, rec, rng)
        if srec is None:
            return color_from_emission

        if srec.skip_pdf:
            return srec.attenuation * self.ray_color(srec.skip_pdf_ray, depth - 1, rng)

        if self.lights is not None:
            light_pdf = HittablePDF(self.lights, rec.p)
            pdf = MixturePDF(light_pdf, srec.pdf)
        else:
            pdf = srec.pdf

        scattered = Ray(rec.p, pdf.generate(rng), ray.time)
        pdf_value = pdf.value(scattered.direction)
        if not pdf_value > 0:
            return color_from_emission

        scattering_pdf = material.scattering_pdf(ray, rec, scattered)
        sample_color = self.ray_color(scattered, depth - 1, rng)
        color_from_scatter = srec.attenuation * sample_color * (scattering_pdf / pdf_value)

        return color_from_emission + color_from_scatter

    def row_rng(self, j: int) -> random.Random:
        """Generator for scanline `j`, identical to child `j` of the render's seed sequence."""
        seq = np.random.SeedSequence(self.seed, spawn_key=(j,))
        return self._rng_from_sequence(seq)

    @staticmethod
    def _rng_from_sequence(seq: np.random.SeedSequence) -> random.Random:
        state = seq.generate_state(2, dtype=np.uint64)
        return random.Random((int(state[0]) << 64) | int(state[1]))

    def render_row(self, j: int, rng: Optional[random.Random] = None) -> List[Color]:
        """Linear radiance of every pixel in scanline `j`."""
        if rng is None:
            rng = self.row_rng(j)
        cam = self.camera
        sqrt_spp = cam.sqrt_spp
        max_depth = cam.max_depth
        row = []
        for i in range(cam.image_width):
            pixel_color = black()
            for s_j in range(sqrt_spp):
                for s_i in range(sqrt_spp):
                    ray = cam.get_ray(i, j, s_i, s_j, rng)
                    pixel_color = pixel_color + self.ray_color(ray, max_depth, rng)
            row.append(pixel_color * cam.pixel_samples_scale)
        return row

    def _report(self, done: int, total: int):
        if self.progress is not None:
            self.progress(done, total)

    def render_linear(self) -> np.ndarray:
        """Render the full image as an (height, width, 3) float array of linear radiance."""
        width = self.camera.image_width
        height = self.camera.image_height
        workers = min(self.workers, height)
        logger.info("Rendering %dx%d, %d samples/pixel, depth %d on %d worker(s)",
                    width, height, self.camera.sqrt_spp ** 2,
                    self.camera.max_depth, workers)

        root = np.random.SeedSequence(self.seed)
        row_rngs = [self._rng_from_sequence(child) for child in root.spawn(height)]

        image = np.zeros((height, width, 3), dtype=np.float64)
        start = time.perf_counter()
        if workers == 1:
            for j in range(height):
                image[j] = [tuple(color) for color in self.render_row(j, row_rngs[j])]
                self._report(j + 1, height)
        else:
            # The scene is pickled once per worker process, not once per row
            with ProcessPoolExecutor(max_workers=workers, initializer=_init_worker,
                                     initargs=(self.camera, self.world, self.lights)) as executor:
                futures = [executor.submit(_render_row_job, j, row_rngs[j])
                           for j in range(height)]
                for done, future in enumerate(as_completed(futures), 1):
                    j, row = future.result()
                    image[j] = row
                    self._report(done, height)

        logger.info("Rendered %d rows in %.2fs", height, time.perf_counter() - start)
        return image

    def render(self) -> np.ndarray:
        """Render the full image and tone-map it to 8-bit RGB."""
        return tone_map(self.render_linear())


# Scene copy owned by a pool worker, set up by _init_worker
_worker_renderer: Optional[Renderer] = None


def _init_worker(camera: Camera, world: Hittable, lights: Optional[Hittable]):
    global _worker_renderer
    _worker_renderer = Renderer(camera, world, lights, workers=1)


def _render_row_job(j: int, rng: random.Random) -> Tuple[int, List[Tuple[float, float, float]]]:
    row = _worker_renderer.render_row(j, rng)
    return j, [tuple(color) for color in row]
