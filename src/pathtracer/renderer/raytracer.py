# renderer/raytracer.py
import logging
import math
import multiprocessing
import time
from concurrent.futures import ProcessPoolExecutor, as_completed

import numpy as np
from tqdm import tqdm

from pathtracer.core.ray import Ray
from pathtracer.core.vector import Color
from pathtracer.core.utils import random_double
from pathtracer.geometry.hittable import T_MIN
from pathtracer.renderer.image_output import to_rgb8
from pathtracer.renderer import kernels

logger = logging.getLogger(__name__)

WHITE = Color(1.0, 1.0, 1.0)
SKY_BLUE = Color(0.5, 0.7, 1.0)
BLACK = Color(0.0, 0.0, 0.0)


def background(ray: Ray) -> Color:
    """
    Vertical white-to-blue gradient, driven by the ray's unit direction y.
    """
    unit_direction = ray.direction.normalize()
    t = 0.5 * (unit_direction.y + 1.0)
    return WHITE * (1.0 - t) + SKY_BLUE * t


def ray_color(ray: Ray, world, depth: int, rng) -> Color:
    """
    Radiance arriving along ray, following at most depth bounces.

    The bounce recursion is unrolled into a loop that carries the product of
    the attenuations seen so far. Running out of bounces, or a material
    absorbing the ray, contributes black.
    """
    attenuation = WHITE
    while depth > 0:
        rec = world.hit(ray, T_MIN, math.inf)
        if rec is None:
            return attenuation * background(ray)

        scattered = rec.material.scatter(ray, rec, rng)
        if scattered is None:
            return BLACK

        ray, color = scattered
        attenuation = attenuation * color
        depth -= 1

    return BLACK


def scanline_rng(seed: int, j: int) -> np.random.Generator:
    """
    Independent generator for scanline j, derived from the render seed.
    """
    return np.random.default_rng([seed, j])


def render_scanline(j: int, camera, world, width: int, height: int,
                    samples_per_pixel: int, max_depth: int, seed: int,
                    jitter: bool = True) -> np.ndarray:
    """
    Renders scanline j (j = 0 is the bottom of the image) into a
    (width, 3) uint8 row, left to right.
    """
    rng = scanline_rng(seed, j)
    row = np.zeros((width, 3), dtype=np.uint8)
    s_scale = max(width - 1, 1)
    t_scale = max(height - 1, 1)

    for i in range(width):
        pixel_color = BLACK
        for _ in range(samples_per_pixel):
            du = random_double(rng) if jitter else 0.0
            dv = random_double(rng) if jitter else 0.0
            s = (i + du) / s_scale
            t = (j + dv) / t_scale
            ray = camera.get_ray(s, t, rng)
            pixel_color = pixel_color + ray_color(ray, world, max_depth, rng)
        row[i] = to_rgb8(pixel_color, samples_per_pixel)

    return row


# Per-process state for pool workers, filled once by the pool initializer.
_worker_state = {}


def _init_worker(camera, world, job):
    _worker_state["camera"] = camera
    _worker_state["world"] = world
    _worker_state["job"] = job


def _render_scanline_task(j: int):
    job = _worker_state["job"]
    row = render_scanline(j, _worker_state["camera"], _worker_state["world"], **job)
    return j, row


class Renderer:
    """
    Renders a scene into an (height, width, 3) uint8 image, top scanline first.

    With the python backend the scanlines are fanned out over a process pool;
    every scanline seeds its own generator from (seed, scanline), so the image
    depends only on the seed and not on the number of workers or the order in
    which scanlines complete.
    """
    def __init__(self, width: int, height: int, samples_per_pixel: int = 10,
                 max_depth: int = 20, seed: int = 0, workers: int = 1,
                 backend: str = "python", jitter: bool = True,
                 progress: bool = False):
        if width < 1 or height < 1:
            raise ValueError(f"image size must be at least 1x1, got {width}x{height}")
        if samples_per_pixel < 1:
            raise ValueError(f"samples per pixel must be at least 1, got {samples_per_pixel}")
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        if backend not in ("python", "numba"):
            raise ValueError(f"unknown backend {backend!r}")

        self.width = width
        self.height = height
        self.samples_per_pixel = samples_per_pixel
        self.max_depth = max_depth
        self.seed = seed
        self.workers = workers
        self.backend = backend
        self.jitter = jitter
        self.progress = progress

    @classmethod
    def from_settings(cls, settings, progress: bool = False) -> "Renderer":
        return cls(
            settings.image_width,
            settings.image_height,
            samples_per_pixel=settings.samples_per_pixel,
            max_depth=settings.max_depth,
            seed=settings.seed,
            workers=settings.workers,
            backend=settings.backend,
            jitter=settings.jitter,
            progress=progress,
        )

    def _job(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "samples_per_pixel": self.samples_per_pixel,
            "max_depth": self.max_depth,
            "seed": self.seed,
            "jitter": self.jitter,
        }

    def render(self, camera, world) -> np.ndarray:
        logger.info(
            "Rendering %dx%d, %d samples/pixel, max depth %d, backend %s, %d worker(s)",
            self.width, self.height, self.samples_per_pixel, self.max_depth,
            self.backend, self.workers,
        )
        start = time.perf_counter()

        if self.backend == "numba":
            image = kernels.render(camera, world, **self._job())
        else:
            image = np.zeros((self.height, self.width, 3), dtype=np.uint8)
            with tqdm(total=self.height, desc="Scanlines", unit="line",
                      disable=not self.progress) as bar:
                if self.workers == 1:
                    self._render_serial(image, camera, world, bar)
                else:
                    self._render_parallel(image, camera, world, bar)

        logger.info("Render finished in %.2fs", time.perf_counter() - start)
        return image

    def _render_serial(self, image, camera, world, bar):
        job = self._job()
        for j in range(self.height - 1, -1, -1):
            image[self.height - 1 - j] = render_scanline(j, camera, world, **job)
            bar.update()

    def _render_parallel(self, image, camera, world, bar):
        # Forked children inherit the numba threading layer and hang at exit,
        # so workers are always spawned.
        with ProcessPoolExecutor(max_workers=self.workers,
                                 mp_context=multiprocessing.get_context("spawn"),
                                 initializer=_init_worker,
                                 initargs=(camera, world, self._job())) as executor:
            futures = [executor.submit(_render_scanline_task, j)
                       for j in range(self.height - 1, -1, -1)]
            # Rows arrive in completion order; the row index restores raster order.
            for future in as_completed(futures):
                j, row = future.result()
                image[self.height - 1 - j] = row
                bar.update()
