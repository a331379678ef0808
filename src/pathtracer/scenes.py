"""Built-in scenes and the camera poses that go with them."""

import logging

import numpy as np

from pathtracer.camera.camera import Camera
from pathtracer.core.utils import random_double, random_vector
from pathtracer.core.vector import Point3, Vector3
from pathtracer.geometry.sphere import Sphere
from pathtracer.geometry.world import HittableList
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.metal import Metal
from pathtracer.materials.presets import ColorPresets, DielectricPresets, MetalPresets

logger = logging.getLogger(__name__)


def simple_scene() -> HittableList:
    """
    Three balls on a large ground sphere: matte in the middle, a hollow glass
    ball on the left and gold metal on the right.
    """
    world = HittableList()

    world.add(Sphere(Point3(0, -100.5, -1), 100, ColorPresets.matte(ColorPresets.GROUND_YELLOW)))
    world.add(Sphere(Point3(0, 0, -1), 0.5, ColorPresets.matte(ColorPresets.MATTE_BLUE)))

    # The negative-radius inner sphere shares the glass and flips its normals,
    # which leaves a thin glass shell.
    glass = DielectricPresets.glass()
    world.add(Sphere(Point3(-1, 0, -1), 0.5, glass))
    world.add(Sphere(Point3(-1, 0, -1), -0.4, glass))

    world.add(Sphere(Point3(1, 0, -1), 0.5, MetalPresets.gold()))

    logger.info("Built simple scene with %d objects", len(world))
    return world


def random_scene(rng) -> HittableList:
    """
    A ground sphere covered in a grid of small randomized balls, plus three
    large glass, matte and metal balls.
    """
    world = HittableList()
    world.add(Sphere(Point3(0, -1000, 0), 1000, ColorPresets.matte(ColorPresets.GROUND_GRAY)))

    clearance_point = Point3(4, 0.2, 0)
    glass = DielectricPresets.glass()

    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = random_double(rng)
            center = Point3(a + 0.9 * random_double(rng), 0.2, b + 0.9 * random_double(rng))

            if (center - clearance_point).length() <= 0.9:
                continue

            if choose_mat < 0.8:
                # diffuse
                albedo = random_vector(rng) * random_vector(rng)
                sphere_material = Lambertian(albedo)
            elif choose_mat < 0.95:
                # metal
                albedo = random_vector(rng, 0.5, 1.0)
                fuzz = random_double(rng, 0.0, 0.5)
                sphere_material = Metal(albedo, fuzz)
            else:
                sphere_material = glass
            world.add(Sphere(center, 0.2, sphere_material))

    world.add(Sphere(Point3(0, 1, 0), 1.0, glass))
    world.add(Sphere(Point3(-4, 1, 0), 1.0, ColorPresets.matte(ColorPresets.MATTE_BROWN)))
    world.add(Sphere(Point3(4, 1, 0), 1.0, MetalPresets.bronze()))

    logger.info("Built random scene with %d objects", len(world))
    return world


CAMERA_PRESETS = {
    "simple": {
        "lookfrom": Point3(3, 3, 2),
        "lookat": Point3(0, 0, -1),
        "vfov": 20.0,
        "aperture": 0.1,
        "focus_dist": None,  # Focus on the look-at point
    },
    "random": {
        "lookfrom": Point3(13, 2, 3),
        "lookat": Point3(0, 0, 0),
        "vfov": 20.0,
        "aperture": 0.1,
        "focus_dist": 10.0,
    },
}

SCENES = {
    "simple": lambda rng: simple_scene(),
    "random": random_scene,
}


def build_scene(name: str, rng=None) -> HittableList:
    if name not in SCENES:
        raise ValueError(f"unknown scene {name!r}, expected one of {', '.join(SCENES)}")
    if rng is None:
        rng = np.random.default_rng()
    return SCENES[name](rng)


def build_camera(name: str, aspect_ratio: float) -> Camera:
    if name not in CAMERA_PRESETS:
        raise ValueError(f"unknown scene {name!r}, expected one of {', '.join(CAMERA_PRESETS)}")
    preset = CAMERA_PRESETS[name]
    focus_dist = preset["focus_dist"]
    if focus_dist is None:
        focus_dist = (preset["lookfrom"] - preset["lookat"]).length()
    return Camera(
        preset["lookfrom"],
        preset["lookat"],
        Vector3(0, 1, 0),
        preset["vfov"],
        aspect_ratio,
        aperture=preset["aperture"],
        focus_dist=focus_dist,
    )
