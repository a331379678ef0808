"""Tests for the built-in scenes."""

import numpy as np
import pytest

from pathtracer.core.vector import Point3
from pathtracer.materials.dielectric import Dielectric
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.metal import Metal
from pathtracer.scenes import build_camera, build_scene, random_scene, simple_scene


def test_simple_scene():
    world = simple_scene()
    spheres = list(world)
    assert len(spheres) == 5
    assert spheres[0].radius == 100

    shells = [s for s in spheres if s.center == Point3(-1, 0, -1)]
    assert sorted(s.radius for s in shells) == [-0.4, 0.5]
    # Outer and inner surfaces of the hollow ball share one glass material
    assert shells[0].material is shells[1].material
    assert isinstance(shells[0].material, Dielectric)


def test_random_scene_is_reproducible():
    a = random_scene(np.random.default_rng(3))
    b = random_scene(np.random.default_rng(3))
    assert [tuple(s.center) for s in a] == [tuple(s.center) for s in b]
    assert [s.radius for s in a] == [s.radius for s in b]


def test_random_scene_layout():
    world = list(random_scene(np.random.default_rng(0)))
    ground, small, big = world[0], world[1:-3], world[-3:]

    assert ground.radius == 1000
    assert 0 < len(small) <= 22 * 22
    assert [s.radius for s in big] == [1.0, 1.0, 1.0]
    assert isinstance(big[0].material, Dielectric)
    assert isinstance(big[1].material, Lambertian)
    assert isinstance(big[2].material, Metal)

    for sphere in small:
        assert sphere.radius == 0.2
        assert sphere.center.y == 0.2
        assert (sphere.center - Point3(4, 0.2, 0)).length() > 0.9
        assert isinstance(sphere.material, (Lambertian, Metal, Dielectric))
        if isinstance(sphere.material, Metal):
            assert 0.0 <= sphere.material.fuzz < 0.5


def test_build_scene():
    assert len(build_scene("simple")) == 5
    assert len(build_scene("random", np.random.default_rng(1))) > 4


def test_build_camera_focuses_on_look_at_point():
    camera = build_camera("simple", 16 / 9)
    assert camera.focus_dist == pytest.approx((Point3(3, 3, 2) - Point3(0, 0, -1)).length())
    assert camera.lens_radius == pytest.approx(0.05)

    camera = build_camera("random", 1.5)
    assert camera.focus_dist == 10.0
    assert camera.aspect_ratio == 1.5


@pytest.mark.parametrize("build", [
    lambda: build_scene("cornell"),
    lambda: build_camera("cornell", 1.0),
])
def test_unknown_scene(build):
    with pytest.raises(ValueError):
        build()
