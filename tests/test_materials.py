"""Tests for material scattering."""

import math

import pytest

from pathtracer.core.ray import Ray
from pathtracer.core.vector import Color, Point3, Vector3
from pathtracer.geometry.hittable import HitRecord
from pathtracer.materials.dielectric import Dielectric, schlick
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.metal import Metal
from pathtracer.materials.presets import ColorPresets, DielectricPresets, MetalPresets


def floor_hit(material, front_face=True):
    """A hit on the y = 0 plane with the normal pointing up."""
    return HitRecord(p=Point3(0, 0, 0), normal=Vector3(0, 1, 0), t=1.0,
                     front_face=front_face, material=material)


class TestLambertian:

    def test_always_scatters_with_albedo(self, rng, gray):
        material = Lambertian(gray)
        rec = floor_hit(material)
        for _ in range(100):
            scattered, attenuation = material.scatter(Ray(Point3(0, 1, 0), Vector3(0, -1, 0)), rec, rng)
            assert attenuation is gray
            assert scattered.origin == rec.p
            # normal + unit vector never points below the surface
            assert scattered.direction.dot(rec.normal) >= 0

    def test_degenerate_direction_falls_back_to_normal(self, fixed_rng, gray):
        material = Lambertian(gray)
        rec = floor_hit(material)
        # Unit-ball sample (0, -0.5, 0) normalizes to exactly -normal
        rng = fixed_rng([0.0, -0.5, 0.0])
        scattered, _ = material.scatter(Ray(Point3(0, 1, 0), Vector3(0, -1, 0)), rec, rng)
        assert scattered.direction == rec.normal


class TestMetal:

    def test_polished_metal_reflects_exactly(self, fixed_rng):
        albedo = Color(0.8, 0.6, 0.2)
        material = Metal(albedo, 0.0)
        rec = floor_hit(material)
        rng = fixed_rng([0.1, 0.1, 0.1])
        scattered, attenuation = material.scatter(Ray(Point3(-1, 1, 0), Vector3(1, -1, 0)), rec, rng)
        assert attenuation is albedo
        assert scattered.direction.x == pytest.approx(1 / math.sqrt(2))
        assert scattered.direction.y == pytest.approx(1 / math.sqrt(2))

    def test_fuzz_into_surface_is_absorbed(self, fixed_rng):
        material = Metal(Color(0.8, 0.8, 0.8), 1.0)
        rec = floor_hit(material)
        rng = fixed_rng([0.0, -0.9, 0.0])
        ray = Ray(Point3(-1, 0.001, 0), Vector3(1, -0.001, 0))
        assert material.scatter(ray, rec, rng) is None

    def test_fuzz_is_clamped(self):
        assert Metal(Color(1, 1, 1), 3.0).fuzz == 1
        assert Metal(Color(1, 1, 1), 0.3).fuzz == 0.3

    def test_negative_fuzz_is_rejected(self):
        with pytest.raises(ValueError):
            Metal(Color(1, 1, 1), -0.1)


class TestDielectric:

    def test_total_internal_reflection(self, fixed_rng):
        material = Dielectric(1.5)
        # Inside the glass at a grazing angle: no draw is needed
        rec = floor_hit(material, front_face=False)
        rng = fixed_rng([])
        ray = Ray(Point3(-1, 0.1, 0), Vector3(1, -0.1, 0))
        scattered, attenuation = material.scatter(ray, rec, rng)
        assert attenuation == Color(1.0, 1.0, 1.0)
        assert scattered.direction.y > 0
        assert scattered.direction.x == pytest.approx(ray.direction.normalize().x)

    def test_head_on_refracts_when_draw_exceeds_reflectance(self, fixed_rng):
        material = Dielectric(1.5)
        rec = floor_hit(material)
        scattered, attenuation = material.scatter(Ray(Point3(0, 1, 0), Vector3(0, -1, 0)), rec,
                                                  fixed_rng([0.5]))
        assert attenuation == Color(1.0, 1.0, 1.0)
        assert scattered.direction.x == pytest.approx(0.0)
        assert scattered.direction.y == pytest.approx(-1.0)

    def test_head_on_reflects_when_draw_is_below_reflectance(self, fixed_rng):
        material = Dielectric(1.5)
        rec = floor_hit(material)
        # Reflectance at normal incidence is 0.04
        scattered, _ = material.scatter(Ray(Point3(0, 1, 0), Vector3(0, -1, 0)), rec,
                                        fixed_rng([0.01]))
        assert scattered.direction.y == pytest.approx(1.0)

    def test_entering_and_leaving_bend_differently(self, fixed_rng):
        material = Dielectric(1.5)
        ray = Ray(Point3(-1, 1, 0), Vector3(0.3, -1, 0))
        entering, _ = material.scatter(ray, floor_hit(material, True), fixed_rng([0.99]))
        leaving, _ = material.scatter(ray, floor_hit(material, False), fixed_rng([0.99]))
        # Bends towards the normal entering glass and away from it leaving
        assert abs(entering.direction.x) < ray.direction.normalize().x
        assert abs(leaving.direction.x) > ray.direction.normalize().x

    def test_schlick(self):
        assert schlick(1.0, 1.0) == 0.0
        assert schlick(1.0, 1 / 1.5) == pytest.approx(0.04)
        assert schlick(0.0, 1 / 1.5) == pytest.approx(1.0)

    @pytest.mark.parametrize("ref_idx", [0, -1.5])
    def test_non_positive_index_is_rejected(self, ref_idx):
        with pytest.raises(ValueError):
            Dielectric(ref_idx)


def test_presets():
    assert isinstance(MetalPresets.gold(), Metal)
    assert DielectricPresets.glass().ref_idx == 1.5
    assert ColorPresets.matte(ColorPresets.MATTE_BLUE).albedo == Color(0.1, 0.2, 0.5)


@pytest.mark.parametrize("factory, ref_idx", [
    (DielectricPresets.glass, 1.5),
    (DielectricPresets.water, 1.33),
    (DielectricPresets.diamond, 2.42),
])
def test_dielectric_presets(factory, ref_idx):
    assert factory().ref_idx == ref_idx


@pytest.mark.parametrize("factory", [
    MetalPresets.gold, MetalPresets.bronze, MetalPresets.silver, MetalPresets.brushed_metal,
])
def test_metal_presets_are_valid(factory):
    metal = factory()
    assert 0.0 <= metal.fuzz <= 1.0
    assert all(0.0 <= c <= 1.0 for c in metal.albedo)
