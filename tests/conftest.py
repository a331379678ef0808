"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from pathtracer.camera.camera import Camera
from pathtracer.core.vector import Color, Point3, Vector3
from pathtracer.geometry.world import HittableList


class SequenceRng:
    """
    Stand-in for numpy.random.Generator that replays a fixed list of draws.
    Values come back exactly as given, whatever range is requested.
    """

    def __init__(self, values):
        self.values = list(values)

    def uniform(self, low=0.0, high=1.0):
        if not self.values:
            raise AssertionError("unexpected random draw")
        return self.values.pop(0)

    def random(self):
        return self.uniform()


@pytest.fixture
def rng():
    """Seeded generator for reproducible sampling."""
    return np.random.default_rng(1234)


@pytest.fixture
def fixed_rng():
    """Factory for generators that return a fixed sequence of draws."""
    return SequenceRng


@pytest.fixture
def empty_world():
    return HittableList()


@pytest.fixture
def square_camera():
    """Pinhole camera at the origin looking down -z with a 90 degree square view."""
    return Camera(
        Point3(0, 0, 0),
        Point3(0, 0, -1),
        Vector3(0, 1, 0),
        90.0,
        1.0,
        aperture=0.0,
        focus_dist=1.0,
    )


@pytest.fixture
def gray():
    return Color(0.5, 0.5, 0.5)
