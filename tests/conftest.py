"""Pytest configuration for path tracer tests.

Provides a seeded random generator so that every sampling test is
reproducible, plus a few small scene building blocks.
"""

import random
from pathlib import Path

import pytest

from pathtracer import config
from pathtracer.core.vector import Color, Point3, Vector3
from pathtracer.geometry.hittable import HitRecord
from pathtracer.materials.lambertian import Lambertian


@pytest.fixture
def rng():
    """A deterministic generator for sampling tests."""
    return random.Random(1234)


@pytest.fixture
def gray():
    return Lambertian(Color(0.5, 0.5, 0.5))


@pytest.fixture
def up_hit():
    """A front-face hit at the origin on a surface facing +y."""
    return HitRecord(p=Point3(0, 0, 0), normal=Vector3(0, 1, 0), t=1.0,
                     front_face=True, u=0.5, v=0.5)


@pytest.fixture
def demo_objects(monkeypatch):
    """Point OBJECT_DIR at the meshes shipped with the project."""
    objects = Path(__file__).resolve().parent.parent / "objects"
    monkeypatch.setattr(config, "OBJECT_DIR", str(objects))
    return objects
