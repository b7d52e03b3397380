"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from dcmcore.algebra.transform import Transform2D, Transform3D


@pytest.fixture
def rng():
    """Fixture providing a seeded random generator."""
    return np.random.default_rng(20130417)


def _unit(vec):
    return vec / np.linalg.norm(vec)


@pytest.fixture
def make_transform3d(rng):
    """Fixture providing a factory of random 3D transforms with positive scale."""
    def make():
        quat = _unit(rng.normal(size=4))
        translation = rng.uniform(-10.0, 10.0, 3)
        scale = rng.uniform(0.2, 5.0)
        return Transform3D(rotation=quat, translation=translation, scale=scale)
    return make


@pytest.fixture
def make_transform2d(rng):
    """Fixture providing a factory of random 2D transforms with positive scale."""
    def make():
        angle = rng.uniform(-np.pi, np.pi)
        translation = rng.uniform(-10.0, 10.0, 2)
        scale = rng.uniform(0.2, 5.0)
        return Transform2D(rotation=angle, translation=translation, scale=scale)
    return make


@pytest.fixture
def make_line(rng):
    """Fixture providing a factory of random line parameter vectors [point, unit direction]."""
    def make():
        return np.concatenate([rng.uniform(-5.0, 5.0, 3), _unit(rng.normal(size=3))])
    return make


@pytest.fixture
def make_cylinder(rng):
    """Fixture providing a factory of random cylinder parameter vectors [point, unit axis, radius]."""
    def make():
        return np.concatenate([rng.uniform(-5.0, 5.0, 3), _unit(rng.normal(size=3)), [rng.uniform(0.5, 3.0)]])
    return make
