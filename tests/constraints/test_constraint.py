"""Tests for constraint instances."""

import dataclasses

import numpy as np
import pytest

from dcmcore.constraints.constraint import Constraint, ConstraintKind
from dcmcore.constraints.direction import Direction
from dcmcore.constraints.parallel import CylinderCylinderParallel
from dcmcore.errors import ConstraintSetupError
from dcmcore.geometry.layouts import GeometryTag


def test_create_resolves_functor_once():
    """The tag pair is resolved to a functor when the constraint is declared."""
    constraint = Constraint.create(ConstraintKind.PARALLEL, GeometryTag.CYLINDER3D,
                                   GeometryTag.CYLINDER3D, Direction.OPPOSITE)

    assert isinstance(constraint.functor, CylinderCylinderParallel)
    assert constraint.functor.direction is Direction.OPPOSITE


def test_unregistered_pair_fails_on_declaration():
    """Layout mismatches surface at setup time."""
    with pytest.raises(ConstraintSetupError):
        Constraint.create(ConstraintKind.PARALLEL, GeometryTag.POINT3D, GeometryTag.POINT3D)


def test_forwards_to_functor(make_line, rng):
    """Residual and gradients are the functor's."""
    constraint = Constraint.create(ConstraintKind.PARALLEL, GeometryTag.LINE3D, GeometryTag.PLANE3D)
    p1, p2 = make_line(), make_line()
    dp1, dp2 = rng.normal(size=6), rng.normal(size=6)

    assert constraint.residual(p1, p2) == constraint.functor.calculate(p1, p2)
    assert constraint.gradient_first(p1, p2, dp1) == constraint.functor.calculate_gradient_first(p1, p2, dp1)
    assert constraint.gradient_second(p1, p2, dp2) == constraint.functor.calculate_gradient_second(p1, p2, dp2)


def test_complete_gradient_allocates_or_fills(make_line):
    """Without a buffer a new one is returned; with a buffer that buffer is filled."""
    constraint = Constraint.create(ConstraintKind.PARALLEL, GeometryTag.LINE3D, GeometryTag.LINE3D)
    p1, p2 = make_line(), make_line()

    allocated = constraint.gradient_first_complete(p1, p2)
    buffer = np.empty(6)
    returned = constraint.gradient_second_complete(p1, p2, buffer)

    assert allocated.shape == (6,)
    assert returned is buffer
    np.testing.assert_allclose(allocated[3:6], -buffer[3:6])


def test_constraint_is_immutable():
    """Direction and tags cannot be changed behind the resolved functor."""
    constraint = Constraint.create(ConstraintKind.PARALLEL, GeometryTag.LINE3D, GeometryTag.LINE3D)
    p1 = np.array([0.0, 0.0, 0.0, 1.0, 0.0, 0.0])
    p2 = np.array([0.0, 0.0, 0.0, -1.0, 0.0, 0.0])

    with pytest.raises(dataclasses.FrozenInstanceError):
        constraint.direction = Direction.OPPOSITE
    with pytest.raises(dataclasses.FrozenInstanceError):
        constraint.second_tag = GeometryTag.PLANE3D

    assert constraint.residual(p1, p2) == pytest.approx(2.0)
    opposite = Constraint.create(ConstraintKind.PARALLEL, GeometryTag.LINE3D, GeometryTag.LINE3D,
                                 Direction.OPPOSITE)
    assert opposite.residual(p1, p2) == pytest.approx(0.0)


def test_kind_and_direction_accept_values():
    """Enum values are coerced; an unknown kind is a setup error."""
    constraint = Constraint.create("parallel", GeometryTag.LINE3D, GeometryTag.LINE3D, "both")

    assert constraint.kind is ConstraintKind.PARALLEL
    assert constraint.direction is Direction.BOTH
    assert constraint == Constraint.create(ConstraintKind.PARALLEL, GeometryTag.LINE3D,
                                           GeometryTag.LINE3D, Direction.BOTH)
    with pytest.raises(ConstraintSetupError):
        Constraint.create("perpendicular", GeometryTag.LINE3D, GeometryTag.LINE3D)
