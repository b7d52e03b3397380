"""Tests for parameter-vector layouts."""

import numpy as np
import pytest

from dcmcore.errors import LayoutError
from dcmcore.geometry.layouts import LAYOUTS, GeometryTag, SubRange, layout_for


def test_layout_table():
    """Lines and planes share a layout; cylinders add a radius."""
    line = layout_for(GeometryTag.LINE3D)
    plane = layout_for(GeometryTag.PLANE3D)
    cylinder = layout_for(GeometryTag.CYLINDER3D)

    assert line.size == plane.size == 6
    assert line.direction == plane.direction == SubRange(3, 3)
    assert cylinder.size == 7
    assert cylinder.direction == SubRange(3, 3)
    assert cylinder.radius == SubRange(6, 1)
    assert layout_for(GeometryTag.POINT3D).direction is None
    assert set(LAYOUTS) == set(GeometryTag)


def test_subrange_is_borrowed_view():
    """Views alias the owner's storage."""
    owner = np.arange(7, dtype=np.float64)
    segment = SubRange(3, 3)

    view = segment.view(owner)
    view[:] = 0.0

    assert np.shares_memory(view, owner)
    np.testing.assert_array_equal(owner, [0.0, 1.0, 2.0, 0.0, 0.0, 0.0, 6.0])


def test_subrange_bounds():
    """A range past the end of the vector is a layout error."""
    with pytest.raises(LayoutError):
        SubRange(3, 3).view(np.zeros(4))


def test_complement_mask():
    """The complement selects everything outside the range."""
    mask = SubRange(3, 3).complement_mask(7)

    np.testing.assert_array_equal(mask, [True, True, True, False, False, False, True])


def test_check_rejects_wrong_length():
    """check validates length and returns a float vector."""
    layout = layout_for(GeometryTag.LINE3D)

    checked = layout.check([0, 0, 0, 1, 0, 0])

    assert checked.dtype == np.float64
    with pytest.raises(LayoutError):
        layout.check(np.zeros(7))


def test_ranges_in_vector_order():
    """Named ranges come out in position, direction, radius order."""
    names = [name for name, _ in layout_for(GeometryTag.CYLINDER3D).ranges()]

    assert names == ["position", "direction", "radius"]
