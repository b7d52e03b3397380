"""
Parameter-vector layouts of the geometry tags.

Every geometry instance is a flat float vector. Which entries hold the
position, the direction or the radius is fixed per geometry tag; the
constraint functors read their sub-ranges through ``SubRange`` views and
must agree with this table at every call site.

    tag        size  position  direction  radius
    point3D      3     0:3        -         -
    line3D       6     0:3       3:6        -
    plane3D      6     0:3       3:6        -      (direction = normal)
    cylinder3D   7     0:3       3:6       6:7     (direction = axis)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

import numpy as np

from ..errors import LayoutError


class GeometryTag(Enum):
    POINT3D = "point3D"
    LINE3D = "line3D"
    PLANE3D = "plane3D"
    CYLINDER3D = "cylinder3D"


@dataclass(frozen=True)
class SubRange:
    """
    A borrowed slice ``[offset, offset + length)`` of a parameter vector.

    ``view`` returns a numpy view into the caller's vector, so writes go
    straight to the owner's storage. A SubRange never owns data.
    """

    offset: int
    length: int

    @property
    def stop(self) -> int:
        return self.offset + self.length

    @property
    def slice(self) -> slice:
        return slice(self.offset, self.stop)

    def view(self, vector: np.ndarray) -> np.ndarray:
        if vector.shape[0] < self.stop:
            raise LayoutError(
                f"Vector of length {vector.shape[0]} too short for range [{self.offset}:{self.stop}]"
            )
        return vector[self.offset:self.stop]

    def complement_mask(self, size: int) -> np.ndarray:
        """Boolean mask selecting every entry of a ``size`` vector outside this range."""
        mask = np.ones(size, dtype=bool)
        mask[self.slice] = False
        return mask


@dataclass(frozen=True)
class ParameterLayout:
    """Semantic sub-ranges of one geometry tag's parameter vector."""

    tag: GeometryTag
    size: int
    position: SubRange
    direction: Optional[SubRange] = None
    radius: Optional[SubRange] = None

    def check(self, vector) -> np.ndarray:
        """
        Validate the length of a parameter vector.

        Returns:
            np.ndarray: The vector as float64 (no copy when it already is one).
        """
        arr = np.asarray(vector, dtype=np.float64)
        if arr.shape != (self.size,):
            raise LayoutError(
                f"{self.tag.value} expects a parameter vector of shape ({self.size},), got {arr.shape}"
            )
        return arr

    def ranges(self) -> Tuple[Tuple[str, SubRange], ...]:
        """All defined (name, SubRange) pairs, in vector order."""
        named = (("position", self.position), ("direction", self.direction), ("radius", self.radius))
        return tuple((name, rng) for name, rng in named if rng is not None)


LAYOUTS: Dict[GeometryTag, ParameterLayout] = {
    GeometryTag.POINT3D: ParameterLayout(GeometryTag.POINT3D, 3, SubRange(0, 3)),
    GeometryTag.LINE3D: ParameterLayout(GeometryTag.LINE3D, 6, SubRange(0, 3), SubRange(3, 3)),
    GeometryTag.PLANE3D: ParameterLayout(GeometryTag.PLANE3D, 6, SubRange(0, 3), SubRange(3, 3)),
    GeometryTag.CYLINDER3D: ParameterLayout(
        GeometryTag.CYLINDER3D, 7, SubRange(0, 3), SubRange(3, 3), SubRange(6, 1)
    ),
}


def layout_for(tag: GeometryTag) -> ParameterLayout:
    """Look up the layout of a geometry tag."""
    try:
        return LAYOUTS[tag]
    except KeyError:
        raise LayoutError(f"No parameter layout registered for {tag!r}")
