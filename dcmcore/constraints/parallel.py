"""
Parallelism constraint functors, one per ordered pair of geometry tags.

Each functor only knows where the direction lives in each side's parameter
vector; the Same/Opposite/Both math is in ``direction``. Adding a pair
means either reusing an existing functor (same layouts) or subclassing
``ParallelFunctor`` with the two tags, then registering it in
``PARALLEL_FUNCTORS``.

All operations are pure reads of the parameter vectors; the complete
gradient variants write only into the caller's ``gradient`` buffer.
"""

from typing import Dict, Tuple, Type

import numpy as np

from ..errors import ConstraintSetupError, LayoutError
from ..geometry.layouts import GeometryTag, ParameterLayout, SubRange, layout_for
from ..utils.logging_config import get_logger
from . import direction as parallel_math
from .direction import Direction

logger = get_logger(__name__)


class ParallelFunctor:
    """
    Residual and gradients of "direction of side 1 is parallel to direction of side 2".

    Subclasses set ``first_tag`` and ``second_tag``; the direction sub-ranges
    are taken from the tags' parameter layouts.
    """

    first_tag: GeometryTag = None
    second_tag: GeometryTag = None

    def __init__(self, direction: Direction = Direction.SAME):
        self.direction = Direction(direction)
        self._first_layout = layout_for(self.first_tag)
        self._second_layout = layout_for(self.second_tag)

    @property
    def first_range(self) -> SubRange:
        return self._first_layout.direction

    @property
    def second_range(self) -> SubRange:
        return self._second_layout.direction

    def _directions(self, param1, param2) -> Tuple[np.ndarray, np.ndarray]:
        return (self.first_range.view(self._first_layout.check(param1)),
                self.second_range.view(self._second_layout.check(param2)))

    def calculate(self, param1: np.ndarray, param2: np.ndarray) -> float:
        d1, d2 = self._directions(param1, param2)
        return parallel_math.calc(d1, d2, self.direction)

    def calculate_gradient_first(self, param1: np.ndarray, param2: np.ndarray,
                                 dparam1: np.ndarray) -> float:
        d1, d2 = self._directions(param1, param2)
        dd1 = self.first_range.view(self._first_layout.check(dparam1))
        return parallel_math.calc_grad_first(d1, d2, dd1, self.direction)

    def calculate_gradient_second(self, param1: np.ndarray, param2: np.ndarray,
                                  dparam2: np.ndarray) -> float:
        d1, d2 = self._directions(param1, param2)
        dd2 = self.second_range.view(self._second_layout.check(dparam2))
        return parallel_math.calc_grad_second(d1, d2, dd2, self.direction)

    def _prepare_gradient(self, layout: ParameterLayout, gradient: np.ndarray) -> None:
        parallel_math.check_complete_mode(self.direction)
        if not isinstance(gradient, np.ndarray) or gradient.shape != (layout.size,):
            shape = getattr(gradient, 'shape', None)
            raise LayoutError(
                f"Gradient buffer for {layout.tag.value} must be an ndarray of shape ({layout.size},), got {shape}"
            )
        # a pure parallelism constraint has no sensitivity outside the direction
        gradient[layout.direction.complement_mask(layout.size)] = 0.0

    def calculate_gradient_first_complete(self, param1: np.ndarray, param2: np.ndarray,
                                          gradient: np.ndarray) -> None:
        """
        Fill ``gradient`` (shaped like ``param1``) with d(residual)/d(param1).

        Raises:
            DirectionModeError: If the functor's direction is BOTH.
        """
        d1, d2 = self._directions(param1, param2)
        self._prepare_gradient(self._first_layout, gradient)
        parallel_math.calc_grad_first_complete(d1, d2, self.first_range.view(gradient), self.direction)

    def calculate_gradient_second_complete(self, param1: np.ndarray, param2: np.ndarray,
                                           gradient: np.ndarray) -> None:
        """
        Fill ``gradient`` (shaped like ``param2``) with d(residual)/d(param2).

        Raises:
            DirectionModeError: If the functor's direction is BOTH.
        """
        d1, d2 = self._directions(param1, param2)
        self._prepare_gradient(self._second_layout, gradient)
        parallel_math.calc_grad_second_complete(d1, d2, self.second_range.view(gradient), self.direction)

    def __repr__(self) -> str:
        return (f"{type(self).__name__}({self.first_tag.value}, {self.second_tag.value}, "
                f"direction={self.direction.name})")


class LineLineParallel(ParallelFunctor):
    first_tag = GeometryTag.LINE3D
    second_tag = GeometryTag.LINE3D


# planes keep their normal where lines keep their direction, so they reuse the line functor
class PlanePlaneParallel(LineLineParallel):
    first_tag = GeometryTag.PLANE3D
    second_tag = GeometryTag.PLANE3D


class LinePlaneParallel(LineLineParallel):
    first_tag = GeometryTag.LINE3D
    second_tag = GeometryTag.PLANE3D


class PlaneLineParallel(LineLineParallel):
    first_tag = GeometryTag.PLANE3D
    second_tag = GeometryTag.LINE3D


class CylinderCylinderParallel(ParallelFunctor):
    """Parallel cylinder axes; the radius entry gets a zero gradient."""

    first_tag = GeometryTag.CYLINDER3D
    second_tag = GeometryTag.CYLINDER3D


PARALLEL_FUNCTORS: Dict[Tuple[GeometryTag, GeometryTag], Type[ParallelFunctor]] = {
    (cls.first_tag, cls.second_tag): cls
    for cls in (
        LineLineParallel,
        PlanePlaneParallel,
        LinePlaneParallel,
        PlaneLineParallel,
        CylinderCylinderParallel,
    )
}


def make_parallel(tag1: GeometryTag, tag2: GeometryTag,
                  direction: Direction = Direction.SAME) -> ParallelFunctor:
    """
    Create the parallelism functor for an ordered pair of geometry tags.

    Raises:
        ConstraintSetupError: If no functor is registered for ``(tag1, tag2)``.
    """
    try:
        functor_cls = PARALLEL_FUNCTORS[(tag1, tag2)]
    except KeyError:
        raise ConstraintSetupError(
            f"No parallel constraint registered for ({tag1}, {tag2})"
        ) from None
    functor = functor_cls(direction)
    logger.debug(f"Created {functor!r}")
    return functor
