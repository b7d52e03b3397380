"""
Constraint instances: a resolved functor for one declared geometric relation.

The tag pair is resolved to a functor once, when the relation is declared,
so an unsupported pair fails at setup time and never during evaluation.
A Constraint holds no geometry; parameter vectors are passed per call.
"""

from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from ..errors import ConstraintSetupError
from ..geometry.layouts import GeometryTag, layout_for
from .direction import Direction
from .parallel import ParallelFunctor, make_parallel


class ConstraintKind(Enum):
    PARALLEL = "parallel"


_FACTORIES = {
    ConstraintKind.PARALLEL: make_parallel,
}


@dataclass(frozen=True)
class Constraint:
    """
    A geometric relation between two geometry instances.

    Immutable: the functor is resolved from kind, tags and direction once,
    so changing any of them means declaring a new constraint.
    """

    kind: ConstraintKind
    first_tag: GeometryTag
    second_tag: GeometryTag
    direction: Direction = Direction.SAME
    functor: ParallelFunctor = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        try:
            kind = ConstraintKind(self.kind)
        except ValueError:
            raise ConstraintSetupError(f"Unknown constraint kind {self.kind!r}") from None
        direction = Direction(self.direction)
        object.__setattr__(self, 'kind', kind)
        object.__setattr__(self, 'direction', direction)
        object.__setattr__(self, 'functor', _FACTORIES[kind](self.first_tag, self.second_tag, direction))

    @classmethod
    def create(cls, kind: ConstraintKind, first_tag: GeometryTag, second_tag: GeometryTag,
               direction: Direction = Direction.SAME) -> 'Constraint':
        """Declare a relation; raises ConstraintSetupError for an unregistered tag pair."""
        return cls(kind=kind, first_tag=first_tag, second_tag=second_tag, direction=direction)

    def residual(self, param1: np.ndarray, param2: np.ndarray) -> float:
        return self.functor.calculate(param1, param2)

    def gradient_first(self, param1: np.ndarray, param2: np.ndarray, dparam1: np.ndarray) -> float:
        return self.functor.calculate_gradient_first(param1, param2, dparam1)

    def gradient_second(self, param1: np.ndarray, param2: np.ndarray, dparam2: np.ndarray) -> float:
        return self.functor.calculate_gradient_second(param1, param2, dparam2)

    def gradient_first_complete(self, param1: np.ndarray, param2: np.ndarray,
                                gradient: np.ndarray = None) -> np.ndarray:
        """
        Complete gradient w.r.t. the first geometry.

        Args:
            gradient: Output buffer shaped like ``param1``; a new one is
                      allocated when omitted.

        Returns:
            np.ndarray: The filled buffer.
        """
        if gradient is None:
            gradient = np.empty(layout_for(self.first_tag).size)
        self.functor.calculate_gradient_first_complete(param1, param2, gradient)
        return gradient

    def gradient_second_complete(self, param1: np.ndarray, param2: np.ndarray,
                                 gradient: np.ndarray = None) -> np.ndarray:
        """Complete gradient w.r.t. the second geometry, see ``gradient_first_complete``."""
        if gradient is None:
            gradient = np.empty(layout_for(self.second_tag).size)
        self.functor.calculate_gradient_second_complete(param1, param2, gradient)
        return gradient
