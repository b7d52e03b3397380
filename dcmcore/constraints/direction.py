"""
Direction resolution shared by every functor that compares two directions.

Residuals:
    SAME      ||d1 - d2||
    OPPOSITE  ||d1 + d2||
    BOTH      SAME if d1·d2 >= 0, else OPPOSITE

Directional gradients (perturbation dd of one side):
    SAME      first:  (d1 - d2)·dd1 / ||d1 - d2||
              second: (d1 - d2)·(-dd2) / ||d1 - d2||
    OPPOSITE  first:  (d1 + d2)·dd1 / ||d1 + d2||
              second: (d1 + d2)·dd2 / ||d1 + d2||

The BOTH branch is chosen in ``resolve`` only, so residual and gradient of
the same evaluation step always take the same branch.

A zero norm (equal pair under SAME, antiparallel pair under OPPOSITE)
makes the gradients non-finite. Callers that can hit that configuration
must guard it themselves or accept NaN/inf in the output.
"""

from enum import Enum

import numpy as np

from ..errors import DirectionModeError
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


class Direction(Enum):
    SAME = "same"
    OPPOSITE = "opposite"
    BOTH = "both"


def resolve(d1: np.ndarray, d2: np.ndarray, mode: Direction) -> Direction:
    """Concrete branch (SAME or OPPOSITE) for the current relative orientation."""
    if mode is Direction.BOTH:
        return Direction.SAME if np.dot(d1, d2) >= 0 else Direction.OPPOSITE
    return mode


def _difference(d1: np.ndarray, d2: np.ndarray, branch: Direction) -> np.ndarray:
    return d1 - d2 if branch is Direction.SAME else d1 + d2


def _divide(numerator, norm: float):
    if norm == 0.0:
        logger.debug("Zero-norm direction difference, gradient is non-finite")
    with np.errstate(divide='ignore', invalid='ignore'):
        return np.divide(numerator, norm)


def calc(d1: np.ndarray, d2: np.ndarray, mode: Direction) -> float:
    branch = resolve(d1, d2, mode)
    return float(np.linalg.norm(_difference(d1, d2, branch)))


def calc_grad_first(d1: np.ndarray, d2: np.ndarray, dd1: np.ndarray, mode: Direction) -> float:
    branch = resolve(d1, d2, mode)
    diff = _difference(d1, d2, branch)
    return float(_divide(np.dot(diff, dd1), np.linalg.norm(diff)))


def calc_grad_second(d1: np.ndarray, d2: np.ndarray, dd2: np.ndarray, mode: Direction) -> float:
    branch = resolve(d1, d2, mode)
    diff = _difference(d1, d2, branch)
    if branch is Direction.SAME:
        dd2 = -dd2
    return float(_divide(np.dot(diff, dd2), np.linalg.norm(diff)))


def check_complete_mode(mode: Direction):
    if mode is Direction.BOTH:
        raise DirectionModeError(
            "Direction.BOTH is not supported by complete gradients; use SAME or OPPOSITE"
        )


def calc_grad_first_complete(d1: np.ndarray, d2: np.ndarray, grad: np.ndarray, mode: Direction) -> None:
    """
    Write the gradient w.r.t. the first direction into ``grad`` (a view, filled in place).

    SAME: (d1 - d2) / ||d1 - d2||, OPPOSITE: (d1 + d2) / ||d1 + d2||.
    """
    check_complete_mode(mode)
    diff = _difference(d1, d2, mode)
    grad[:] = _divide(diff, np.linalg.norm(diff))


def calc_grad_second_complete(d1: np.ndarray, d2: np.ndarray, grad: np.ndarray, mode: Direction) -> None:
    """
    Write the gradient w.r.t. the second direction into ``grad`` (a view, filled in place).

    SAME: (d2 - d1) / ||d1 - d2||, OPPOSITE: (d2 + d1) / ||d1 + d2||.
    """
    check_complete_mode(mode)
    diff = _difference(d1, d2, mode)
    sign = -1.0 if mode is Direction.SAME else 1.0
    grad[:] = _divide(sign * diff, np.linalg.norm(diff))
