"""
Finite-difference checks of the analytic constraint gradients.

Developer tooling: compares the functors' analytic derivatives with
central differences of their residuals and tabulates the outcome, and
flags non-finite residuals after an evaluation pass so the outer solver
can reject the step.
"""

from typing import Callable, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from ..config.solver_config import DEFAULT_PRECISION, PrecisionConfig
from .logging_config import get_logger

logger = get_logger(__name__)

REPORT_COLUMNS = ['side', 'entry', 'analytic', 'numeric', 'abs_error', 'ok']


def directional_difference(func: Callable[[np.ndarray], float], x: np.ndarray,
                           dx: np.ndarray, step: float) -> float:
    """
    Central difference of ``func`` at ``x`` along ``dx``.

    (f(x + h·dx) - f(x - h·dx)) / 2h
    """
    x = np.asarray(x, dtype=np.float64)
    dx = np.asarray(dx, dtype=np.float64)
    return (func(x + step * dx) - func(x - step * dx)) / (2.0 * step)


def _row(side: str, entry, analytic: float, numeric: float, tolerance: float) -> dict:
    error = abs(analytic - numeric)
    return {
        'side': side,
        'entry': entry,
        'analytic': analytic,
        'numeric': numeric,
        'abs_error': error,
        'ok': bool(np.isfinite(error) and error < tolerance),
    }


def check_directional_gradients(constraint, param1: np.ndarray, param2: np.ndarray,
                                dparam1: np.ndarray, dparam2: np.ndarray,
                                config: Optional[PrecisionConfig] = None) -> pd.DataFrame:
    """
    Compare ``gradient_first``/``gradient_second`` with central differences of the residual.

    Args:
        constraint: A Constraint (or anything with residual / gradient_first / gradient_second)
        param1, param2: Parameter vectors of the two geometries
        dparam1, dparam2: Perturbation directions, shaped like the parameters
        config: Step size and tolerance; DEFAULT_PRECISION when omitted

    Returns:
        pd.DataFrame: One row per side with REPORT_COLUMNS
    """
    config = config or DEFAULT_PRECISION
    step, tol = config.finite_difference_step, config.gradient_tolerance

    numeric_first = directional_difference(lambda x: constraint.residual(x, param2), param1, dparam1, step)
    numeric_second = directional_difference(lambda x: constraint.residual(param1, x), param2, dparam2, step)

    rows = [
        _row('first', 'directional', constraint.gradient_first(param1, param2, dparam1), numeric_first, tol),
        _row('second', 'directional', constraint.gradient_second(param1, param2, dparam2), numeric_second, tol),
    ]
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


def check_complete_gradients(constraint, param1: np.ndarray, param2: np.ndarray,
                             config: Optional[PrecisionConfig] = None) -> pd.DataFrame:
    """
    Compare the complete gradients entry by entry with central differences.

    Returns:
        pd.DataFrame: One row per parameter entry of each side with REPORT_COLUMNS
    """
    config = config or DEFAULT_PRECISION
    step, tol = config.finite_difference_step, config.gradient_tolerance
    param1 = np.asarray(param1, dtype=np.float64)
    param2 = np.asarray(param2, dtype=np.float64)

    rows = []
    sides = (
        ('first', param1, constraint.gradient_first_complete(param1, param2),
         lambda x: constraint.residual(x, param2)),
        ('second', param2, constraint.gradient_second_complete(param1, param2),
         lambda x: constraint.residual(param1, x)),
    )
    for side, params, analytic, func in sides:
        for i, unit in enumerate(np.eye(params.shape[0])):
            numeric = directional_difference(func, params, unit, step)
            rows.append(_row(side, i, float(analytic[i]), numeric, tol))

    report = pd.DataFrame(rows, columns=REPORT_COLUMNS)
    failed = int((~report['ok']).sum())
    if failed:
        logger.warning(f"{failed} of {len(report)} complete-gradient entries disagree with finite differences")
    return report


def find_non_finite(values: Iterable[float]) -> List[int]:
    """Positions of NaN / inf entries in a batch of residuals or gradient values."""
    arr = np.asarray(list(values), dtype=np.float64)
    return np.flatnonzero(~np.isfinite(arr)).tolist()


def evaluate_residuals(entries: Iterable[Tuple[str, object, np.ndarray, np.ndarray]]) -> pd.DataFrame:
    """
    Evaluate a batch of constraints and tabulate their residuals.

    Args:
        entries: (name, constraint, param1, param2) tuples

    Returns:
        pd.DataFrame: Columns 'name', 'residual', 'finite'
    """
    rows = []
    for name, constraint, param1, param2 in entries:
        residual = constraint.residual(param1, param2)
        rows.append({'name': name, 'residual': residual, 'finite': bool(np.isfinite(residual))})

    report = pd.DataFrame(rows, columns=['name', 'residual', 'finite'])
    if not report.empty and not report['finite'].all():
        logger.warning(f"Non-finite residuals: {report.loc[~report['finite'], 'name'].tolist()}")
    return report
