"""
Cluster Frame Conversion Helpers

Explicit helpers for re-expressing a geometry's parameter vector between a
cluster's local frame and the global frame. A cluster's local-to-global
mapping is exactly one Transform; geometry belonging to the cluster keeps
its parameters in the local frame until one of these helpers is called.

Per semantic sub-range:
    position   -> full mapping (R·p + T)·S
    direction  -> rotation only, times the sign of the scale (never translated)
    radius     -> scale only (absolute value, a radius stays positive)
"""

import numpy as np

from ..config.solver_config import DEFAULT_PRECISION
from .layouts import GeometryTag, layout_for


def _map_parameters(params, tag: GeometryTag, transform) -> np.ndarray:
    layout = layout_for(tag)
    source = layout.check(params)
    result = source.copy()

    pos = layout.position
    result[pos.slice] = transform.transform(source[pos.slice])

    if layout.direction is not None:
        direction = layout.direction
        # a negative scale mirrors through the origin, which flips directions
        result[direction.slice] = transform.rotate_vector(source[direction.slice]) * np.sign(transform.scaling)

    if layout.radius is not None:
        radius = layout.radius
        result[radius.slice] = source[radius.slice] * abs(transform.scaling)

    return result


def to_global(params, tag: GeometryTag, transform) -> np.ndarray:
    """
    Convert a parameter vector from the cluster's local frame to the global frame.

    Args:
        params: Parameter vector laid out for ``tag`` (not modified)
        tag: Geometry tag deciding which entries are positions, directions, radii
        transform: The cluster's local-to-global Transform3D

    Returns:
        np.ndarray: New parameter vector in global coordinates
    """
    return _map_parameters(params, tag, transform)


def to_local(params, tag: GeometryTag, transform) -> np.ndarray:
    """
    Convert a parameter vector from the global frame into the cluster's local frame.

    Uses the inverse of the cluster's local-to-global transform.

    Args:
        params: Parameter vector laid out for ``tag`` in global coordinates
        tag: Geometry tag
        transform: The cluster's local-to-global Transform3D

    Returns:
        np.ndarray: New parameter vector in local coordinates
    """
    return _map_parameters(params, tag, transform.inverse())


def frame_consistency_check(local_params, global_params, tag: GeometryTag, transform,
                            tolerance: float = None) -> bool:
    """
    Verify that local <-> global conversions are consistent.

    Args:
        local_params: Geometry in the cluster's local frame
        global_params: Same geometry in the global frame
        tag: Geometry tag
        transform: The cluster's local-to-global transform
        tolerance: Maximum allowed norm of either round-trip error

    Returns:
        bool: True if both directions agree within tolerance
    """
    if tolerance is None:
        tolerance = DEFAULT_PRECISION.frame_tolerance

    global_error = np.linalg.norm(to_global(local_params, tag, transform) - np.asarray(global_params, dtype=np.float64))
    local_error = np.linalg.norm(to_local(global_params, tag, transform) - np.asarray(local_params, dtype=np.float64))

    return global_error < tolerance and local_error < tolerance
