"""
Rigid + uniform-scale transforms between a cluster's local frame and the global frame.

A transform maps a vector as

    transform(v) = (R·v + T)·S

with R a rotation, T a translation and S a single non-zero scale factor.
Each dimension has its own class: ``Transform3D`` stores R as a unit
quaternion (``scipy.spatial.transform.Rotation``), ``Transform2D`` stores
R as a unit complex number.

Composition order: ``a.compose(b)`` (and ``a * b``) applies ``b`` first,
then ``a``, so that for every vector v

    (a * b).transform(v) == a.transform(b.transform(v))

which gives the closed form

    R = R_a·R_b,   S = S_a·S_b,   T = R_a·T_b + T_a / S_b
"""

import cmath
import numbers
from typing import Optional, Union

import numpy as np
from scipy.spatial.transform import Rotation

from ..config.solver_config import DEFAULT_PRECISION
from ..errors import TransformError


class _Transform:
    """
    Dimension-independent part of the transform algebra.

    Subclasses fix ``dim`` and supply the rotation primitives
    (identity, normalisation, product, inverse, application, distance).
    Every mutator returns ``self`` so calls can be chained.
    """

    dim: int = 0

    def __init__(self, rotation=None, translation=None, scale: float = 1.0):
        """
        Args:
            rotation: Rotation in the representation accepted by the subclass;
                      ``None`` is the identity. Normalised on entry.
            translation: Vector of length ``dim``; ``None`` is the zero vector.
            scale: Uniform scale factor, must be non-zero.
        """
        self._rotation = self._identity_rotation() if rotation is None else self._normalized(rotation)
        self._translation = np.zeros(self.dim) if translation is None else self._as_vector(translation)
        self._scale = self._checked_scale(scale)

    # -- rotation primitives (per dimension) ----------------------------------

    @classmethod
    def _identity_rotation(cls):
        raise NotImplementedError

    @classmethod
    def _normalized(cls, rotation):
        raise NotImplementedError

    @staticmethod
    def _multiply(r1, r2):
        raise NotImplementedError

    @staticmethod
    def _inverted(rotation):
        raise NotImplementedError

    @staticmethod
    def _rotation_matrix(rotation) -> np.ndarray:
        raise NotImplementedError

    @staticmethod
    def _rotation_distance(r1, r2) -> float:
        raise NotImplementedError

    @staticmethod
    def _rotation_coeffs(rotation) -> np.ndarray:
        raise NotImplementedError

    def _apply_rotation(self, rotation, vec: np.ndarray) -> np.ndarray:
        # works for a single vector (dim,) and for a stack (N, dim)
        return vec @ self._rotation_matrix(rotation).T

    # -- input checks ---------------------------------------------------------

    def _as_vector(self, value) -> np.ndarray:
        vec = np.array(value, dtype=np.float64)
        if vec.shape != (self.dim,):
            raise TransformError(f"Expected a vector of shape ({self.dim},), got {vec.shape}")
        return vec

    def _as_points(self, value) -> np.ndarray:
        vec = np.asarray(value, dtype=np.float64)
        if vec.shape[-1:] != (self.dim,) or vec.ndim > 2:
            raise TransformError(f"Expected shape ({self.dim},) or (N, {self.dim}), got {vec.shape}")
        return vec

    @staticmethod
    def _checked_scale(scale) -> float:
        value = float(scale)
        if value == 0.0:
            raise TransformError("Scale factor must be non-zero (inversion divides by it)")
        return value

    # -- accessors ------------------------------------------------------------

    @property
    def rotation(self):
        """The rotation part (unit norm)."""
        return self._rotation

    @property
    def translation(self) -> np.ndarray:
        """Read-only view of the translation vector."""
        view = self._translation.view()
        view.flags.writeable = False
        return view

    @property
    def scaling(self) -> float:
        """The uniform scale factor."""
        return self._scale

    # -- mutators -------------------------------------------------------------

    def set_rotation(self, rotation):
        self._rotation = self._normalized(rotation)
        return self

    def rotate(self, rotation):
        """Left-multiply the stored rotation: R <- normalize(r)·R."""
        self._rotation = self._normalized(self._multiply(self._normalized(rotation), self._rotation))
        return self

    def set_translation(self, translation):
        self._translation = self._as_vector(translation)
        return self

    def translate(self, translation):
        """Accumulate a translation: T <- T + t."""
        self._translation = self._translation + self._as_vector(translation)
        return self

    def set_scale(self, scale: float):
        self._scale = self._checked_scale(scale)
        return self

    def scale(self, scale: float):
        """Accumulate a scale factor: S <- S·s."""
        self._scale = self._checked_scale(self._scale * self._checked_scale(scale))
        return self

    def normalize(self):
        """Re-normalise the rotation in place."""
        self._rotation = self._normalized(self._rotation)
        return self

    def set_identity(self):
        self._rotation = self._identity_rotation()
        self._translation = np.zeros(self.dim)
        self._scale = 1.0
        return self

    @classmethod
    def identity(cls):
        """A new identity transform."""
        return cls()

    # -- algebra --------------------------------------------------------------

    def compose(self, other):
        """
        Transform that applies ``other`` first and ``self`` second.

        Args:
            other: Transform of the same dimension.

        Returns:
            A new transform; neither operand is modified.
        """
        result = self.copy()
        result *= other
        return result

    def invert(self):
        """
        Invert in place.

        R' = R⁻¹, S' = 1/S, T' = -(R⁻¹·T)·S
        """
        inverse_rotation = self._inverted(self._rotation)
        self._translation = -self._apply_rotation(inverse_rotation, self._translation) * self._scale
        self._rotation = self._normalized(inverse_rotation)
        self._scale = 1.0 / self._scale
        return self

    def inverse(self):
        """Inverted copy, ``t.compose(t.inverse())`` is the identity."""
        return self.copy().invert()

    def __mul__(self, other):
        if isinstance(other, _Transform):
            if type(other) is not type(self):
                return NotImplemented
            return self.compose(other)
        return self.transform(other)

    def __imul__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        # T must be updated from the old R and S before they change
        self._translation = (
            self._apply_rotation(self._rotation, other._translation)
            + self._translation / other._scale
        )
        self._rotation = self._normalized(self._multiply(self._rotation, other._rotation))
        self._scale = self._checked_scale(self._scale * other._scale)
        return self

    # -- vector mapping -------------------------------------------------------

    def rotate_vector(self, vec) -> np.ndarray:
        """R·v only; the stage to use for direction vectors."""
        return self._apply_rotation(self._rotation, self._as_points(vec))

    def translate_vector(self, vec) -> np.ndarray:
        """v + T only."""
        return self._as_points(vec) + self._translation

    def scale_vector(self, vec) -> np.ndarray:
        """v·S only."""
        return self._as_points(vec) * self._scale

    def transform(self, vec) -> np.ndarray:
        """
        Apply the full mapping (R·v + T)·S.

        Args:
            vec: A single vector (dim,) or a stack of vectors (N, dim).
                 The input is not modified.

        Returns:
            np.ndarray: The mapped vector(s), same shape as the input.
        """
        return (self._apply_rotation(self._rotation, self._as_points(vec)) + self._translation) * self._scale

    def __call__(self, vec) -> np.ndarray:
        return self.transform(vec)

    def matrix(self) -> np.ndarray:
        """
        Homogeneous (dim+1)x(dim+1) matrix of the full mapping.

        ``matrix() @ [v, 1]`` equals ``[transform(v), 1]``.
        """
        result = np.eye(self.dim + 1)
        result[:self.dim, :self.dim] = self._rotation_matrix(self._rotation) * self._scale
        result[:self.dim, self.dim] = self._translation * self._scale
        return result

    # -- comparison and misc --------------------------------------------------

    def is_approx(self, other, prec: Optional[float] = None) -> bool:
        """
        True if rotation, translation and scale each differ by less than ``prec``.

        Translation is compared by the norm of the difference, scale by the
        absolute difference. Transforms of different dimension are never close.
        """
        if type(other) is not type(self):
            return False
        if prec is None:
            prec = DEFAULT_PRECISION.approx_precision
        return (
            self._rotation_distance(self._rotation, other._rotation) < prec
            and np.linalg.norm(self._translation - other._translation) < prec
            and abs(self._scale - other._scale) < prec
        )

    def copy(self):
        result = type(self).__new__(type(self))
        result._rotation = self._rotation
        result._translation = self._translation.copy()
        result._scale = self._scale
        return result

    def __copy__(self):
        return self.copy()

    def __str__(self) -> str:
        return (
            f"Rotation:    {np.array2string(self._rotation_coeffs(self._rotation))}\n"
            f"Translation: {np.array2string(self._translation)}\n"
            f"Scale:       {self._scale}"
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(rotation={self._rotation_coeffs(self._rotation).tolist()}, "
            f"translation={self._translation.tolist()}, scale={self._scale})"
        )


class Transform3D(_Transform):
    """
    3D transform with a unit-quaternion rotation.

    Rotations may be given as a ``scipy.spatial.transform.Rotation``, a
    quaternion ``(x, y, z, w)`` (scalar last, scipy convention) or a 3x3
    rotation matrix.
    """

    dim = 3

    @classmethod
    def _identity_rotation(cls) -> Rotation:
        return Rotation.identity()

    @classmethod
    def _normalized(cls, rotation) -> Rotation:
        if isinstance(rotation, Rotation):
            if not rotation.single:
                raise TransformError("Expected a single rotation, got a stack")
            quat = rotation.as_quat()
        else:
            arr = np.asarray(rotation, dtype=np.float64)
            if arr.shape == (3, 3):
                return Rotation.from_matrix(arr)
            if arr.shape != (4,):
                raise TransformError(f"Expected a quaternion (x, y, z, w) or 3x3 matrix, got shape {arr.shape}")
            quat = arr
        norm = np.linalg.norm(quat)
        if norm == 0.0 or not np.isfinite(norm):
            raise TransformError(f"Cannot normalize quaternion {quat}")
        return Rotation.from_quat(quat / norm)

    @staticmethod
    def _multiply(r1: Rotation, r2: Rotation) -> Rotation:
        # scipy composes right to left: (r1 * r2).apply(v) == r1.apply(r2.apply(v))
        return r1 * r2

    @staticmethod
    def _inverted(rotation: Rotation) -> Rotation:
        return rotation.inv()

    @staticmethod
    def _rotation_matrix(rotation: Rotation) -> np.ndarray:
        return rotation.as_matrix()

    def _apply_rotation(self, rotation: Rotation, vec: np.ndarray) -> np.ndarray:
        # Rotation.apply rejects read-only buffers, e.g. the translation accessor
        return rotation.apply(np.array(vec, dtype=np.float64))

    @staticmethod
    def _rotation_distance(r1: Rotation, r2: Rotation) -> float:
        # q and -q are the same rotation
        q1, q2 = r1.as_quat(), r2.as_quat()
        return float(min(np.linalg.norm(q1 - q2), np.linalg.norm(q1 + q2)))

    @staticmethod
    def _rotation_coeffs(rotation: Rotation) -> np.ndarray:
        return rotation.as_quat()


class Transform2D(_Transform):
    """
    2D transform with the rotation stored as a unit complex number.

    Rotations may be given as an angle in radians or as a (non-zero)
    complex number.
    """

    dim = 2

    @classmethod
    def _identity_rotation(cls) -> complex:
        return complex(1.0, 0.0)

    @classmethod
    def _normalized(cls, rotation: Union[float, complex]) -> complex:
        if isinstance(rotation, (complex, np.complexfloating)):
            value = complex(rotation)
            modulus = abs(value)
            if modulus == 0.0 or not np.isfinite(modulus):
                raise TransformError(f"Cannot normalize planar rotation {value}")
            return value / modulus
        if isinstance(rotation, numbers.Real):
            return cmath.exp(1j * float(rotation))
        raise TransformError(f"Planar rotation must be an angle or complex number, got {type(rotation).__name__}")

    @staticmethod
    def _multiply(r1: complex, r2: complex) -> complex:
        return r1 * r2

    @staticmethod
    def _inverted(rotation: complex) -> complex:
        return rotation.conjugate()

    @staticmethod
    def _rotation_matrix(rotation: complex) -> np.ndarray:
        return np.array([[rotation.real, -rotation.imag],
                         [rotation.imag, rotation.real]])

    @staticmethod
    def _rotation_distance(r1: complex, r2: complex) -> float:
        return abs(r1 - r2)

    @staticmethod
    def _rotation_coeffs(rotation: complex) -> np.ndarray:
        return np.array([rotation.real, rotation.imag])

    @property
    def angle(self) -> float:
        """Rotation angle in radians, in (-pi, pi]."""
        return cmath.phase(self._rotation)
