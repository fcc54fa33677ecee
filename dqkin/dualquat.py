"""Dual quaternion values and Hamilton operators.

A dual quaternion ``h = P + E*D`` is stored as the 8-vector
``[P.w, P.x, P.y, P.z, D.w, D.x, D.y, D.z]``.
"""
from __future__ import annotations

from typing import Iterable

import numpy as np

C4 = np.diag([1.0, -1.0, -1.0, -1.0])
C8 = np.diag([1.0, -1.0, -1.0, -1.0, 1.0, -1.0, -1.0, -1.0])


def _hamiplus4(h: np.ndarray) -> np.ndarray:
    a, b, c, d = h
    return np.array(
        [
            [a, -b, -c, -d],
            [b, a, -d, c],
            [c, d, a, -b],
            [d, -c, b, a],
        ],
        dtype=float,
    )


def _haminus4(h: np.ndarray) -> np.ndarray:
    a, b, c, d = h
    return np.array(
        [
            [a, -b, -c, -d],
            [b, a, d, -c],
            [c, -d, a, b],
            [d, c, -b, a],
        ],
        dtype=float,
    )


class DQ:
    """Immutable dual quaternion."""

    __slots__ = ("_v",)
    # numpy scalars defer to __rmul__/__radd__ instead of broadcasting
    __array_ufunc__ = None

    def __init__(self, coefficients: Iterable[float] | float = 1.0):
        v = np.zeros(8, dtype=float)
        coeffs = np.atleast_1d(np.asarray(coefficients, dtype=float)).ravel()
        if coeffs.size > 8:
            raise ValueError(f"A dual quaternion has at most 8 coefficients, got {coeffs.size}")
        v[: coeffs.size] = coeffs
        v.setflags(write=False)
        self._v = v

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    @classmethod
    def from_vec8(cls, vec: np.ndarray) -> "DQ":
        vec = np.asarray(vec, dtype=float).ravel()
        if vec.size != 8:
            raise ValueError(f"Expected a vector of size 8, got {vec.size}")
        return cls(vec)

    @classmethod
    def from_pose(cls, rotation: "DQ", translation: "DQ | Iterable[float]") -> "DQ":
        """Unit dual quaternion ``r + 0.5*E*t*r``.

        ``translation`` is either a pure quaternion or an xyz triple.
        """
        if not isinstance(translation, DQ):
            translation = DQ(np.concatenate(([0.0], np.asarray(translation, dtype=float))))
        return rotation + 0.5 * E_ * translation * rotation

    # ------------------------------------------------------------------
    # Parts
    # ------------------------------------------------------------------
    def vec8(self) -> np.ndarray:
        return self._v.copy()

    def vec4(self) -> np.ndarray:
        return self._v[:4].copy()

    def P(self) -> "DQ":
        """Primary part."""
        return DQ(self._v[:4])

    def D(self) -> "DQ":
        """Dual part, as a quaternion."""
        return DQ(self._v[4:])

    def Re(self) -> "DQ":
        return DQ([self._v[0], 0.0, 0.0, 0.0, self._v[4]])

    def Im(self) -> "DQ":
        v = self._v.copy()
        v[0] = 0.0
        v[4] = 0.0
        return DQ(v)

    def conj(self) -> "DQ":
        return DQ(C8 @ self._v)

    def norm(self) -> "DQ":
        """Dual-number norm ``sqrt(h * h.conj())`` returned as a DQ."""
        n = self * self.conj()
        p = np.sqrt(n._v[0])
        if p == 0.0:
            return DQ(0.0)
        return DQ([p, 0.0, 0.0, 0.0, n._v[4] / (2.0 * p)])

    def normalize(self) -> "DQ":
        p = self.P()
        p_norm = np.linalg.norm(p._v[:4])
        if p_norm == 0.0:
            raise ZeroDivisionError("Cannot normalize a dual quaternion with a zero primary part")
        h = self / p_norm
        return DQ.from_pose(h.P(), h.translation())

    def rotation(self) -> "DQ":
        return self.P()

    def translation(self) -> "DQ":
        """Translation ``2 * D * P.conj()`` as a pure quaternion."""
        return 2.0 * self.D() * self.P().conj()

    def translation_vector(self) -> np.ndarray:
        return self.translation()._v[1:4].copy()

    def is_unit(self, tol: float = 1e-9) -> bool:
        return bool(np.allclose((self * self.conj())._v, DQ(1.0)._v, atol=tol))

    # ------------------------------------------------------------------
    # Hamilton operators
    # ------------------------------------------------------------------
    def hamiplus4(self) -> np.ndarray:
        return _hamiplus4(self._v[:4])

    def haminus4(self) -> np.ndarray:
        return _haminus4(self._v[:4])

    def hamiplus8(self) -> np.ndarray:
        p = _hamiplus4(self._v[:4])
        d = _hamiplus4(self._v[4:])
        return np.block([[p, np.zeros((4, 4))], [d, p]])

    def haminus8(self) -> np.ndarray:
        p = _haminus4(self._v[:4])
        d = _haminus4(self._v[4:])
        return np.block([[p, np.zeros((4, 4))], [d, p]])

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------
    def __mul__(self, other):
        if isinstance(other, DQ):
            return DQ(self.hamiplus8() @ other._v)
        if np.isscalar(other):
            return DQ(self._v * float(other))
        return NotImplemented

    def __rmul__(self, other):
        if np.isscalar(other):
            return DQ(self._v * float(other))
        return NotImplemented

    def __truediv__(self, other):
        if np.isscalar(other):
            return DQ(self._v / float(other))
        return NotImplemented

    def __add__(self, other):
        if isinstance(other, DQ):
            return DQ(self._v + other._v)
        if np.isscalar(other):
            return self + DQ(other)
        return NotImplemented

    __radd__ = __add__

    def __sub__(self, other):
        if isinstance(other, DQ):
            return DQ(self._v - other._v)
        if np.isscalar(other):
            return self - DQ(other)
        return NotImplemented

    def __rsub__(self, other):
        if np.isscalar(other):
            return DQ(other) - self
        return NotImplemented

    def __neg__(self):
        return DQ(-self._v)

    def __eq__(self, other):
        if isinstance(other, DQ):
            return bool(np.array_equal(self._v, other._v))
        if np.isscalar(other):
            return self == DQ(other)
        return NotImplemented

    def __hash__(self):
        return hash(self._v.tobytes())

    def isclose(self, other: "DQ", atol: float = 1e-12) -> bool:
        return bool(np.allclose(self._v, other._v, atol=atol))

    def __repr__(self) -> str:
        return "DQ(" + np.array2string(self._v, precision=6, separator=", ") + ")"


def rotation_quaternion(angle: float, axis: Iterable[float]) -> DQ:
    """Unit quaternion rotating ``angle`` radians about ``axis``."""
    n = np.asarray(axis, dtype=float)
    n = n / np.linalg.norm(n)
    half = 0.5 * angle
    return DQ(np.concatenate(([np.cos(half)], np.sin(half) * n)))


def Ad(x: DQ, w: DQ) -> DQ:
    """Adjoint transformation ``x * w * x.conj()``."""
    return x * w * x.conj()


i_ = DQ([0.0, 1.0])
j_ = DQ([0.0, 0.0, 1.0])
k_ = DQ([0.0, 0.0, 0.0, 1.0])
E_ = DQ([0.0, 0.0, 0.0, 0.0, 1.0])
