"""Task-space Jacobians derived from a pose Jacobian."""
from __future__ import annotations

import numpy as np

from .dualquat import C4, DQ
from .errors import DimensionMismatch


def _check_pose_jacobian(J: np.ndarray) -> np.ndarray:
    J = np.asarray(J, dtype=float)
    if J.ndim != 2 or J.shape[0] != 8:
        raise DimensionMismatch(f"Expected a pose Jacobian of shape (8, n), got {J.shape}")
    return J


def rotation_jacobian(pose_jacobian: np.ndarray) -> np.ndarray:
    """Jacobian of the rotation quaternion, the upper four rows."""
    J = _check_pose_jacobian(pose_jacobian)
    return J[:4, :].copy()


def translation_jacobian(pose_jacobian: np.ndarray, x: DQ) -> np.ndarray:
    """Jacobian of the translation quaternion ``2 * D(x) * P(x).conj()``.

    The first row is always zero since the translation is a pure quaternion.
    """
    J = _check_pose_jacobian(pose_jacobian)
    return 2.0 * x.P().conj().haminus4() @ J[4:, :] + 2.0 * x.D().hamiplus4() @ C4 @ J[:4, :]


def distance_jacobian(pose_jacobian: np.ndarray, x: DQ) -> np.ndarray:
    """Jacobian of the squared distance between the origin and the translation of ``x``."""
    Jt = translation_jacobian(pose_jacobian, x)
    t = x.translation().vec4()
    return 2.0 * t @ Jt
