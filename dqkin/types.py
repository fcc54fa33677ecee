"""Shared dataclasses and enums for the kinematics layer."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

import numpy as np

from .dualquat import DQ
from .errors import InvalidParameterShape, UnsupportedJointType


class JointType(IntEnum):
    """Actuation type of a joint, as stored in the last row of a DH table."""

    REVOLUTE = 1
    PRISMATIC = 2


@dataclass(frozen=True)
class JointModel:
    """DH/MDH parameters of a single link.

    For a revolute joint ``theta`` is the offset added to the joint value; for
    a prismatic joint ``d`` is.
    """

    theta: float
    d: float
    a: float
    alpha: float
    type: JointType = JointType.REVOLUTE

    @property
    def revolute(self) -> bool:
        return self.type == JointType.REVOLUTE


def _joint_type(value: float, column: int) -> JointType:
    if not float(value).is_integer():
        raise UnsupportedJointType(f"Joint type {value!r} of link {column + 1} is not a supported joint type")
    try:
        return JointType(int(value))
    except ValueError as exc:
        raise UnsupportedJointType(
            f"Joint type {int(value)} of link {column + 1} is not one of "
            f"{[t.name for t in JointType]}"
        ) from exc


def joint_models_from_table(table) -> tuple[JointModel, ...]:
    """Split a 5 x n parameter table into one :class:`JointModel` per column.

    Rows are ``[theta; d; a; alpha; type]``.
    """
    A = np.asarray(table, dtype=float)
    if A.ndim != 2 or A.shape[0] != 5:
        raise InvalidParameterShape(
            f"Invalid DH table: expected 5 rows [theta; d; a; alpha; type], got shape {A.shape}"
        )
    if A.shape[1] == 0:
        raise InvalidParameterShape("Invalid DH table: it must describe at least one link")
    links = []
    for col in range(A.shape[1]):
        theta, d, a, alpha, type_ = A[:, col]
        links.append(JointModel(float(theta), float(d), float(a), float(alpha), _joint_type(type_, col)))
    return tuple(links)


@dataclass(frozen=True)
class Limits:
    """Joint limits for a serial manipulator."""

    q_min: np.ndarray
    q_max: np.ndarray

    def clamp(self, q: np.ndarray) -> np.ndarray:
        return np.minimum(np.maximum(q, self.q_min), self.q_max)


@dataclass(frozen=True)
class Frames:
    """Base and end-effector frames of a robot description."""

    base: DQ = field(default_factory=lambda: DQ(1.0))
    effector: DQ = field(default_factory=lambda: DQ(1.0))


@dataclass(frozen=True)
class SerialRobotConfig:
    """Configuration describing a serial robot by its parameter table."""

    table: np.ndarray
    name: str
    convention: str = "dh"
    frames: Frames = field(default_factory=Frames)
    limits: Optional[Limits] = None
