"""Serial manipulator kinematics in dual quaternion form."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Protocol

import numpy as np

from .dualquat import C8, DQ, Ad, E_, j_, k_
from .errors import DimensionMismatch, IndexOutOfRange
from .types import JointModel, JointType, Limits, SerialRobotConfig, joint_models_from_table

logger = logging.getLogger(__name__)


class DQKinematics(Protocol):
    """Protocol for kinematic chains that can be composed into a whole body."""

    @property
    def base_frame(self) -> DQ:
        """Pose of the chain's base."""

    def get_dim_configuration_space(self) -> int:
        """Number of joint values the chain consumes."""

    def fkm(self, q: np.ndarray, ith: Optional[int] = None) -> DQ:
        """Pose of the last frame, or of the ``ith`` one."""

    def pose_jacobian(self, q: np.ndarray, ith: Optional[int] = None) -> np.ndarray:
        """8 x n pose Jacobian."""

    def pose_jacobian_derivative(self, q: np.ndarray, q_dot: np.ndarray, ith: Optional[int] = None) -> np.ndarray:
        """Time derivative of the pose Jacobian."""

    def set_base_frame(self, base_frame: DQ) -> None:
        """Move the chain's base."""

    def plot(self, q: np.ndarray, ax=None, *, base_frame: Optional[DQ] = None, **style):
        """Draw the chain at configuration ``q``."""


@dataclass(frozen=True)
class FKOptions:
    with_tool: bool = True
    with_base: bool = True
    return_jacobian: bool = False


@dataclass
class FKResult:
    poses: List[DQ]
    points: np.ndarray
    jacobian: Optional[np.ndarray] = None


def _as_vector(q, name: str) -> np.ndarray:
    v = np.atleast_1d(np.asarray(q, dtype=float))
    if v.ndim != 1:
        raise DimensionMismatch(f"Expected {name} to be a vector, got shape {v.shape}")
    return v


class SerialManipulator(ABC):
    """Open kinematic chain described by a 5 x n DH-style parameter table.

    Subclasses supply the convention-specific link transform
    (:meth:`get_link2dq`) and joint motion generator (:meth:`get_w`); the
    forward kinematics, the pose Jacobian and its derivative are shared.

    Links are numbered from 1, as in a DH table. Methods taking ``ith``
    evaluate the chain up to and including link ``ith``.
    """

    convention = ""

    def __init__(
        self,
        table,
        *,
        name: str = "",
        base_frame: Optional[DQ] = None,
        effector: Optional[DQ] = None,
        limits: Optional[Limits] = None,
    ):
        self._links = joint_models_from_table(table)
        self.name = name
        self.limits = limits
        self._base_frame = DQ(1.0) if base_frame is None else base_frame
        self._effector = DQ(1.0) if effector is None else effector
        logger.debug("Created %s manipulator %r with %d links", self.convention, name, len(self._links))

    @classmethod
    def from_config(cls, config: SerialRobotConfig) -> "SerialManipulator":
        """Instantiate the manipulator described by ``config``.

        Called on :class:`SerialManipulator` itself, the subclass is picked
        from ``config.convention``. Called on a subclass, the convention must
        be that subclass's own.
        """
        convention = config.convention.lower()
        if cls is SerialManipulator:
            try:
                robot_cls = _CONVENTIONS[convention]
            except KeyError as exc:
                raise ValueError(f"Unknown DH convention {config.convention!r}") from exc
        elif convention != cls.convention:
            raise ValueError(
                f"{cls.__name__} implements the {cls.convention!r} convention, config asks for {config.convention!r}"
            )
        else:
            robot_cls = cls
        return robot_cls(
            config.table,
            name=config.name,
            base_frame=config.frames.base,
            effector=config.frames.effector,
            limits=config.limits,
        )

    # ------------------------------------------------------------------
    # Chain description
    # ------------------------------------------------------------------
    @property
    def links(self) -> tuple[JointModel, ...]:
        return self._links

    def get_dim_configuration_space(self) -> int:
        return len(self._links)

    @staticmethod
    def get_supported_joint_types() -> tuple[JointType, ...]:
        return (JointType.REVOLUTE, JointType.PRISMATIC)

    def get_joint_type(self, ith: int) -> JointType:
        return self._link(ith).type

    @property
    def base_frame(self) -> DQ:
        return self._base_frame

    @property
    def effector(self) -> DQ:
        return self._effector

    def set_base_frame(self, base_frame: DQ) -> None:
        logger.debug("Base frame of %r set to %s", self.name, base_frame)
        self._base_frame = base_frame

    def set_effector(self, effector: DQ) -> None:
        logger.debug("Effector of %r set to %s", self.name, effector)
        self._effector = effector

    def _link(self, ith: int) -> JointModel:
        n = len(self._links)
        if not 1 <= ith <= n:
            raise IndexOutOfRange(f"Link index {ith} is out of range [1, {n}]")
        return self._links[ith - 1]

    def _link_parameters(self, q: float, ith: int) -> tuple[float, float, float, float]:
        """Half theta, d, a and half alpha of link ``ith`` moved by ``q``."""
        link = self._link(ith)
        half_theta = link.theta / 2.0
        d = link.d
        if link.revolute:
            half_theta = half_theta + (q / 2.0)
        else:
            d = d + q
        return half_theta, d, link.a, link.alpha / 2.0

    def _resolve(self, q, ith: Optional[int], name: str = "q") -> tuple[np.ndarray, int]:
        """Validate ``q`` against the requested chain length.

        The full chain needs exactly n values; a chain up to link ``ith``
        accepts any vector holding at least ``ith`` and at most n values.
        """
        q = _as_vector(q, name)
        dim = len(self._links)
        if ith is None:
            if q.shape[0] != dim:
                raise DimensionMismatch(f"Expected {name} of shape ({dim},), got {q.shape}")
            return q, dim
        ith = int(ith)
        if not 0 <= ith <= dim:
            raise IndexOutOfRange(f"Link index {ith} is out of range [0, {dim}]")
        if not ith <= q.shape[0] <= dim:
            raise DimensionMismatch(
                f"Expected {name} with between {ith} and {dim} values for link {ith}, got {q.shape[0]}"
            )
        return q, ith

    # ------------------------------------------------------------------
    # Convention specific
    # ------------------------------------------------------------------
    @abstractmethod
    def get_link2dq(self, q: float, ith: int) -> DQ:
        """Unit dual quaternion of link ``ith`` at joint value ``q``."""
        raise NotImplementedError

    @abstractmethod
    def get_w(self, ith: int) -> DQ:
        """Motion generator of joint ``ith`` in the frame preceding it."""
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Forward kinematics
    # ------------------------------------------------------------------
    def _raw_fkm(self, q: np.ndarray, n: int) -> DQ:
        x = DQ(1.0)
        for i in range(n):
            x = x * self.get_link2dq(float(q[i]), i + 1)
        return x

    def raw_fkm(self, q: np.ndarray, ith: Optional[int] = None) -> DQ:
        """Forward kinematics ignoring the base and effector frames."""
        q, n = self._resolve(q, ith)
        return self._raw_fkm(q, n)

    def fkm(self, q: np.ndarray, ith: Optional[int] = None) -> DQ:
        """Forward kinematics including the base frame and, for the full
        chain, the end-effector."""
        q, n = self._resolve(q, ith)
        x = self._base_frame * self._raw_fkm(q, n)
        if n == len(self._links):
            x = x * self._effector
        return x

    def fk_poses(self, q: np.ndarray, base_frame: Optional[DQ] = None) -> List[DQ]:
        """Poses of the base, of every link frame and of the effector."""
        q, n = self._resolve(q, None)
        x = self._base_frame if base_frame is None else base_frame
        poses = [x]
        for i in range(n):
            x = x * self.get_link2dq(float(q[i]), i + 1)
            poses.append(x)
        poses.append(x * self._effector)
        return poses

    # ------------------------------------------------------------------
    # Differential kinematics
    # ------------------------------------------------------------------
    def _raw_pose_jacobian(self, q: np.ndarray, n: int) -> np.ndarray:
        x_effector = self._raw_fkm(q, n)
        x = DQ(1.0)
        J = np.zeros((8, n), dtype=float)
        for i in range(n):
            w = self.get_w(i + 1)
            z = 0.5 * Ad(x, w)
            x = x * self.get_link2dq(float(q[i]), i + 1)
            J[:, i] = (z * x_effector).vec8()
        return J

    def raw_pose_jacobian(self, q: np.ndarray, ith: Optional[int] = None) -> np.ndarray:
        q, n = self._resolve(q, ith)
        return self._raw_pose_jacobian(q, n)

    def pose_jacobian(self, q: np.ndarray, ith: Optional[int] = None) -> np.ndarray:
        """Pose Jacobian matching :meth:`fkm`, of shape (8, ith or n)."""
        q, n = self._resolve(q, ith)
        J = self._raw_pose_jacobian(q, n)
        if n == len(self._links):
            return self._base_frame.hamiplus8() @ self._effector.haminus8() @ J
        return self._base_frame.hamiplus8() @ J

    def _raw_pose_jacobian_derivative(self, q: np.ndarray, q_dot: np.ndarray, n: int) -> np.ndarray:
        x_effector = self._raw_fkm(q, n)
        x_effector_dot = self._raw_pose_jacobian(q, n) @ q_dot[:n]
        x = DQ(1.0)
        # Sum of q_dot[k] * z_k over the joints preceding the current one, so
        # that the derivative of the partial product is z_sum * x.
        z_sum = DQ(0.0)
        J_dot = np.zeros((8, n), dtype=float)
        for i in range(n):
            w = self.get_w(i + 1)
            z = 0.5 * Ad(x, w)
            x_dot = (z_sum * x).vec8()
            z_dot = 0.5 * ((w * x.conj()).haminus8() + (x * w).hamiplus8() @ C8) @ x_dot
            J_dot[:, i] = x_effector.haminus8() @ z_dot + z.hamiplus8() @ x_effector_dot
            z_sum = z_sum + z * float(q_dot[i])
            x = x * self.get_link2dq(float(q[i]), i + 1)
        return J_dot

    def _resolve_pair(self, q, q_dot, ith: Optional[int]) -> tuple[np.ndarray, np.ndarray, int]:
        q, n = self._resolve(q, ith)
        q_dot, _ = self._resolve(q_dot, ith, name="q_dot")
        if q_dot.shape != q.shape:
            raise DimensionMismatch(f"q_dot of shape {q_dot.shape} does not match q of shape {q.shape}")
        return q, q_dot, n

    def raw_pose_jacobian_derivative(self, q: np.ndarray, q_dot: np.ndarray, ith: Optional[int] = None) -> np.ndarray:
        q, q_dot, n = self._resolve_pair(q, q_dot, ith)
        return self._raw_pose_jacobian_derivative(q, q_dot, n)

    def pose_jacobian_derivative(self, q: np.ndarray, q_dot: np.ndarray, ith: Optional[int] = None) -> np.ndarray:
        """Time derivative of :meth:`pose_jacobian` along ``q_dot``."""
        q, q_dot, n = self._resolve_pair(q, q_dot, ith)
        J_dot = self._raw_pose_jacobian_derivative(q, q_dot, n)
        if n == len(self._links):
            return self._base_frame.hamiplus8() @ self._effector.haminus8() @ J_dot
        return self._base_frame.hamiplus8() @ J_dot

    # ------------------------------------------------------------------
    # Visualisation
    # ------------------------------------------------------------------
    def plot(self, q: np.ndarray, ax=None, *, base_frame: Optional[DQ] = None, **style):
        """Draw the chain; ``base_frame`` overrides the stored base for this call only."""
        from .plotting import plot_chain

        points = np.array([x.translation_vector() for x in self.fk_poses(q, base_frame=base_frame)])
        return plot_chain(points, ax=ax, **style)


class SerialManipulatorDH(SerialManipulator):
    """Serial manipulator using the standard DH convention, Rz(theta) Tz(d) Tx(a) Rx(alpha)."""

    convention = "dh"

    def get_link2dq(self, q: float, ith: int) -> DQ:
        half_theta, d, a, half_alpha = self._link_parameters(q, ith)

        sine_of_half_theta = np.sin(half_theta)
        cosine_of_half_theta = np.cos(half_theta)
        sine_of_half_alpha = np.sin(half_alpha)
        cosine_of_half_alpha = np.cos(half_alpha)

        d2 = d / 2.0
        a2 = a / 2.0
        h = np.zeros(8, dtype=float)
        h[0] = cosine_of_half_alpha * cosine_of_half_theta
        h[1] = sine_of_half_alpha * cosine_of_half_theta
        h[2] = sine_of_half_alpha * sine_of_half_theta
        h[3] = cosine_of_half_alpha * sine_of_half_theta
        h[4] = -d2 * h[3] - a2 * h[1]
        h[5] = -d2 * h[2] + a2 * h[0]
        h[6] = d2 * h[1] + a2 * h[3]
        h[7] = d2 * h[0] - a2 * h[2]
        return DQ(h)

    def get_w(self, ith: int) -> DQ:
        if self.get_joint_type(ith) == JointType.REVOLUTE:
            return k_
        return E_ * k_


class SerialManipulatorMDH(SerialManipulator):
    """Serial manipulator using the modified DH convention, Rx(alpha) Tx(a) Rz(theta) Tz(d)."""

    convention = "mdh"

    def get_link2dq(self, q: float, ith: int) -> DQ:
        half_theta, d, a, half_alpha = self._link_parameters(q, ith)

        sine_of_half_theta = np.sin(half_theta)
        cosine_of_half_theta = np.cos(half_theta)
        sine_of_half_alpha = np.sin(half_alpha)
        cosine_of_half_alpha = np.cos(half_alpha)

        d2 = d / 2.0
        a2 = a / 2.0
        h = np.zeros(8, dtype=float)
        h[0] = cosine_of_half_alpha * cosine_of_half_theta
        h[1] = sine_of_half_alpha * cosine_of_half_theta
        h[2] = -sine_of_half_alpha * sine_of_half_theta
        h[3] = cosine_of_half_alpha * sine_of_half_theta
        h[4] = -a2 * h[1] - d2 * h[3]
        h[5] = a2 * h[0] - d2 * -h[2]
        h[6] = -a2 * h[3] - d2 * h[1]
        h[7] = d2 * h[0] - a2 * -h[2]
        return DQ(h)

    def get_w(self, ith: int) -> DQ:
        link = self._link(ith)
        sa = np.sin(link.alpha)
        ca = np.cos(link.alpha)
        if link.revolute:
            return -j_ * sa + k_ * ca - E_ * link.a * (j_ * ca + k_ * sa)
        return E_ * (k_ * ca - j_ * sa)


_CONVENTIONS = {
    "dh": SerialManipulatorDH,
    "mdh": SerialManipulatorMDH,
}


def fk(robot: SerialManipulator, q: np.ndarray, opts: FKOptions | None = None) -> FKResult:
    """Evaluate forward kinematics with configurable output options."""
    if opts is None:
        opts = FKOptions()
    poses = robot.fk_poses(q)
    if not opts.with_tool:
        poses = poses[:-1]
    if not opts.with_base:
        poses = poses[1:]
    points = np.array([x.translation_vector() for x in poses], dtype=float)
    jacobian = robot.pose_jacobian(q) if opts.return_jacobian else None
    return FKResult(poses=poses, points=points, jacobian=jacobian)


def numerical_jacobian(fun, q: np.ndarray, eps: float = 1e-6) -> np.ndarray:
    """Finite difference Jacobian of a vector-valued function."""
    q = np.asarray(q, dtype=float)
    base = fun(q)
    m = base.size
    J = np.zeros((m, q.size), dtype=float)
    for i in range(q.size):
        dq = np.zeros_like(q)
        dq[i] = eps
        J[:, i] = (fun(q + dq) - base) / eps
    return J
