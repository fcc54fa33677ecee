"""Composite kinematic chains made of serially attached segments."""
from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np

from .dualquat import DQ
from .errors import DimensionMismatch, IndexOutOfRange
from .kinematics import DQKinematics

logger = logging.getLogger(__name__)


class WholeBody:
    """Append-only chain of kinematic segments, e.g. an arm on a mobile base.

    The configuration vector of the whole body is the concatenation of the
    segments' configuration vectors, in the order the segments were added.
    Segments are numbered from 1 and ``ith`` arguments select the first
    ``ith`` segments.

    Each segment's base frame at the time it is added is recorded as its
    mount on the preceding segment. The chain always composes segments
    through those mounts, so :meth:`apply_base_frames` can move the
    segments' own base frames without changing the whole body's kinematics.
    """

    def __init__(self, robot: DQKinematics):
        dim = robot.get_dim_configuration_space()
        self._chain: List[DQKinematics] = [robot]
        self._mounts: List[DQ] = [robot.base_frame]
        self._dims: List[int] = [dim]
        self._dim_configuration_space = dim

    def get_dim_configuration_space(self) -> int:
        return self._dim_configuration_space

    def __len__(self) -> int:
        return len(self._chain)

    def get_chain(self, ith: int) -> DQKinematics:
        if not 1 <= ith <= len(self._chain):
            raise IndexOutOfRange(f"Segment index {ith} is out of range [1, {len(self._chain)}]")
        return self._chain[ith - 1]

    def append(self, robot: DQKinematics) -> None:
        """Attach ``robot`` to the end of the chain, mounted at its current base frame."""
        dim = robot.get_dim_configuration_space()
        self._chain.append(robot)
        self._mounts.append(robot.base_frame)
        self._dims.append(dim)
        self._dim_configuration_space += dim
        logger.debug(
            "Appended segment %d with %d joints, whole body now has %d",
            len(self._chain),
            dim,
            self._dim_configuration_space,
        )

    def _slices(self, q, ith: Optional[int], name: str = "q") -> List[np.ndarray]:
        """Split ``q`` into the configuration vectors of the first ``ith`` segments.

        ``q`` holds either the whole body's configuration or exactly the
        values of the selected segments.
        """
        n = len(self._chain) if ith is None else int(ith)
        if not 0 <= n <= len(self._chain):
            raise IndexOutOfRange(f"Segment index {n} is out of range [0, {len(self._chain)}]")
        q = np.atleast_1d(np.asarray(q, dtype=float))
        if q.ndim != 1:
            raise DimensionMismatch(f"Expected {name} to be a vector, got shape {q.shape}")
        needed = sum(self._dims[:n])
        if q.shape[0] not in (needed, self._dim_configuration_space):
            raise DimensionMismatch(
                f"Expected {name} of shape ({needed},) or ({self._dim_configuration_space},), got {q.shape}"
            )
        slices = []
        j = 0
        for dim in self._dims[:n]:
            slices.append(q[j : j + dim])
            j += dim
        return slices

    def _slice_pair(self, q, q_dot, ith: Optional[int]):
        slices = self._slices(q, ith)
        dot_slices = self._slices(q_dot, ith, name="q_dot")
        if np.shape(q) != np.shape(q_dot):
            raise DimensionMismatch(f"q_dot of shape {np.shape(q_dot)} does not match q of shape {np.shape(q)}")
        return slices, dot_slices

    # ------------------------------------------------------------------
    # Segments seen from their mounts
    # ------------------------------------------------------------------
    def _rebase(self, i: int) -> Optional[DQ]:
        """Correction from segment i's current base back to its mount, None if unchanged."""
        robot = self._chain[i]
        if robot.base_frame == self._mounts[i]:
            return None
        return self._mounts[i] * robot.base_frame.conj()

    def _segment_fkm(self, i: int, qi: np.ndarray) -> DQ:
        x = self._chain[i].fkm(qi)
        c = self._rebase(i)
        return x if c is None else c * x

    def _segment_jacobian(self, i: int, qi: np.ndarray) -> np.ndarray:
        J = self._chain[i].pose_jacobian(qi)
        c = self._rebase(i)
        return J if c is None else c.hamiplus8() @ J

    def _segment_jacobian_derivative(self, i: int, qi: np.ndarray, qdi: np.ndarray) -> np.ndarray:
        J_dot = self._chain[i].pose_jacobian_derivative(qi, qdi)
        c = self._rebase(i)
        return J_dot if c is None else c.hamiplus8() @ J_dot

    # ------------------------------------------------------------------
    # Kinematics
    # ------------------------------------------------------------------
    def fkm(self, q: np.ndarray, ith: Optional[int] = None) -> DQ:
        """Pose of the last frame of segment ``ith`` (default: the last segment)."""
        x = DQ(1.0)
        for i, qi in enumerate(self._slices(q, ith)):
            x = x * self._segment_fkm(i, qi)
        return x

    def pose_jacobian(self, q: np.ndarray, ith: Optional[int] = None) -> np.ndarray:
        """Pose Jacobian of :meth:`fkm`.

        The block of segment i is ``hamiplus8(X_before) @ haminus8(X_after) @ J_i``.
        """
        slices = self._slices(q, ith)
        poses = [self._segment_fkm(i, qi) for i, qi in enumerate(slices)]

        suffix: List[DQ] = [DQ(1.0)] * len(poses)
        post = DQ(1.0)
        for i in reversed(range(len(poses))):
            suffix[i] = post
            post = poses[i] * post

        blocks = []
        pre = DQ(1.0)
        for i, qi in enumerate(slices):
            blocks.append(pre.hamiplus8() @ suffix[i].haminus8() @ self._segment_jacobian(i, qi))
            pre = pre * poses[i]
        if not blocks:
            return np.zeros((8, 0), dtype=float)
        return np.hstack(blocks)

    def pose_jacobian_derivative(self, q: np.ndarray, q_dot: np.ndarray, ith: Optional[int] = None) -> np.ndarray:
        """Time derivative of :meth:`pose_jacobian` along ``q_dot``."""
        slices, dot_slices = self._slice_pair(q, q_dot, ith)
        poses = [self._segment_fkm(i, qi) for i, qi in enumerate(slices)]
        jacobians = [self._segment_jacobian(i, qi) for i, qi in enumerate(slices)]
        x_dots = [J @ qdi for J, qdi in zip(jacobians, dot_slices)]

        suffix: List[DQ] = [DQ(1.0)] * len(poses)
        suffix_dot: List[np.ndarray] = [np.zeros(8)] * len(poses)
        post = DQ(1.0)
        post_dot = np.zeros(8)
        for i in reversed(range(len(poses))):
            suffix[i] = post
            suffix_dot[i] = post_dot
            post_dot = post.haminus8() @ x_dots[i] + poses[i].hamiplus8() @ post_dot
            post = poses[i] * post

        blocks = []
        pre = DQ(1.0)
        pre_dot = np.zeros(8)
        for i in range(len(poses)):
            J_i = jacobians[i]
            J_dot_i = self._segment_jacobian_derivative(i, slices[i], dot_slices[i])
            blocks.append(
                DQ.from_vec8(pre_dot).hamiplus8() @ suffix[i].haminus8() @ J_i
                + pre.hamiplus8() @ DQ.from_vec8(suffix_dot[i]).haminus8() @ J_i
                + pre.hamiplus8() @ suffix[i].haminus8() @ J_dot_i
            )
            pre_dot = poses[i].haminus8() @ pre_dot + pre.hamiplus8() @ x_dots[i]
            pre = pre * poses[i]
        if not blocks:
            return np.zeros((8, 0), dtype=float)
        return np.hstack(blocks)

    # ------------------------------------------------------------------
    # Segment bases
    # ------------------------------------------------------------------
    def base_frames(self, q: np.ndarray) -> List[DQ]:
        """World pose of every segment's base at configuration ``q``.

        Segment i sits at the pose reached by segments 1..i-1, followed by the
        mount recorded when it was added. Nothing is modified.
        """
        frames = []
        x = DQ(1.0)
        for i, qi in enumerate(self._slices(q, None)):
            frames.append(x * self._mounts[i])
            x = x * self._segment_fkm(i, qi)
        return frames

    def apply_base_frames(self, q: np.ndarray) -> None:
        """Write :meth:`base_frames` into segments 2..n.

        Afterwards each segment's own ``fkm`` reports world poses, which is
        what standalone consumers of the segments expect. The frames are
        always computed from the recorded mounts, so applying again, at the
        same or another configuration, overwrites the previous result and the
        whole body's own kinematics are unaffected.
        """
        frames = self.base_frames(q)
        for robot, frame in zip(self._chain[1:], frames[1:]):
            robot.set_base_frame(frame)

    def plot(self, q: np.ndarray, ax=None, **style):
        """Draw every segment at its base from :meth:`base_frames`.

        ``style`` is forwarded untouched to each segment's ``plot``.
        """
        frames = self.base_frames(q)
        for robot, qi, frame in zip(self._chain, self._slices(q, None), frames):
            ax = robot.plot(qi, ax=ax, base_frame=frame, **style)
        return ax
