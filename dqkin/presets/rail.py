"""RX-90L mounted on a linear rail, as a two-segment whole body."""
from __future__ import annotations

import numpy as np

from ..dualquat import DQ, rotation_quaternion
from ..kinematics import SerialManipulator
from ..types import Frames, JointType, Limits, SerialRobotConfig
from ..whole_body import WholeBody
from .rx90l import rx90l_config


def linear_rail_config(length: float = 2.0, height: float = 0.2) -> SerialRobotConfig:
    """Single prismatic joint travelling along the world x axis.

    The joint axis of a DH link is z, so the base turns z onto x and the
    effector turns the carriage frame back to the world orientation.
    """
    table = np.array([[0.0], [0.0], [0.0], [0.0], [JointType.PRISMATIC]], dtype=float)
    base = DQ.from_pose(rotation_quaternion(np.pi / 2, [0.0, 1.0, 0.0]), [0.0, 0.0, height])
    effector = rotation_quaternion(-np.pi / 2, [0.0, 1.0, 0.0])
    limits = Limits(q_min=np.array([0.0]), q_max=np.array([length]))
    return SerialRobotConfig(
        table=table,
        name="Linear rail",
        convention="mdh",
        frames=Frames(base=base, effector=effector),
        limits=limits,
    )


def create_rail_rx90l(length: float = 2.0, height: float = 0.2) -> WholeBody:
    """Whole body whose first joint is the rail position, followed by the six arm joints."""
    body = WholeBody(SerialManipulator.from_config(linear_rail_config(length, height)))
    body.append(SerialManipulator.from_config(rx90l_config()))
    return body
