"""Yaskawa MotoMini, DH config + helpers."""
from __future__ import annotations

import numpy as np

from ..kinematics import SerialManipulator
from ..types import Frames, JointType, Limits, SerialRobotConfig

R = JointType.REVOLUTE


def motomini_config() -> SerialRobotConfig:
    table = np.array(
        [
            [0.0, -np.pi / 2, +np.pi / 2, 0.0, 0.0, 0.0],  # theta
            [0.068, 0.0, 0.0, 0.0, 0.0, 0.040],  # d, tool drop is in d6
            [0.000, 0.103, 0.165, 0.165, 0.0, 0.0],  # a
            [-np.pi / 2, 0.0, -np.pi / 2, +np.pi / 2, -np.pi / 2, 0.0],  # alpha
            [R, R, R, R, R, R],
        ],
        dtype=float,
    )

    # Generic limits, adjust to your controller if needed
    q_limits = np.deg2rad(np.array([
        [-170, 170],   # J1
        [ -90,  90],   # J2
        [ -90,  90],   # J3
        [-140, 140],   # J4
        [-120, 120],   # J5
        [-360, 360],   # J6
    ], dtype=float))
    limits = Limits(q_min=q_limits[:, 0], q_max=q_limits[:, 1])

    return SerialRobotConfig(table=table, name="MotoMini (from layout)", convention="dh", frames=Frames(), limits=limits)


def create_motomini() -> SerialManipulator:
    return SerialManipulator.from_config(motomini_config())
