"""Staubli RX-90L preset configuration and helpers."""
from __future__ import annotations

import numpy as np

from ..kinematics import SerialManipulator
from ..types import Frames, JointType, Limits, SerialRobotConfig

R = JointType.REVOLUTE


def rx90l_config() -> SerialRobotConfig:
    table = np.array(
        [
            [0.0, -np.pi / 2, np.pi / 2, 0.0, 0.0, 0.0],  # theta
            [0.350, 0.0, 0.0, 0.0, 0.0, 0.100],  # d
            [0.000, 0.450, 0.050, 0.425, 0.0, 0.0],  # a
            [-np.pi / 2, 0.0, -np.pi / 2, np.pi / 2, -np.pi / 2, 0.0],  # alpha
            [R, R, R, R, R, R],
        ],
        dtype=float,
    )
    q_limits = np.deg2rad(
        np.array(
            [
                [-160, 160],
                [-137.5, 137.5],
                [-142.5, 142.5],
                [-270, 270],
                [-105, 120],
                [-270, 270],
            ],
            dtype=float,
        )
    )
    limits = Limits(q_min=q_limits[:, 0], q_max=q_limits[:, 1])
    return SerialRobotConfig(table=table, name="Staubli RX-90L", convention="dh", frames=Frames(), limits=limits)


def create_robot() -> SerialManipulator:
    """Instantiate the RX-90L robot from its configuration."""
    return SerialManipulator.from_config(rx90l_config())
