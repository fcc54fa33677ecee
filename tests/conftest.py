"""Shared fixtures for the kinematics tests."""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from dqkin import DQ, JointType, SerialManipulatorDH, SerialManipulatorMDH, rotation_quaternion

R = JointType.REVOLUTE
P = JointType.PRISMATIC

# theta; d; a; alpha; type
MIXED_TABLE = np.array(
    [
        [0.1, 0.0, -0.3, 0.2, 0.0],
        [0.3, 0.1, 0.0, 0.05, 0.02],
        [0.0, 0.2, 0.15, 0.1, 0.08],
        [0.0, np.pi / 2, -np.pi / 3, 0.4, 0.7],
        [R, P, R, R, P],
    ],
    dtype=float,
)


@pytest.fixture
def base_frame():
    return DQ.from_pose(rotation_quaternion(0.4, [0.2, -1.0, 0.5]), [0.1, -0.2, 0.3])


@pytest.fixture
def effector():
    return DQ.from_pose(rotation_quaternion(-0.7, [1.0, 0.3, 0.0]), [0.0, 0.05, 0.12])


@pytest.fixture
def mdh_robot(base_frame, effector):
    return SerialManipulatorMDH(MIXED_TABLE, name="mixed mdh", base_frame=base_frame, effector=effector)


@pytest.fixture
def dh_robot(base_frame, effector):
    return SerialManipulatorDH(MIXED_TABLE, name="mixed dh", base_frame=base_frame, effector=effector)


@pytest.fixture
def q():
    return np.array([0.3, 0.12, -0.8, 1.1, 0.05])


@pytest.fixture
def q_dot():
    return np.array([0.5, -0.2, 0.9, -0.4, 0.3])


@pytest.fixture
def mixed_table():
    return MIXED_TABLE.copy()
