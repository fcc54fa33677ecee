"""Dual quaternion kinematics for serial manipulators and whole-body chains."""
from .dualquat import C4, C8, DQ, Ad, E_, i_, j_, k_, rotation_quaternion
from .errors import (
    DimensionMismatch,
    IndexOutOfRange,
    InvalidParameterShape,
    KinematicsError,
    UnsupportedJointType,
)
from .jacobians import distance_jacobian, rotation_jacobian, translation_jacobian
from .kinematics import (
    DQKinematics,
    FKOptions,
    FKResult,
    SerialManipulator,
    SerialManipulatorDH,
    SerialManipulatorMDH,
    fk,
    numerical_jacobian,
)
from .types import Frames, JointModel, JointType, Limits, SerialRobotConfig, joint_models_from_table
from .whole_body import WholeBody

__all__ = [
    "DQ",
    "Ad",
    "C4",
    "C8",
    "E_",
    "i_",
    "j_",
    "k_",
    "rotation_quaternion",
    "KinematicsError",
    "InvalidParameterShape",
    "UnsupportedJointType",
    "DimensionMismatch",
    "IndexOutOfRange",
    "JointType",
    "JointModel",
    "Limits",
    "Frames",
    "SerialRobotConfig",
    "joint_models_from_table",
    "DQKinematics",
    "SerialManipulator",
    "SerialManipulatorDH",
    "SerialManipulatorMDH",
    "FKOptions",
    "FKResult",
    "fk",
    "numerical_jacobian",
    "rotation_jacobian",
    "translation_jacobian",
    "distance_jacobian",
    "WholeBody",
]
