"""Exceptions raised by the kinematics layer."""


class KinematicsError(Exception):
    """Base class for every error raised by dqkin."""


class InvalidParameterShape(KinematicsError, ValueError):
    """The DH/MDH parameter table does not have the expected shape."""


class UnsupportedJointType(KinematicsError, ValueError):
    """A joint type tag outside the supported set."""


class DimensionMismatch(KinematicsError, ValueError):
    """A configuration or velocity vector has the wrong length."""


class IndexOutOfRange(KinematicsError, IndexError):
    """A link or segment index outside the valid bounds."""
