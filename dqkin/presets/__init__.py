"""Predefined robot configurations."""

from .motomini import create_motomini, motomini_config
from .rail import create_rail_rx90l, linear_rail_config
from .rx90l import create_robot, rx90l_config

__all__ = [
    "create_robot",
    "rx90l_config",
    "motomini_config",
    "create_motomini",
    "linear_rail_config",
    "create_rail_rx90l",
]
