"""Matplotlib rendering of kinematic chains as 3D stick figures."""
from __future__ import annotations

import matplotlib.pyplot as plt
import numpy as np


def new_axes(reach: float = 1.3, title: str | None = None):
    """Create a 3D axes sized for a robot of the given reach."""
    fig = plt.figure(figsize=(7, 6))
    ax = fig.add_subplot(111, projection="3d")
    ax.set_xlim([-reach, reach])
    ax.set_ylim([-reach, reach])
    ax.set_zlim([0.0, reach * 1.2])
    ax.set_xlabel("X [m]")
    ax.set_ylabel("Y [m]")
    ax.set_zlabel("Z [m]")
    if title:
        ax.set_title(title)
    return ax


def plot_chain(points: np.ndarray, ax=None, *, joints: bool = True, base: bool = True, **line_kwargs):
    """Draw consecutive frame origins as links.

    ``points`` holds one XYZ row per frame, base first and effector last.
    Remaining keyword arguments go to ``Axes.plot``.
    """
    points = np.asarray(points, dtype=float)
    if ax is None:
        ax = new_axes()
    line_kwargs.setdefault("lw", 3)
    xs, ys, zs = points[:, 0], points[:, 1], points[:, 2]
    ax.plot(xs, ys, zs, **line_kwargs)
    if joints:
        ax.scatter(xs[1:-1], ys[1:-1], zs[1:-1], s=20)
    if base:
        ax.scatter(xs[:1], ys[:1], zs[:1], s=60, marker="s")
    return ax
