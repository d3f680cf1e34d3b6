"""
Vector helpers for turtle orientation and branch directions.

Rotations go through scipy's Rotation (rotation vector = unit axis * angle),
so the sign convention is the right-hand rule about the given axis.
"""

from typing import Optional

import numpy as np
from scipy.spatial.transform import Rotation

EPS = 1e-12


def normalize(v: np.ndarray, eps: float = EPS) -> Optional[np.ndarray]:
    """
    Return v scaled to unit length, or None when |v| <= eps.

    Callers decide how to degrade when a direction collapses.
    """
    v = np.asarray(v, dtype=float)
    n = np.linalg.norm(v)
    if n <= eps or not np.isfinite(n):
        return None
    return v / n


def rotate_about_axis(v: np.ndarray, axis: np.ndarray, angle_rad: float) -> np.ndarray:
    """
    Rotate v by angle_rad about axis (right-hand rule).

    Parameters
    ----------
    v : np.ndarray
        Vector(s) to rotate, shape (3,) or (N, 3)
    axis : np.ndarray
        Rotation axis; need not be unit length
    angle_rad : float
        Rotation angle in radians

    Returns
    -------
    np.ndarray
        Rotated vector(s). v is returned unchanged when the axis is degenerate.
    """
    unit = normalize(axis)
    if unit is None:
        return np.asarray(v, dtype=float)
    return Rotation.from_rotvec(unit * angle_rad).apply(np.asarray(v, dtype=float))


def side_axis(heading: np.ndarray, up: np.ndarray) -> Optional[np.ndarray]:
    """Unit vector perpendicular to heading and up, or None if they are parallel."""
    return normalize(np.cross(heading, up))


def orthonormalize_up(heading: np.ndarray, up: np.ndarray) -> np.ndarray:
    """
    Make up perpendicular to heading (Gram-Schmidt).

    Falls back to any unit vector perpendicular to heading when up has
    collapsed onto it.
    """
    projected = normalize(up - np.dot(up, heading) * heading)
    if projected is not None:
        return projected
    trial = np.array([1.0, 0.0, 0.0])
    if abs(heading[0]) > 0.9:
        trial = np.array([0.0, 0.0, 1.0])
    return normalize(np.cross(heading, trial))


__all__ = ["normalize", "rotate_about_axis", "side_axis", "orthonormalize_up", "EPS"]
