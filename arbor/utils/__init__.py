"""Utility helpers."""

from .vectors import normalize, rotate_about_axis, side_axis, orthonormalize_up

__all__ = ["normalize", "rotate_about_axis", "side_axis", "orthonormalize_up"]
