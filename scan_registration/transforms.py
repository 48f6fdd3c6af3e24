"""
Point set utilities: Euler rotation about the centroid and Gaussian noise.
"""

from typing import Optional, Union

import numpy as np


def rotation_matrix(rx, ry, rz):
    """Right-handed Rz @ Ry @ Rx from angles in radians."""
    cx, cy, cz = np.cos([rx, ry, rz])
    sx, sy, sz = np.sin([rx, ry, rz])
    Rx = np.array([[1, 0, 0],
                   [0, cx, -sx],
                   [0, sx, cx]])

    Ry = np.array([[cy, 0, sy],
                   [0, 1, 0],
                   [-sy, 0, cy]])

    Rz = np.array([[cz, -sz, 0],
                   [sz,  cz, 0],
                   [0,    0, 1]])
    return Rz @ Ry @ Rx


def apply_transform(points, rotation, translation=None):
    points = np.asarray(points, dtype=np.float64)
    out = (rotation @ points.T).T
    if translation is not None:
        out = out + translation
    return out


def rotate(points: np.ndarray, rx: float, ry: float, rz: float) -> tuple[np.ndarray, np.ndarray]:
    """
    Rotate a point set about its own centroid.

    Args:
        points: (N, 3) point cloud
        rx, ry, rz: rotation angles about X, Y, Z in radians

    Returns:
        centered: the input with its centroid subtracted
        rotated: centered points rotated by Rz @ Ry @ Rx (still zero-centroid)
    """
    points = np.asarray(points, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] != 3 or len(points) == 0:
        raise ValueError(f"Expected non-empty (N, 3) points, got {points.shape}")

    centered = points - points.mean(axis=0)
    rotated = apply_transform(centered, rotation_matrix(rx, ry, rz))
    return centered, rotated


def add_noise(
    points: np.ndarray,
    sigma: float,
    seed: Optional[Union[int, np.random.Generator]] = None,
) -> np.ndarray:
    """
    Add independent zero-mean Gaussian noise to every coordinate.

    Args:
        points: (N, 3) point cloud
        sigma: standard deviation of the noise
        seed: int seed or Generator for reproducible output; None draws
              fresh entropy so repeated calls differ

    Returns:
        New (N, 3) array; the input is left untouched.
    """
    if sigma < 0:
        raise ValueError(f"sigma must be non-negative, got {sigma}")
    points = np.asarray(points, dtype=np.float64)
    rng = np.random.default_rng(seed)
    return points + rng.normal(0.0, sigma, size=points.shape)
