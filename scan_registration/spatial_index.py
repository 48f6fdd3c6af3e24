"""
SpatialIndex component for nearest-neighbour queries against a target scan.
"""

import numpy as np
from scipy.spatial import cKDTree

from .errors import EmptyIndexError


class SpatialIndex:
    """k-d tree over a copy of a target point cloud.

    The tree is built once on construction and is read-only afterwards, so
    one index can serve every query of a correspondence search.
    """

    LEAF_SIZE = 10

    def __init__(self, target: np.ndarray):
        """Build the index.

        Args:
            target: Target point cloud of shape (N, 3).

        Raises:
            EmptyIndexError: If the target has no points.
            ValueError: If the target is not an (N, 3) array.
        """
        points = np.array(target, dtype=np.float64)
        if points.size == 0:
            raise EmptyIndexError("Cannot build a spatial index over an empty point cloud")
        if points.ndim != 2 or points.shape[1] != 3:
            raise ValueError(f"Expected target of shape (N, 3), got {points.shape}")

        self.points = points
        self.tree = cKDTree(points, leafsize=self.LEAF_SIZE)

    def __len__(self) -> int:
        return len(self.points)

    def nearest_neighbor(self, point: np.ndarray) -> tuple[int, float]:
        """Return (row, squared_distance) of the target point closest to `point`."""
        dist, idx = self.tree.query(np.asarray(point, dtype=np.float64).reshape(3))
        return int(idx), float(dist) ** 2

    def query(self, points: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Batched nearest-neighbour lookup.

        Args:
            points: Query points of shape (M, 3).

        Returns:
            Tuple of (rows, squared_distances), both of shape (M,).
        """
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if len(points) == 0:
            return np.empty(0, dtype=np.intp), np.empty(0, dtype=np.float64)
        dist, idx = self.tree.query(points, k=1)
        return np.asarray(idx, dtype=np.intp), np.square(dist)
