"""
CorrespondenceBuilder component for pairing sampled source points with
their nearest neighbours in a target scan.
"""

import logging
from dataclasses import dataclass

import numpy as np

from .errors import NoCorrespondenceError
from .spatial_index import SpatialIndex

logger = logging.getLogger(__name__)

# Squared distance below which a nearest neighbour counts as a match.
DEFAULT_MAX_SQ_DISTANCE = 0.01


@dataclass
class CorrespondenceSet:
    """Row-paired source/target points accepted by a correspondence search."""
    source: np.ndarray          # (K, 3) sampled source points (P)
    target: np.ndarray          # (K, 3) matched target points (Q)
    residual: float             # mean squared distance over accepted pairs
    source_indices: np.ndarray  # (K,) rows of the source cloud
    target_indices: np.ndarray  # (K,) rows of the target cloud

    @property
    def count(self) -> int:
        return len(self.source)


class CorrespondenceBuilder:
    """Builds nearest-neighbour correspondences between two point clouds."""

    @staticmethod
    def build(
        source: np.ndarray,
        target: np.ndarray,
        stride: int = 1,
        max_sq_distance: float = DEFAULT_MAX_SQ_DISTANCE,
    ) -> CorrespondenceSet:
        """Pair every `stride`-th source point with its closest target point.

        Args:
            source: Source point cloud of shape (N, 3); sampled rows are
                0, stride, 2 * stride, ...
            target: Target point cloud of shape (M, 3); indexed once per call.
            stride: Sampling step over source rows, at least 1.
            max_sq_distance: Matches with squared distance at or above this
                value are discarded.

        Returns:
            CorrespondenceSet with at most ceil(N / stride) pairs.

        Raises:
            ValueError: If stride < 1 or source is not (N, 3).
            EmptyIndexError: If the target is empty.
            NoCorrespondenceError: If no sampled point has an accepted match.
        """
        if stride < 1:
            raise ValueError(f"stride must be >= 1, got {stride}")
        source = np.asarray(source, dtype=np.float64)
        if source.ndim != 2 or source.shape[1] != 3:
            raise ValueError(f"Expected source of shape (N, 3), got {source.shape}")

        index = SpatialIndex(target)

        sample_rows = np.arange(0, len(source), stride)
        target_rows, sq_dists = index.query(source[sample_rows])

        accepted = sq_dists < max_sq_distance
        count = int(np.count_nonzero(accepted))
        if count == 0:
            raise NoCorrespondenceError(
                f"No correspondences within squared distance {max_sq_distance} "
                f"among {len(sample_rows)} sampled points (stride {stride})"
            )

        source_indices = sample_rows[accepted]
        target_indices = target_rows[accepted]
        residual = float(sq_dists[accepted].sum() / count)
        logger.debug(
            "Accepted %d/%d correspondences, mean squared distance %.3e",
            count, len(sample_rows), residual,
        )

        return CorrespondenceSet(
            source=source[source_indices].copy(),
            target=index.points[target_indices].copy(),
            residual=residual,
            source_indices=source_indices,
            target_indices=target_indices,
        )
