"""
AbsoluteOrientationSolver component for closed-form rigid alignment of
paired point sets.
"""

import json
import logging
from dataclasses import dataclass

import numpy as np

from .errors import IllConditionedInputError

logger = logging.getLogger(__name__)


@dataclass
class RigidTransform:
    """Rotation followed by translation: x -> rotation @ x + translation."""
    rotation: np.ndarray     # 3x3
    translation: np.ndarray  # (3,)

    @classmethod
    def identity(cls) -> "RigidTransform":
        return cls(rotation=np.eye(3), translation=np.zeros(3))

    def apply(self, points: np.ndarray) -> np.ndarray:
        """Transform points of shape (N, 3), returning a new array."""
        points = np.asarray(points, dtype=np.float64)
        return (self.rotation @ points.T).T + self.translation

    def compose(self, other: "RigidTransform") -> "RigidTransform":
        """Return the transform that applies `other` first, then `self`."""
        return RigidTransform(
            rotation=self.rotation @ other.rotation,
            translation=self.rotation @ other.translation + self.translation,
        )

    def inverse(self) -> "RigidTransform":
        rotation_t = self.rotation.T
        return RigidTransform(rotation=rotation_t, translation=-rotation_t @ self.translation)

    def as_matrix(self) -> np.ndarray:
        """4x4 homogeneous matrix."""
        matrix = np.eye(4)
        matrix[:3, :3] = self.rotation
        matrix[:3, 3] = self.translation
        return matrix

    def to_json(self) -> str:
        return json.dumps({
            "rotation": np.asarray(self.rotation).tolist(),
            "translation": np.asarray(self.translation).tolist(),
        })

    @classmethod
    def from_json(cls, json_str: str) -> "RigidTransform":
        data = json.loads(json_str)
        rotation = np.asarray(data["rotation"], dtype=np.float64)
        translation = np.asarray(data["translation"], dtype=np.float64)
        if rotation.shape != (3, 3) or translation.shape != (3,):
            raise ValueError("Rigid transform JSON needs a 3x3 rotation and a 3-vector translation")
        return cls(rotation=rotation, translation=translation)


class AbsoluteOrientationSolver:
    """Least-squares rigid transform between row-paired point sets (Kabsch)."""

    MIN_POINTS = 3

    @staticmethod
    def solve(
        P: np.ndarray,
        Q: np.ndarray,
        correct_reflection: bool = True,
    ) -> RigidTransform:
        """Find R, t minimising sum ||P_i - (R @ Q_i + t)||^2.

        Args:
            P: Points of shape (K, 3) that Q is aligned onto.
            Q: Points of shape (K, 3); row i pairs with row i of P.
            correct_reflection: Flip the last singular direction when the
                SVD produces det(R) = -1, so R is always a proper rotation.
                When False the improper matrix is returned as is.

        Returns:
            RigidTransform mapping Q onto P.

        Raises:
            ValueError: If P and Q are not equally sized (K, 3) arrays.
            IllConditionedInputError: If fewer than 3 pairs are given or the
                points are collinear/coincident.
        """
        P = np.asarray(P, dtype=np.float64)
        Q = np.asarray(Q, dtype=np.float64)
        if P.shape != Q.shape or P.ndim != 2 or P.shape[1] != 3:
            raise ValueError(f"Expected two (K, 3) arrays of equal shape, got {P.shape} and {Q.shape}")
        if len(P) < AbsoluteOrientationSolver.MIN_POINTS:
            raise IllConditionedInputError(
                f"Need at least {AbsoluteOrientationSolver.MIN_POINTS} paired points, got {len(P)}"
            )

        P_mean = P.mean(axis=0)
        Q_mean = Q.mean(axis=0)

        # Cross-covariance; operand order fixes that Q is rotated onto P
        A = (Q - Q_mean).T @ (P - P_mean)
        if np.linalg.matrix_rank(A) < 2:
            raise IllConditionedInputError(
                "Paired points are collinear or coincident; rotation is undefined"
            )

        U, _, Vt = np.linalg.svd(A)
        R = Vt.T @ U.T

        if np.linalg.det(R) < 0:
            if correct_reflection:
                Vt[-1, :] *= -1
                R = Vt.T @ U.T
            else:
                logger.warning("Solved rotation is a reflection (det = -1)")

        t = P_mean - R @ Q_mean
        return RigidTransform(rotation=R, translation=t)
