"""
Point-to-point ICP: single refinement rounds, stopping policies and a
convenience loop that drives them.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import numpy as np

from .correspondence import CorrespondenceBuilder, DEFAULT_MAX_SQ_DISTANCE
from .orientation import AbsoluteOrientationSolver, RigidTransform

logger = logging.getLogger(__name__)

# Residual the first round is compared against.
INITIAL_PREVIOUS_RESIDUAL = 1000.0


class StopPolicy(Enum):
    """When the refinement loop gives up improving the residual."""
    # stop once the residual got worse while already below tolerance
    PLATEAU_THEN_SMALL = "plateau"
    # stop as soon as the residual gets worse or drops below tolerance
    SMALL_OR_WORSENING = "worsening"

    @property
    def default_tolerance(self) -> float:
        if self is StopPolicy.PLATEAU_THEN_SMALL:
            return 1e-4
        return 1.8e-5


@dataclass
class ICPConfig:
    """Registration configuration."""
    stride: int = 1
    max_iterations: int = 250
    policy: StopPolicy = StopPolicy.PLATEAU_THEN_SMALL
    tolerance: Optional[float] = None  # None -> policy default
    max_sq_distance: float = DEFAULT_MAX_SQ_DISTANCE
    correct_reflection: bool = True

    def __post_init__(self):
        if isinstance(self.policy, str):
            self.policy = StopPolicy(self.policy)
        if self.stride < 1:
            raise ValueError(f"stride must be >= 1, got {self.stride}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if self.tolerance is not None and self.tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
        if self.max_sq_distance <= 0:
            raise ValueError(f"max_sq_distance must be positive, got {self.max_sq_distance}")

    @property
    def effective_tolerance(self) -> float:
        if self.tolerance is None:
            return self.policy.default_tolerance
        return self.tolerance


@dataclass
class RegistrationResult:
    """Outcome of a full registration loop."""
    aligned: np.ndarray          # moving cloud after the last round
    transform: RigidTransform    # cumulative moving -> reference transform
    residual: float              # residual reported by the last round
    iterations: int
    converged: bool              # stopped by the policy, not the budget
    residuals: List[float] = field(default_factory=list)
    elapsed: float = 0.0         # seconds


def icp_step(
    reference: np.ndarray,
    moving: np.ndarray,
    stride: int = 1,
    max_sq_distance: float = DEFAULT_MAX_SQ_DISTANCE,
    correct_reflection: bool = True,
) -> tuple[RigidTransform, float]:
    """Run one ICP round.

    Every `stride`-th reference point is matched against an index over
    `moving`, and the rigid transform bringing the matched moving points
    onto the reference points is solved for. The caller advances the moving
    cloud with `transform.apply(moving)`.

    Args:
        reference: Stationary cloud of shape (N, 3), sampled for queries.
        moving: Cloud of shape (M, 3) to be brought onto `reference`.
        stride: Sampling step over reference rows.
        max_sq_distance: Correspondence acceptance threshold.
        correct_reflection: Passed through to the orientation solver.

    Returns:
        Tuple of (transform, residual), residual being the mean squared
        distance of the accepted pairs before the transform is applied.

    Raises:
        EmptyIndexError, NoCorrespondenceError, IllConditionedInputError.
    """
    pairs = CorrespondenceBuilder.build(reference, moving, stride, max_sq_distance)
    transform = AbsoluteOrientationSolver.solve(
        pairs.source, pairs.target, correct_reflection=correct_reflection
    )
    return transform, pairs.residual


def should_stop(
    residual: float,
    previous_residual: float,
    tolerance: float,
    policy: StopPolicy = StopPolicy.PLATEAU_THEN_SMALL,
) -> bool:
    """Evaluate the stopping policy for one round."""
    worse = residual > previous_residual
    small = residual < tolerance
    if policy is StopPolicy.PLATEAU_THEN_SMALL:
        return worse and small
    return worse or small


def register(
    reference: np.ndarray,
    moving: np.ndarray,
    config: Optional[ICPConfig] = None,
) -> RegistrationResult:
    """Iterate ICP rounds until the stopping policy or the budget ends it.

    Args:
        reference: Stationary cloud of shape (N, 3).
        moving: Cloud of shape (M, 3); it is not modified, the aligned copy
            is returned in the result.
        config: Loop parameters; defaults to ICPConfig().

    Returns:
        RegistrationResult with the aligned cloud and cumulative transform.
    """
    if config is None:
        config = ICPConfig()
    tolerance = config.effective_tolerance

    reference = np.asarray(reference, dtype=np.float64)
    moving = np.array(moving, dtype=np.float64)
    total = RigidTransform.identity()
    residuals = []
    previous = INITIAL_PREVIOUS_RESIDUAL
    residual = previous
    converged = False

    t_start = time.perf_counter()
    for i in range(config.max_iterations):
        step, residual = icp_step(
            reference,
            moving,
            stride=config.stride,
            max_sq_distance=config.max_sq_distance,
            correct_reflection=config.correct_reflection,
        )
        moving = step.apply(moving)
        total = step.compose(total)
        residuals.append(residual)
        logger.debug("Round %d: residual %.6e", i + 1, residual)

        if should_stop(residual, previous, tolerance, config.policy):
            converged = True
            break
        previous = residual
    elapsed = time.perf_counter() - t_start

    logger.info("End distance: %.6e", residual)
    logger.info("Iterations: %d", len(residuals))
    logger.info("Processing Time: %.3f s", elapsed)

    return RegistrationResult(
        aligned=moving,
        transform=total,
        residual=residual,
        iterations=len(residuals),
        converged=converged,
        residuals=residuals,
        elapsed=elapsed,
    )
