"""
Pairwise Scan Registration Module

This module aligns two partially overlapping 3-D scans with point-to-point
Iterative Closest Point: nearest-neighbour correspondences, closed-form SVD
rigid alignment, and a refinement loop with selectable stopping policies.
"""

from .errors import (
    RegistrationError,
    EmptyIndexError,
    NoCorrespondenceError,
    IllConditionedInputError,
)
from .spatial_index import SpatialIndex
from .correspondence import CorrespondenceBuilder, CorrespondenceSet
from .orientation import AbsoluteOrientationSolver, RigidTransform
from .icp import ICPConfig, RegistrationResult, StopPolicy, icp_step, register, should_stop
from .transforms import add_noise, apply_transform, rotate, rotation_matrix
from .mesh_loader import MeshLoader
from .exporter import Exporter

__all__ = [
    "RegistrationError",
    "EmptyIndexError",
    "NoCorrespondenceError",
    "IllConditionedInputError",
    "SpatialIndex",
    "CorrespondenceBuilder",
    "CorrespondenceSet",
    "AbsoluteOrientationSolver",
    "RigidTransform",
    "ICPConfig",
    "RegistrationResult",
    "StopPolicy",
    "icp_step",
    "register",
    "should_stop",
    "add_noise",
    "apply_transform",
    "rotate",
    "rotation_matrix",
    "MeshLoader",
    "Exporter",
]
