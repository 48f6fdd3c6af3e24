"""
Exporter component for saving registered scans.
"""

import os
from typing import Optional

import numpy as np
import trimesh


class Exporter:
    """Handles writing scans and registration results to mesh files."""

    @staticmethod
    def export_mesh(vertices: np.ndarray, faces: Optional[np.ndarray], path: str) -> None:
        """Export a scan; the format follows the file extension.

        Args:
            vertices: Vertex array of shape (N, 3).
            faces: Face array of shape (M, 3), or None/empty for a point cloud.
            path: Output file path.
        """
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        vertices = np.asarray(vertices, dtype=np.float64)
        if faces is None or len(faces) == 0:
            geometry = trimesh.PointCloud(vertices)
        else:
            geometry = trimesh.Trimesh(
                vertices=vertices, faces=np.asarray(faces), process=False
            )
        geometry.export(path)

    @staticmethod
    def export_combined(
        reference: np.ndarray,
        aligned: np.ndarray,
        path: str,
        reference_faces: Optional[np.ndarray] = None,
        aligned_faces: Optional[np.ndarray] = None,
    ) -> None:
        """Export both scans of a registration as one file.

        Reference vertices come first; aligned face indices are offset by the
        reference vertex count.
        """
        vertices = np.vstack([reference, aligned])
        faces = None
        if reference_faces is not None and aligned_faces is not None:
            faces = np.vstack([
                np.asarray(reference_faces),
                np.asarray(aligned_faces) + len(reference),
            ])
        Exporter.export_mesh(vertices, faces, path)
