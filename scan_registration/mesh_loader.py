"""
MeshLoader component for reading scans from mesh and point-cloud files.
"""

import os
import numpy as np
import trimesh


class MeshLoader:
    """Handles loading scan geometry (OFF, PLY, STL, OBJ, ...)."""

    @staticmethod
    def validate_path(path: str) -> None:
        """Raise FileNotFoundError with descriptive message if invalid.

        Args:
            path: Path to validate.

        Raises:
            FileNotFoundError: If the path does not exist.
        """
        if not os.path.exists(path):
            raise FileNotFoundError(f"Scan file not found: {path}")

    @staticmethod
    def load_mesh(path: str) -> tuple[np.ndarray, np.ndarray]:
        """Load a scan file, return (vertices, faces).

        Vertex order is kept as stored in the file. Point-cloud files
        produce an empty (0, 3) face array.

        Args:
            path: Path to the scan file.

        Returns:
            Tuple of (vertices, faces) as numpy arrays.
            vertices: float64 array of shape (N, 3)
            faces: int32 array of shape (M, 3)

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file cannot be read as geometry.
        """
        MeshLoader.validate_path(path)

        try:
            loaded = trimesh.load(path, process=False)
        except Exception as e:
            raise ValueError(f"Invalid scan format in file: {path}") from e

        if isinstance(loaded, trimesh.Scene):
            geometries = list(loaded.geometry.values())
            if not geometries:
                raise ValueError(f"No geometry in file: {path}")
            loaded = trimesh.util.concatenate(geometries)

        vertices = np.asarray(loaded.vertices, dtype=np.float64)
        if isinstance(loaded, trimesh.Trimesh):
            faces = np.asarray(loaded.faces, dtype=np.int32)
        else:
            faces = np.zeros((0, 3), dtype=np.int32)

        if len(vertices) == 0:
            raise ValueError(f"No vertices in file: {path}")

        return vertices, faces

    @staticmethod
    def load_vertices(path: str) -> np.ndarray:
        """Load only the (N, 3) float64 vertex matrix of a scan file."""
        vertices, _ = MeshLoader.load_mesh(path)
        return vertices
