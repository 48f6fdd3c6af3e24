"""
Visualizer component for displaying registration results.
"""

import numpy as np
import open3d as o3d

REFERENCE_COLOR = [0, 0, 1]
ALIGNED_COLOR = [1, 0, 0]


def points_to_pcd(points: np.ndarray, color) -> o3d.geometry.PointCloud:
    pcd = o3d.geometry.PointCloud()
    pcd.points = o3d.utility.Vector3dVector(np.asarray(points, dtype=np.float64))
    pcd.paint_uniform_color(color)
    return pcd


class Visualizer:
    """Handles 3D visualization of two registered scans."""

    @staticmethod
    def build_geometries(reference: np.ndarray, aligned: np.ndarray) -> list:
        """Reference scan in blue, aligned scan in red."""
        return [
            points_to_pcd(reference, REFERENCE_COLOR),
            points_to_pcd(aligned, ALIGNED_COLOR),
        ]

    @staticmethod
    def show(reference: np.ndarray, aligned: np.ndarray, title: str = "Registration") -> None:
        """Display interactive 3D visualization."""
        o3d.visualization.draw_geometries(
            Visualizer.build_geometries(reference, aligned), window_name=title
        )
