import numpy as np
import pytest

o3d = pytest.importorskip("open3d")

from scan_registration.visualizer import Visualizer, REFERENCE_COLOR, ALIGNED_COLOR


def test_build_geometries_colors_each_scan():
    reference = np.random.default_rng(0).normal(size=(20, 3))
    aligned = reference + 0.1

    geometries = Visualizer.build_geometries(reference, aligned)

    assert len(geometries) == 2
    np.testing.assert_allclose(np.asarray(geometries[0].points), reference)
    np.testing.assert_allclose(np.asarray(geometries[1].points), aligned)
    np.testing.assert_allclose(np.asarray(geometries[0].colors), np.tile(REFERENCE_COLOR, (20, 1)))
    np.testing.assert_allclose(np.asarray(geometries[1].colors), np.tile(ALIGNED_COLOR, (20, 1)))
