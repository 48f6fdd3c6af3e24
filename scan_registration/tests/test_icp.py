"""
Tests for the ICP round primitive, stopping policies and registration loop.
"""

import numpy as np
import pytest

from scan_registration.errors import NoCorrespondenceError
from scan_registration.icp import (
    ICPConfig,
    StopPolicy,
    icp_step,
    register,
    should_stop,
)
from scan_registration.orientation import RigidTransform
from scan_registration.transforms import rotation_matrix


@pytest.fixture
def scan_pair():
    """Reference cloud and a copy displaced by a small known rigid motion."""
    rng = np.random.default_rng(0)
    reference = rng.uniform(-0.5, 0.5, size=(400, 3))
    motion = RigidTransform(rotation_matrix(0.01, -0.008, 0.012), np.array([0.005, -0.004, 0.003]))
    return reference, motion.apply(reference), motion


def test_single_step_reduces_misalignment(scan_pair):
    reference, moving, _ = scan_pair
    before = np.linalg.norm(moving - reference, axis=1).mean()

    transform, residual = icp_step(reference, moving)
    after = np.linalg.norm(transform.apply(moving) - reference, axis=1).mean()

    assert residual > 0
    assert after < before


def test_residual_decreases_over_first_rounds(scan_pair):
    reference, moving, _ = scan_pair
    residuals = []
    for _ in range(6):
        transform, residual = icp_step(reference, moving)
        residuals.append(residual)
        moving = transform.apply(moving)

    for previous, current in zip(residuals, residuals[1:]):
        assert current <= previous + 1e-12
    assert residuals[-1] < residuals[0]


def test_register_recovers_known_motion(scan_pair):
    reference, moving, motion = scan_pair
    config = ICPConfig(max_iterations=100)

    result = register(reference, moving, config)

    assert 1 <= result.iterations <= config.max_iterations
    assert len(result.residuals) == result.iterations
    np.testing.assert_allclose(result.aligned, reference, atol=1e-6)
    np.testing.assert_allclose(result.transform.rotation, motion.inverse().rotation, atol=1e-6)
    np.testing.assert_allclose(result.transform.apply(moving), result.aligned, atol=1e-9)


def test_register_does_not_modify_inputs(scan_pair):
    reference, moving, _ = scan_pair
    reference_copy, moving_copy = reference.copy(), moving.copy()

    register(reference, moving, ICPConfig(max_iterations=5))

    np.testing.assert_array_equal(reference, reference_copy)
    np.testing.assert_array_equal(moving, moving_copy)


def test_one_more_round_after_convergence_changes_little(scan_pair):
    reference, moving, _ = scan_pair
    config = ICPConfig(max_iterations=100, policy=StopPolicy.SMALL_OR_WORSENING)

    result = register(reference, moving, config)
    assert result.converged
    assert result.residual < config.effective_tolerance

    _, residual = icp_step(reference, result.aligned)
    assert abs(residual - result.residual) < config.effective_tolerance


def test_register_stops_at_iteration_budget(scan_pair):
    reference, moving, _ = scan_pair
    result = register(reference, moving, ICPConfig(max_iterations=2))

    assert result.iterations <= 2


def test_stride_subsamples_reference(scan_pair):
    reference, moving, _ = scan_pair
    result = register(reference, moving, ICPConfig(stride=4, max_iterations=100))

    np.testing.assert_allclose(result.aligned, reference, atol=1e-6)


def test_register_propagates_missing_correspondences():
    reference = np.zeros((10, 3))
    moving = np.full((10, 3), 5.0)
    with pytest.raises(NoCorrespondenceError):
        register(reference, moving)


@pytest.mark.parametrize("residual, previous, expected", [
    (5e-5, 4e-5, True),    # worse and small
    (5e-5, 6e-5, False),   # improving
    (2e-4, 1e-4, False),   # worse but above tolerance
])
def test_plateau_then_small_policy(residual, previous, expected):
    assert should_stop(residual, previous, 1e-4, StopPolicy.PLATEAU_THEN_SMALL) is expected


@pytest.mark.parametrize("residual, previous, expected", [
    (2e-4, 1e-4, True),    # worse
    (1e-5, 2e-5, True),    # small
    (1e-3, 2e-3, False),   # improving, above tolerance
])
def test_small_or_worsening_policy(residual, previous, expected):
    assert should_stop(residual, previous, 1.8e-5, StopPolicy.SMALL_OR_WORSENING) is expected


def test_config_defaults_and_validation():
    config = ICPConfig()
    assert config.effective_tolerance == pytest.approx(1e-4)
    assert ICPConfig(policy="worsening").effective_tolerance == pytest.approx(1.8e-5)
    assert ICPConfig(tolerance=1e-3).effective_tolerance == pytest.approx(1e-3)

    with pytest.raises(ValueError):
        ICPConfig(stride=0)
    with pytest.raises(ValueError):
        ICPConfig(max_iterations=0)
    with pytest.raises(ValueError):
        ICPConfig(tolerance=-1.0)
    with pytest.raises(ValueError):
        ICPConfig(max_sq_distance=0.0)


def test_step_residual_is_mean_squared_distance():
    reference = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])
    moving = reference + [0.03, 0.0, 0.0]

    _, residual = icp_step(reference, moving)

    assert residual == pytest.approx(0.03 ** 2)
