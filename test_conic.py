import numpy as np

from robustfit import RobustEstimator, RobustEstimatorMethod, findConic
from robustfit.estimator import EstimatorConic
from robustfit.model import Conic
from robustfit.solver import SolverConicFivePoint


def _circle(point_number, center=(2.0, -1.0), radius=3.0, seed=0):
    rng = np.random.default_rng(seed)
    angles = rng.uniform(0.0, 2.0 * np.pi, point_number)
    x = center[0] + radius * np.cos(angles)
    y = center[1] + radius * np.sin(angles)
    return np.c_[x, y, np.ones(point_number)]


def test_circle_with_outliers():
    original = _circle(600)
    points = original.copy()

    # 20% 的点加入高斯扰动成为外点
    rng = np.random.default_rng(1)
    outliers = rng.choice(len(points), len(points) // 5, replace=False)
    points[outliers, 0:2] += rng.normal(0.0, 1.0, (len(outliers), 2))

    robust = RobustEstimator(EstimatorConic(), RobustEstimatorMethod.RANSAC, points=points)
    robust.setThreshold(1e-7)
    robust.setConfidence(0.99)
    robust.setMaxIterations(5000)
    robust.setSeed(0)

    conic = robust.estimate()

    for point in original:
        assert conic.isLocus(point, threshold=1e-6)
    assert robust.getInliersData().inlier_number >= len(points) - len(outliers)


def test_circle_conic_matrix():
    # 圆心 (2, -1)，半径 3：x^2 + y^2 - 4x + 2y - 4 = 0
    conic = findConic(_circle(100)[:, 0:2], seed=0)[0]
    expected = Conic.fromParameters([1.0, 0.0, 1.0, -4.0, 2.0, -4.0]).normalized().descriptor
    descriptor = conic.normalized().descriptor
    assert np.allclose(descriptor, expected, atol=1e-6) or np.allclose(descriptor, -expected, atol=1e-6)


def test_promeds_circle_with_quality_scores():
    original = _circle(200, seed=2)
    points = original.copy()
    rng = np.random.default_rng(3)
    outliers = rng.choice(len(points), 80, replace=False)
    points[outliers, 0:2] += rng.uniform(0.5, 2.0, (len(outliers), 2))
    quality = np.ones(len(points))
    quality[outliers] = rng.uniform(0.0, 0.5, len(outliers))

    conic, mask = findConic(points, method=RobustEstimatorMethod.PROMEDS, quality_scores=quality, seed=3)

    assert all(conic.isLocus(point, threshold=1e-6) for point in original)
    expected = np.ones(len(points), dtype=int)
    expected[outliers] = 0
    np.testing.assert_array_equal(mask, expected)


def test_collinear_points_are_degenerate():
    points = np.c_[np.arange(5.0), 2.0 * np.arange(5.0), np.ones(5)]
    assert SolverConicFivePoint().estimateModel(points, list(range(5)), 5) == []


def test_conic_parameters_and_locus():
    conic = Conic.fromParameters([1.0, 0.0, 1.0, 0.0, 0.0, -1.0])
    np.testing.assert_allclose(conic.parameters(), [1.0, 0.0, 1.0, 0.0, 0.0, -1.0])
    assert conic.isLocus([1.0, 0.0])
    assert conic.isLocus([0.0, 2.0, 2.0])
    assert not conic.isLocus([2.0, 0.0])
