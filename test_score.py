import numpy as np
import pytest

from robustfit.estimator import EstimatorLine
from robustfit.model import Line2D
from robustfit.utils.score import (LMedSScoringFunction, MSACScoringFunction,
                                   PROMedSScoringFunction,
                                   RansacScoringFunction, Score,
                                   weightedMedian)

# 到直线 y = 0 的距离分别为 0, 0.5, 1, 2, 3
POINTS = np.array([[0.0, 0.0],
                   [1.0, 0.5],
                   [2.0, -1.0],
                   [3.0, 2.0],
                   [4.0, -3.0]])
HORIZONTAL_LINE = Line2D([0.0, 1.0, 0.0])


def test_ransac_score_counts_inliers():
    scoring = RansacScoringFunction()
    scoring.initialize(1.0, len(POINTS))
    score, inliers, residuals = scoring.getScore(POINTS, HORIZONTAL_LINE, EstimatorLine())

    np.testing.assert_allclose(residuals, [0.0, 0.5, 1.0, 2.0, 3.0])
    assert list(inliers) == [True, True, True, False, False]
    assert score.inlier_number == 3
    assert score.value == 3.0
    assert score.threshold == 1.0


def test_msac_score_is_negative_truncated_loss():
    scoring = MSACScoringFunction()
    scoring.initialize(1.0, len(POINTS))
    score, inliers, _ = scoring.getScore(POINTS, HORIZONTAL_LINE, EstimatorLine())

    assert score.value == pytest.approx(-(0.0 + 0.25 + 1.0 + 1.0 + 1.0))
    assert score.inlier_number == 3
    assert list(inliers) == [True, True, True, False, False]


def test_lmeds_score_uses_median_and_robust_threshold():
    scoring = LMedSScoringFunction()
    scoring.initialize(1e-9, len(POINTS), sample_size=2, inlier_factor=1.5)
    score, inliers, _ = scoring.getScore(POINTS, HORIZONTAL_LINE, EstimatorLine())

    # 残差平方的中位数为 1
    assert score.value == pytest.approx(-1.0)
    sigma = 1.4826 * (1.0 + 5.0 / 3.0)
    assert score.threshold == pytest.approx(1.5 * sigma)
    assert score.inlier_number == 5
    assert np.all(inliers)


def test_lmeds_threshold_never_below_stop_threshold():
    points = np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 0.0], [3.0, 5.0]])
    scoring = LMedSScoringFunction()
    scoring.initialize(0.25, len(points), sample_size=2)
    score, inliers, _ = scoring.getScore(points, HORIZONTAL_LINE, EstimatorLine())

    assert score.value == 0.0
    assert score.threshold == 0.25
    assert list(inliers) == [True, True, True, False]


def test_lmeds_without_redundancy_uses_unit_correction():
    points = POINTS[0:2]
    scoring = LMedSScoringFunction()
    scoring.initialize(1e-9, 2, sample_size=2, inlier_factor=1.0)
    score, _, _ = scoring.getScore(points, HORIZONTAL_LINE, EstimatorLine())

    median = np.median([0.0, 0.25])
    assert score.threshold == pytest.approx(1.4826 * np.sqrt(median))


def test_promeds_weighted_median_downweights_low_quality_points():
    scoring = PROMedSScoringFunction()
    scoring.initialize(1e-9, len(POINTS), sample_size=2)
    scoring.setWeights([1.0, 1.0, 1.0, 0.1, 0.1])
    score, _, _ = scoring.getScore(POINTS, HORIZONTAL_LINE, EstimatorLine())

    # 累计权重为 [1, 2, 3, 3.1, 3.2]，首次达到 1.6 的是第二小的残差平方 0.25
    assert score.value == pytest.approx(-0.25)


def test_weighted_median_with_equal_weights():
    assert weightedMedian(np.array([3.0, 1.0, 2.0]), np.ones(3)) == 2.0
    assert weightedMedian(np.array([3.0, 1.0, 2.0]), np.array([0.1, 0.1, 5.0])) == 2.0
    assert weightedMedian(np.array([3.0, 1.0, 2.0]), np.array([5.0, 0.1, 0.1])) == 3.0


def test_decreasing_threshold_never_increases_inlier_count():
    rng = np.random.default_rng(0)
    points = rng.normal(size=(200, 2))
    model = Line2D([1.0, -1.0, 0.2])
    estimator = EstimatorLine()

    previous = len(points)
    for threshold in [3.0, 1.0, 0.5, 0.1, 0.01]:
        for scoring in (RansacScoringFunction(), MSACScoringFunction()):
            scoring.initialize(threshold, len(points))
            score, _, _ = scoring.getScore(points, model, estimator)
            assert score.inlier_number <= previous
        previous = score.inlier_number


def test_non_finite_residuals_invalidate_candidate():
    scoring = RansacScoringFunction()
    scoring.initialize(1.0, len(POINTS))
    with np.errstate(divide="ignore", invalid="ignore"):
        result = scoring.getScore(POINTS, Line2D([0.0, 0.0, 1.0]), EstimatorLine())
    assert result == (None, None, None)


def test_score_comparison_uses_value():
    better, worse = Score(), Score()
    better.value, worse.value = 5.0, 3.0
    assert better > worse
    assert worse < better
    assert not better > better
    assert Score().value == float("-inf")


def test_single_point_residual():
    estimator = EstimatorLine()
    assert estimator.residual([1.0, 0.5], HORIZONTAL_LINE) == pytest.approx(0.5)
    assert estimator.residual([4.0, -3.0, 1.0], HORIZONTAL_LINE) == pytest.approx(3.0)
