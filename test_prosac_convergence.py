import numpy as np

from robustfit import RobustEstimator, RobustEstimatorMethod
from robustfit.estimator import EstimatorPlane


def _iterations(method, points, quality, seed):
    robust = RobustEstimator(EstimatorPlane(), method, points=points, quality_scores=quality)
    robust.setSeed(seed)
    robust.setRefineResult(False)
    robust.estimate()
    return robust.statistics.iteration_number


def _planeWithOutliers(seed, inlier_number=60, outlier_number=90):
    """ 60% 外点的平面数据，质量得分与点到平面的距离负相关 """
    rng = np.random.default_rng(seed)
    point_number = inlier_number + outlier_number
    points = rng.uniform(-10.0, 10.0, (point_number, 3))
    points[:inlier_number, 2] = 0.5 * points[:inlier_number, 0] - points[:inlier_number, 1] + 2.0
    points[inlier_number:, 2] += rng.uniform(1.0, 10.0, outlier_number)
    distances = np.abs(0.5 * points[:, 0] - points[:, 1] - points[:, 2] + 2.0) / np.sqrt(2.25)
    quality = 1.0 / (1.0 + distances + rng.uniform(0.0, 0.05, point_number))
    order = rng.permutation(point_number)
    return points[order], quality[order]


def test_progressive_methods_converge_faster():
    prosac, ransac, promeds, lmeds = [], [], [], []
    for seed in range(10):
        points, quality = _planeWithOutliers(seed)
        prosac.append(_iterations(RobustEstimatorMethod.PROSAC, points, quality, seed))
        ransac.append(_iterations(RobustEstimatorMethod.RANSAC, points, quality, seed))
        promeds.append(_iterations(RobustEstimatorMethod.PROMEDS, points, quality, seed))
        lmeds.append(_iterations(RobustEstimatorMethod.LMEDS, points, quality, seed))

    assert np.mean(prosac) < np.mean(ransac)
    assert np.mean(promeds) <= np.mean(lmeds)
