import numpy as np
import pytest

from robustfit import (RobustEstimatorMethod, findAffineTransformation,
                       findEuclideanTransformation, findHomography, findLine,
                       findPinholeCamera)
from robustfit.estimator import EstimatorHomography
from robustfit.model import (EuclideanTransformation2D, PinholeCamera,
                             transformPoints)


def _correspondences(matrix, seed, point_number=150, outlier_number=40):
    """ 经 3x3 矩阵变换的点对，部分目标点偏移 5 到 50 像素成为外点 """
    rng = np.random.default_rng(seed)
    src = np.c_[rng.uniform(0.0, 640.0, point_number), rng.uniform(0.0, 480.0, point_number)]
    dst = transformPoints(matrix, src)
    is_inlier = np.ones(point_number, dtype=bool)
    outliers = rng.choice(point_number, outlier_number, replace=False)
    is_inlier[outliers] = False
    angles = rng.uniform(0.0, 2.0 * np.pi, outlier_number)
    distances = rng.uniform(5.0, 50.0, outlier_number)
    dst[outliers] += np.c_[np.cos(angles), np.sin(angles)] * distances[:, None]
    return src, dst, is_inlier


def test_affine_transformation():
    A = np.array([[0.9, -0.2, 15.0],
                  [0.1, 1.1, -7.0],
                  [0.0, 0.0, 1.0]])
    src, dst, is_inlier = _correspondences(A, seed=0)

    model, mask = findAffineTransformation(src, dst, seed=0)

    np.testing.assert_allclose(model.descriptor, A, atol=1e-6)
    np.testing.assert_array_equal(mask, is_inlier.astype(int))


@pytest.mark.parametrize("method", [RobustEstimatorMethod.RANSAC, RobustEstimatorMethod.LMEDS])
def test_homography(method):
    H = np.array([[1.1, 0.05, 10.0],
                  [0.02, 0.95, -5.0],
                  [1e-4, 2e-4, 1.0]])
    src, dst, is_inlier = _correspondences(H, seed=1)

    model, mask = findHomography(src, dst, method=method, seed=1)

    np.testing.assert_allclose(model.descriptor / model.descriptor[2, 2], H, atol=1e-6)
    np.testing.assert_array_equal(mask, is_inlier.astype(int))


def test_homography_weighted_nonminimal_fit():
    H = np.array([[0.8, 0.1, 30.0],
                  [-0.1, 1.2, 12.0],
                  [2e-4, -1e-4, 1.0]])
    src, dst, _ = _correspondences(H, seed=2, outlier_number=0)
    points = np.c_[src, dst]
    estimator = EstimatorHomography()

    weights = np.random.default_rng(2).uniform(0.1, 1.0, len(points))
    models = estimator.estimateModelNonminimal(points, list(range(len(points))), len(points), weights=weights)

    assert len(models) == 1
    np.testing.assert_allclose(models[0].descriptor / models[0].descriptor[2, 2], H, atol=1e-6)


def test_homography_orientation_check():
    estimator = EstimatorHomography()
    square = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
    # 源点与目标点顺序一致时通过，交换两个目标点后朝向不一致
    consistent = np.c_[square, square * 2.0 + 3.0]
    flipped = consistent.copy()
    flipped[[1, 3], 2:4] = flipped[[3, 1], 2:4]
    assert estimator.isValidSample(consistent, [0, 1, 2, 3])
    assert not estimator.isValidSample(flipped, [0, 2, 1, 3])


def test_euclidean_transformation():
    truth = EuclideanTransformation2D(0.3, [5.0, -2.0])
    src, dst, is_inlier = _correspondences(truth.descriptor, seed=3)

    model, mask = findEuclideanTransformation(src, dst, method=RobustEstimatorMethod.MSAC, seed=3)

    assert model.angle == pytest.approx(0.3, abs=1e-9)
    np.testing.assert_allclose(model.translation, [5.0, -2.0], atol=1e-6)
    np.testing.assert_array_equal(mask, is_inlier.astype(int))


def test_pinhole_camera():
    rng = np.random.default_rng(4)
    K = np.array([[800.0, 0.0, 320.0],
                  [0.0, 800.0, 240.0],
                  [0.0, 0.0, 1.0]])
    angle = 0.1
    R = np.array([[np.cos(angle), 0.0, np.sin(angle)],
                  [0.0, 1.0, 0.0],
                  [-np.sin(angle), 0.0, np.cos(angle)]])
    t = np.array([0.1, -0.2, 5.0])
    truth = PinholeCamera(K @ np.c_[R, t])

    object_points = rng.uniform(-1.0, 1.0, (120, 3))
    image_points = truth.project(object_points)
    is_inlier = np.ones(120, dtype=bool)
    outliers = rng.choice(120, 30, replace=False)
    is_inlier[outliers] = False
    image_points[outliers] += rng.uniform(10.0, 50.0, (30, 2)) * rng.choice([-1.0, 1.0], (30, 2))

    model, mask = findPinholeCamera(object_points, image_points, seed=4)

    np.testing.assert_allclose(model.normalized().descriptor, truth.normalized().descriptor, atol=1e-6)
    np.testing.assert_array_equal(mask, is_inlier.astype(int))
    np.testing.assert_allclose(model.project(object_points[is_inlier]), image_points[is_inlier], atol=1e-6)


def test_failed_estimation_returns_empty_mask():
    model, mask = findLine(np.ones((10, 2)))
    assert model is None
    np.testing.assert_array_equal(mask, np.zeros(10, dtype=int))
