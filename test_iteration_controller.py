import math

import numpy as np

from robustfit.ransac import IterationController, ProsacIterationController


def test_standard_iteration_number():
    controller = IterationController(0.99, 5000, 2, 100)
    expected = math.ceil(math.log(0.01) / math.log(1.0 - 0.5 ** 2))
    assert expected == 17
    assert controller.getIterationNumber(0.5) == expected


def test_iteration_number_bounds():
    controller = IterationController(0.99, 10, 4, 100)
    # 内点比例为 1 时被截断到 1 - 1e-12，只需一次迭代
    assert controller.getIterationNumber(1.0) == 1
    assert controller.getIterationNumber(0.0) == 10
    assert controller.getIterationNumber(0.1) == 10


def test_full_confidence_uses_max_iterations():
    controller = IterationController(1.0, 123, 2, 100)
    assert controller.getIterationNumber(0.9) == 123


def test_initial_bound():
    assert IterationController(0.99, 5000, 2, 100).max_iteration == 5000
    assert IterationController(0.99, 5000, 2, 100, initial_inlier_ratio=0.5).max_iteration == 17


def test_bound_only_shrinks():
    controller = IterationController(0.99, 5000, 2, 100)
    inliers = np.zeros(100, dtype=bool)

    inliers[0:50] = True
    assert controller.update(inliers) == 17

    worse = np.zeros(100, dtype=bool)
    worse[0:10] = True
    assert controller.update(worse) == 17
    assert controller.shouldStop(17)
    assert not controller.shouldStop(16)


def test_prosac_minimum_inlier_numbers():
    controller = ProsacIterationController(0.99, 5000, 3, np.arange(100))
    minimum = controller.minimum_inlier_numbers
    # 只包含样本本身的前缀不能通过检验
    assert np.all(minimum[0:3] > 100)
    assert np.all(np.diff(minimum[3:]) >= 0)
    assert 3 < minimum[99] <= 20


def test_prosac_bound_uses_best_prefix():
    sorted_indices = np.random.default_rng(0).permutation(100)
    inliers = np.zeros(100, dtype=bool)
    inliers[sorted_indices[0:30]] = True

    standard = IterationController(0.99, 5000, 3, 100)
    prosac = ProsacIterationController(0.99, 5000, 3, sorted_indices)

    assert standard.update(inliers) == math.ceil(math.log(0.01) / math.log(1.0 - 0.3 ** 3))
    # 前 30 个点全部为内点
    assert prosac.update(inliers) == 1


def test_prosac_falls_back_to_standard_rule():
    inliers = np.zeros(100, dtype=bool)
    inliers[[10, 50, 90]] = True

    standard = IterationController(0.99, 5000, 3, 100)
    prosac = ProsacIterationController(0.99, 5000, 3, np.arange(100))
    assert prosac.update(inliers) == standard.update(inliers)
