import numpy as np

from robustfit.model import Conic
from .solver_engine import SolverEngine


class SolverConicFivePoint(SolverEngine):
    """ 五点法求解二次曲线 """

    # 奇异值之比小于该值时认为样本退化
    RANK_TOLERANCE = 1e-12

    def sampleSize(self):
        """ 模型参数估计所需的最小样本数 """
        return 5

    def estimateModel(self,
                      data,
                      sample,
                      sample_number,
                      weights=None):
        """ 每个点提供一个线性约束 p^T C p = 0，
            系数向量 [a, b, c, d, e, f] 为设计矩阵的零空间（最小奇异值方向） """
        points, sample_weights = self._selectSample(data, sample, sample_number, weights)
        points = normalizedHomogeneous2D(points)

        x, y, w = points[:, 0], points[:, 1], points[:, 2]
        design = np.c_[x * x, x * y, y * y, x * w, y * w, w * w] * sample_weights[:, None]

        _, singular_values, vt = np.linalg.svd(design, full_matrices=True)
        # 最小样本时需要 5 个独立约束
        if len(singular_values) < 5 or singular_values[4] <= self.RANK_TOLERANCE * singular_values[0]:
            return []
        return [Conic.fromParameters(vt[-1]).normalized()]


def normalizedHomogeneous2D(points):
    """ 将 (N, 2) 或 (N, 3) 的点转换为单位范数的齐次坐标 """
    points = np.atleast_2d(np.asarray(points, dtype=np.float64))
    if points.shape[1] == 2:
        points = np.c_[points, np.ones(points.shape[0])]
    return points / np.linalg.norm(points, axis=1, keepdims=True)
