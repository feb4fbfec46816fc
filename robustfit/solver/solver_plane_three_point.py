import numpy as np

from robustfit.model import Plane
from .solver_engine import SolverEngine


class SolverPlaneThreePoint(SolverEngine):
    """ 三点法求解三维平面，多于三点时使用加权总体最小二乘 """

    RANK_TOLERANCE = 1e-12

    def sampleSize(self):
        """ 模型参数估计所需的最小样本数 """
        return 3

    def estimateModel(self,
                      data,
                      sample,
                      sample_number,
                      weights=None):
        points, sample_weights = self._selectSample(data, sample, sample_number, weights)
        points = toInhomogeneous3D(points)

        total_weight = np.sum(sample_weights)
        if total_weight <= 0.0:
            return []
        centroid = np.sum(points * sample_weights[:, None], axis=0) / total_weight
        centered = (points - centroid) * np.sqrt(sample_weights)[:, None]

        _, singular_values, vt = np.linalg.svd(centered, full_matrices=True)
        # 共线的点只有一个非零奇异值
        if len(singular_values) < 2 or singular_values[1] <= self.RANK_TOLERANCE * max(1.0, singular_values[0]):
            return []
        normal = vt[-1]
        return [Plane(np.r_[normal, -normal @ centroid])]


def toInhomogeneous3D(points):
    """ (N, 4) 齐次点转换为 (N, 3)，(N, 3) 的点保持不变 """
    points = np.atleast_2d(points)
    if points.shape[1] == 4:
        return points[:, 0:3] / points[:, 3:4]
    return points
