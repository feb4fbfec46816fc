import numpy as np

from robustfit.model import Line2D
from .solver_engine import SolverEngine


class SolverLineTwoPoint(SolverEngine):
    """ 两点法求解二维直线，多于两点时使用加权总体最小二乘 """

    def sampleSize(self):
        """ 模型参数估计所需的最小样本数 """
        return 2

    def estimateModel(self,
                      data,
                      sample,
                      sample_number,
                      weights=None):
        points, sample_weights = self._selectSample(data, sample, sample_number, weights)
        points = toInhomogeneous2D(points)

        if sample_number == self.sampleSize():
            # 两点齐次坐标的叉积即为过两点的直线
            line = np.cross(np.r_[points[0], 1.0], np.r_[points[1], 1.0])
            if np.linalg.norm(line[0:2]) <= np.finfo(float).eps * max(1.0, np.abs(points).max()):
                return []
            return [Line2D(line).normalized()]

        # 加权质心和去中心化后的协方差，最小奇异值对应的方向为法向量
        total_weight = np.sum(sample_weights)
        if total_weight <= 0.0:
            return []
        centroid = np.sum(points * sample_weights[:, None], axis=0) / total_weight
        centered = (points - centroid) * np.sqrt(sample_weights)[:, None]
        _, singular_values, vt = np.linalg.svd(centered, full_matrices=False)
        if singular_values[0] <= 0.0:
            return []
        normal = vt[-1]
        return [Line2D(np.r_[normal, -normal @ centroid])]


def toInhomogeneous2D(points):
    """ (N, 3) 齐次点转换为 (N, 2)，(N, 2) 的点保持不变 """
    points = np.atleast_2d(points)
    if points.shape[1] == 3:
        return points[:, 0:2] / points[:, 2:3]
    return points
