import cv2
import numpy as np

from robustfit.model import AffineTransformation2D
from .solver_engine import SolverEngine


class SolverAffineThreePoint(SolverEngine):
    """ 三点法求解二维仿射变换

    对每个点对 (x, y) -> (x', y')：
        x' = a*x + b*y + tx
        y' = c*x + d*y + ty
    未知量 theta = [a, b, tx, c, d, ty]，每个点对提供两个方程。
    """

    def sampleSize(self):
        """ 模型参数估计所需的最小样本数 """
        return 3

    def estimateModel(self,
                      data,
                      sample,
                      sample_number,
                      weights=None):
        points, sample_weights = self._selectSample(data, sample, sample_number, weights)

        coefficients = np.zeros([2 * sample_number, 6])
        inhomogeneous = np.zeros([2 * sample_number, 1])
        for i in range(sample_number):
            x1, y1, x2, y2 = points[i, 0:4]
            weight = sample_weights[i]
            coefficients[2 * i] = np.array([x1, y1, 1.0, 0.0, 0.0, 0.0]) * weight
            inhomogeneous[2 * i, 0] = x2 * weight
            coefficients[2 * i + 1] = np.array([0.0, 0.0, 0.0, x1, y1, 1.0]) * weight
            inhomogeneous[2 * i + 1, 0] = y2 * weight

        # 最小样本为方阵，用 LU 分解求解；非最小样本用 SVD 求最小二乘解
        flags = cv2.DECOMP_LU if sample_number == self.sampleSize() else cv2.DECOMP_SVD
        solved, theta = cv2.solve(coefficients, inhomogeneous, flags=flags)
        if not solved or not np.all(np.isfinite(theta)):
            return []

        theta = theta.ravel()
        matrix = np.array([[theta[0], theta[1], theta[2]],
                           [theta[3], theta[4], theta[5]],
                           [0.0, 0.0, 1.0]])
        return [AffineTransformation2D(matrix)]
