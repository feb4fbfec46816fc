import cv2
import numpy as np
from numpy import linalg

from robustfit.model import ProjectiveTransformation2D
from .solver_engine import SolverEngine


class SolverHomographyFourPoint(SolverEngine):
    """ 四点法求解单应矩阵模型参数 """

    def sampleSize(self):
        """ 模型参数估计所需的最小样本数 """
        return 4

    def estimateModel(self,
                      points,
                      sample,
                      sample_number,
                      weights=None):
        """ 从给定的样本点，加权拟合模型参数

        参数
        ----------
        points : numpy
            输入的数据点集，每行为 [x1, y1, x2, y2]
        sample : list
            用于估计模型的样本点序号列表
        sample_number : int
            样本点的数目
        weights : numpy
            数据点集中点的对应权重

        返回
        ----------
        list(Model)
            通过样本估计的模型列表
        """
        selected, sample_weights = self._selectSample(points, sample, sample_number, weights)

        # 最小样本直接由 OpenCV 求解四点对应的单应矩阵
        if sample_number == self.sampleSize() and weights is None:
            H, _ = cv2.findHomography(selected[:, 0:2].copy(), selected[:, 2:4].copy(), 0)
            if H is None or not np.all(np.isfinite(H)) or abs(linalg.det(H)) <= np.finfo(float).eps:
                return []
            return [ProjectiveTransformation2D(H)]

        coefficients = np.zeros([2 * sample_number, 8])
        inhomogeneous = np.zeros(2 * sample_number)

        row_idx = 0
        for i in range(sample_number):
            weight = sample_weights[i]

            # 取点的坐标
            x1, y1, x2, y2 = selected[i, 0:4]

            # 参数矩阵设置
            coefficients[row_idx] = np.array(
                [-x1, -y1, -1, 0, 0, 0, x2 * x1, x2 * y1]) * weight
            inhomogeneous[row_idx] = -weight * x2
            row_idx += 1

            coefficients[row_idx] = np.array(
                [0, 0, 0, -x1, -y1, -1, y2 * x1, y2 * y1]) * weight
            inhomogeneous[row_idx] = -weight * y2
            row_idx += 1

        # 参数矩阵 coefficients 和 Y inhomogeneous
        # 利用 QR 分解求解 x
        Q, R = linalg.qr(coefficients)
        h = np.dot(linalg.pinv(R), np.dot(Q.T, inhomogeneous)).tolist()
        h.append(1.0)

        H = np.array(h).reshape((3, 3))
        if not np.all(np.isfinite(H)):
            return []
        return [ProjectiveTransformation2D(H)]
