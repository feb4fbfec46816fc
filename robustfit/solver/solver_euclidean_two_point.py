import math as m

import numpy as np

from robustfit.model import EuclideanTransformation2D
from .solver_engine import SolverEngine


class SolverEuclideanTwoPoint(SolverEngine):
    """ 两点法求解二维欧氏变换（旋转角和平移） """

    def sampleSize(self):
        """ 模型参数估计所需的最小样本数 """
        return 2

    def estimateModel(self,
                      data,
                      sample,
                      sample_number,
                      weights=None):
        """ 加权质心对齐后，旋转角由互协方差矩阵闭式求得：
                angle = atan2(H01 - H10, H00 + H11)
            其中 H = sum(w * p * q^T)，p、q 为去中心化后的源点和目标点 """
        points, sample_weights = self._selectSample(data, sample, sample_number, weights)
        total_weight = np.sum(sample_weights)
        if total_weight <= 0.0:
            return []

        source = points[:, 0:2]
        destination = points[:, 2:4]
        source_centroid = np.sum(source * sample_weights[:, None], axis=0) / total_weight
        destination_centroid = np.sum(destination * sample_weights[:, None], axis=0) / total_weight
        p = source - source_centroid
        q = destination - destination_centroid

        H = (p * sample_weights[:, None]).T @ q
        sin_part = H[0, 1] - H[1, 0]
        cos_part = H[0, 0] + H[1, 1]
        # 源点全部重合时旋转角无法确定
        if m.hypot(sin_part, cos_part) <= np.finfo(float).eps:
            return []

        angle = m.atan2(sin_part, cos_part)
        rotation = np.array([[m.cos(angle), -m.sin(angle)],
                             [m.sin(angle), m.cos(angle)]])
        translation = destination_centroid - rotation @ source_centroid
        return [EuclideanTransformation2D(angle, translation)]
