import math as m

import numpy as np

from robustfit.model import PinholeCamera
from .solver_engine import SolverEngine


class SolverPinholeCameraDLT(SolverEngine):
    """ DLT 法由 3D-2D 点对应求解针孔相机投影矩阵 """

    RANK_TOLERANCE = 1e-10

    def sampleSize(self):
        """ 模型参数估计所需的最小样本数 """
        return 6

    def estimateModel(self,
                      data,
                      sample,
                      sample_number,
                      weights=None):
        """ 每个对应 [X, Y, Z, u, v] 提供两个关于 P 的 12 个元素的线性方程，
            归一化坐标后取设计矩阵最小奇异值对应的右奇异向量 """
        points, sample_weights = self._selectSample(data, sample, sample_number, weights)

        world, world_transform = normalizingTransform(points[:, 0:3])
        image, image_transform = normalizingTransform(points[:, 3:5])
        if world_transform is None or image_transform is None:
            return []

        design = np.zeros([2 * sample_number, 12])
        for i in range(sample_number):
            X = np.r_[world[i], 1.0]
            u, v = image[i]
            weight = sample_weights[i]
            design[2 * i] = np.r_[X, np.zeros(4), -u * X] * weight
            design[2 * i + 1] = np.r_[np.zeros(4), X, -v * X] * weight

        _, singular_values, vt = np.linalg.svd(design, full_matrices=True)
        # 共面或退化的点使零空间维数大于 1
        if len(singular_values) < 11 or singular_values[10] <= self.RANK_TOLERANCE * singular_values[0]:
            return []

        normalized_P = vt[-1].reshape((3, 4))
        P = np.linalg.inv(image_transform) @ normalized_P @ world_transform
        if not np.all(np.isfinite(P)):
            return []
        return [PinholeCamera(P).normalized()]


def normalizingTransform(points):
    """ 平移到质心并缩放使平均距离为 sqrt(维数) 的相似变换

    返回
    ----------
    numpy, numpy
        归一化后的点和 (d+1)x(d+1) 的归一化矩阵，点全部重合时矩阵为 None
    """
    dimension = points.shape[1]
    centroid = np.mean(points, axis=0)
    average_distance = np.mean(np.linalg.norm(points - centroid, axis=1))
    if average_distance <= np.finfo(float).eps:
        return points, None
    scale = m.sqrt(dimension) / average_distance

    transform = np.eye(dimension + 1)
    transform[0:dimension, 0:dimension] *= scale
    transform[0:dimension, dimension] = -scale * centroid
    return (points - centroid) * scale, transform
