import math as m

import numpy as np

from robustfit.model import ProjectiveTransformation2D
from robustfit.solver import SolverHomographyFourPoint
from .estimator import Estimator, hypotRows, transferErrors


class EstimatorHomography(Estimator):
    """ 单应矩阵估计器，数据每行为 [x1, y1, x2, y2] """

    def __init__(self, minimalSolver=SolverHomographyFourPoint, nonMinimalSolver=SolverHomographyFourPoint):
        super().__init__(minimalSolver, nonMinimalSolver)

    def dataDimensions(self):
        return (4,)

    def defaultThreshold(self):
        return 1.0

    def defaultStopThreshold(self):
        return 1e-3

    def estimateModelNonminimal(self, data, sample, sample_number, weights=None):
        """ 根据数据点集的非最小采样估计模型

        参数
        ----------
        data : numpy
            输入的数据点集
        sample : list
            用于估计模型的样本点序号列表
        sample_number : int
            样本点数目
        weights : numpy
            数据点集中点的对应权重

        返回
        ----------
        list(Model)
            通过样本估计的模型列表
        """
        if sample_number < self.nonMinimalSampleSize():
            return []

        # 在应用最小二乘模型拟合时，对点坐标进行归一化以实现数值稳定性
        normalized_points, normalizing_transform_source, normalizing_transform_destination = self.__normalizePoints(
            data, sample, sample_number)
        if normalized_points is None:
            return []

        sample_weights = None
        if weights is not None:
            sample_weights = np.asarray(weights, dtype=np.float64)[list(sample)[0:sample_number]]
        models = self.non_minimal_solver.estimateModel(normalized_points,
                                                       None,
                                                       sample_number,
                                                       weights=sample_weights)
        # 估计单应矩阵的反归一化
        for model in models:
            model.descriptor = np.dot(np.linalg.inv(normalizing_transform_destination), model.descriptor)
            model.descriptor = np.dot(model.descriptor, normalizing_transform_source)
        return models

    def refinementResiduals(self, data, model):
        return transferErrors(model.descriptor, data)

    def residuals(self, data, model):
        """ 源点转换后与目标点的距离，即为点到模型的距离 """
        return hypotRows(self.refinementResiduals(data, model))

    def isValidSample(self, data, sample):
        """ 在计算模型参数之前判断所选样本是否退化

        参数
        ----------
        data : numpy
            输入的数据点集
        sample : list
            用于估计模型的样本点序号列表

        返回
        ----------
        bool
            样本是否有效
        """
        # 检查朝向约束，取前四个样本点进行交叉验证
        a = data[sample[0]]
        b = data[sample[1]]
        c = data[sample[2]]
        d = data[sample[3]]

        p = self.__cross_product(a[0:2], b[0:2], 1)
        q = self.__cross_product(a[2:4], b[2:4], 1)
        if (p[0] * c[0] + p[1] * c[1] + p[2]) * (q[0] * c[2] + q[1] * c[3] + q[2]) < 0:
            return False
        if (p[0] * d[0] + p[1] * d[1] + p[2]) * (q[0] * d[2] + q[1] * d[3] + q[2]) < 0:
            return False

        p = self.__cross_product(c[0:2], d[0:2], 1)
        q = self.__cross_product(c[2:4], d[2:4], 1)
        if (p[0] * a[0] + p[1] * a[1] + p[2]) * (q[0] * a[2] + q[1] * a[3] + q[2]) < 0:
            return False
        if (p[0] * b[0] + p[1] * b[1] + p[2]) * (q[0] * b[2] + q[1] * b[3] + q[2]) < 0:
            return False

        return True

    def isValidModel(self,
                     model,
                     data=None,
                     inliers=None,
                     minimal_sample=None,
                     threshold=None):
        return super().isValidModel(model) and abs(np.linalg.det(model.descriptor)) > np.finfo(float).eps

    def parameterNumber(self):
        return 9

    def modelToParameters(self, model):
        return model.normalized().descriptor.ravel().copy()

    def parametersToModel(self, parameters):
        return ProjectiveTransformation2D(np.asarray(parameters).reshape((3, 3)))

    def __cross_product(self, vector1, vector2, st):
        """ 计算两个向量的 cross-product """
        result = np.zeros(3)
        result[0] = vector1[st] - vector2[st]
        result[1] = vector2[0] - vector1[0]
        result[2] = vector1[0] * vector2[st] - vector1[st] * vector2[0]
        return result

    def __normalizePoints(self, data, sample, sample_number):
        ''' 规范化点集函数 '''
        points = np.asarray(data, dtype=np.float64)[list(sample)[0:sample_number], 0:4]

        # 计算质点坐标 均值
        mass_point_src = np.mean(points[:, 0:2], axis=0)  # 第一张图片质点
        mass_point_dst = np.mean(points[:, 2:4], axis=0)  # 第二张图片质点

        # 求解图像点离质点的平均距离
        average_distance_src = np.mean(hypotRows(points[:, 0:2] - mass_point_src))
        average_distance_dst = np.mean(hypotRows(points[:, 2:4] - mass_point_dst))
        if average_distance_src <= 0.0 or average_distance_dst <= 0.0:
            return None, None, None

        # 计算 sqrt（2）/ 平均距离 的比率
        ratio_src = m.sqrt(2) / average_distance_src
        ratio_dst = m.sqrt(2) / average_distance_dst

        # 计算归一化的坐标
        normalized_points_ = np.c_[(points[:, 0:2] - mass_point_src) * ratio_src,
                                   (points[:, 2:4] - mass_point_dst) * ratio_dst]

        # 创建归一化转换
        normalizing_transform_source_ = np.array([[ratio_src, 0, -ratio_src * mass_point_src[0]],
                                                  [0, ratio_src, -ratio_src * mass_point_src[1]],
                                                  [0, 0, 1]])

        normalizing_transform_destination_ = np.array([[ratio_dst, 0, -ratio_dst * mass_point_dst[0]],
                                                       [0, ratio_dst, -ratio_dst * mass_point_dst[1]],
                                                       [0, 0, 1]])
        # 返回归一化坐标，源图像转换矩阵，目标图像转换矩阵
        return normalized_points_, normalizing_transform_source_, normalizing_transform_destination_
