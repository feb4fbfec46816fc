import numpy as np


class Estimator:
    """ 模型估计器基类

    鲁棒估计引擎只通过该接口访问具体的几何模型：
    由最小样本拟合候选模型、计算点到模型的残差、
    以及在结果精化时把模型与参数向量相互转换。
    """

    def __init__(self, minimalSolver=None, nonMinimalSolver=None):
        # 用于估计最小样本模型的估计器
        self.minimal_solver = minimalSolver() if minimalSolver is not None else None
        # 用于估计非最小样本模型的估计器
        self.non_minimal_solver = nonMinimalSolver() if nonMinimalSolver is not None else self.minimal_solver

    def isWeightingApplicable(self):
        """ 当应用非最小拟合时决定点是否可以加权的标志 """
        return True

    def sampleSize(self):
        """ 估计模型所需的最小样本的大小 """
        return self.minimal_solver.sampleSize()

    def nonMinimalSampleSize(self):
        """ 估计模型所需的非最小样本的大小 """
        return self.non_minimal_solver.sampleSize()

    def dataDimensions(self):
        """ 每个数据点允许的列数 """
        raise NotImplementedError

    def defaultThreshold(self):
        """ RANSAC、MSAC 和 PROSAC 默认使用的内点阈值 """
        return 1e-3

    def defaultStopThreshold(self):
        """ LMedS 和 PROMedS 的停止阈值，同时作为有效内点阈值的下限 """
        return 1e-9

    def estimateModel(self,
                      data,
                      sample):
        """ 给定一组数据点，估计最小样本模型

        参数
        ----------
        data : numpy
            输入的数据点集
        sample : list
            用于估计模型的样本点序号列表

        返回
        ----------
        list(Model)
            通过样本估计的模型列表
        """
        return self.minimal_solver.estimateModel(data,
                                                 sample,
                                                 self.sampleSize())

    def estimateModelNonminimal(self,
                                data,
                                sample,
                                sample_number,
                                weights=None):
        """ 根据数据点集的非最小采样估计模型
            在加权最小二乘的情况下，权重可以输入到函数中

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
        return self.non_minimal_solver.estimateModel(data,
                                                     sample,
                                                     sample_number,
                                                     weights=weights)

    def residual(self, point, model):
        """ 给定模型和数据点，计算误差 """
        return float(self.residuals(np.atleast_2d(point), model)[0])

    def residuals(self, data, model):
        """ 给定模型，计算所有数据点的非负误差，形状为 (N,) """
        raise NotImplementedError

    def refinementResiduals(self, data, model):
        """ 精化时最小化的残差，形状为 (N,) 或 (N, k)

        默认与 residuals 相同；几何意义上带符号或可分量的残差
        应在子类中覆盖，使其在零点处可导。
        """
        return self.residuals(data, model)

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
        return True

    def isValidModel(self,
                     model,
                     data=None,
                     inliers=None,
                     minimal_sample=None,
                     threshold=None):
        """ 检查模型是否有效，可以是模型结构的几何检查或其他验证

        返回
        ----------
        bool
            模型是否有效
        """
        return model is not None and np.all(np.isfinite(model.descriptor))

    def parameterNumber(self):
        """ 精化时参数向量的长度 """
        raise NotImplementedError

    def modelToParameters(self, model):
        """ 模型转换为精化使用的参数向量 """
        raise NotImplementedError

    def parametersToModel(self, parameters):
        """ 参数向量转换为模型 """
        raise NotImplementedError


def triangleArea(p1, p2, p3):
    """ 三点构成三角形面积的两倍 |(p2 - p1) x (p3 - p1)| """
    u = p2 - p1
    v = p3 - p1
    return float(abs(u[0] * v[1] - u[1] * v[0]))


def transferErrors(matrix, data):
    """ 源点经 3x3 矩阵变换后与目标点的差，形状为 (N, 2) """
    data = np.atleast_2d(data)
    source = np.c_[data[:, 0:2], np.ones(data.shape[0])]
    projected = source @ matrix.T
    with np.errstate(divide="ignore", invalid="ignore"):
        return projected[:, 0:2] / projected[:, 2:3] - data[:, 2:4]


def hypotRows(differences):
    """ 每行向量的欧氏范数 """
    return np.sqrt(np.sum(differences ** 2, axis=1))
