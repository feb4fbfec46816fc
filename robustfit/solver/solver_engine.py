import numpy as np


class SolverEngine:
    """ 模型参数求解器基类 """

    def __init__(self):
        pass

    def sampleSize(self):
        """ 模型参数估计所需的最小样本数 """
        return 0

    def estimateModel(self,
                      data,
                      sample,
                      sample_number,
                      weights=None):
        """ 从给定的样本点，加权拟合模型参数

        参数
        ----------
        data : numpy
            输入的数据点集
        sample : list
            用于估计模型的样本点序号列表，为 None 时使用前 sample_number 个点
        sample_number : int
            样本点的数目
        weights : numpy
            数据点集中点的对应权重

        返回
        ----------
        list(Model)
            通过样本估计的模型列表，样本退化时为空
        """
        raise NotImplementedError

    def _selectSample(self, data, sample, sample_number, weights):
        """ 取出样本点及其权重 """
        if sample is None:
            sample = list(range(sample_number))
        sample = list(sample)[0:sample_number]
        points = np.asarray(data, dtype=np.float64)[sample]
        if weights is None:
            sample_weights = np.ones(len(sample))
        else:
            sample_weights = np.asarray(weights, dtype=np.float64)[sample]
        return points, sample_weights
