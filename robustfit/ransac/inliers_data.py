import numpy as np


class InliersData:
    """ 一次估计得到的内点数据，只读 """

    def __init__(self, inliers, residuals, threshold, consensus):
        self.__inliers = np.array(inliers, dtype=bool)
        self.__inliers.setflags(write=False)
        self.__residuals = np.array(residuals, dtype=np.float64)
        self.__residuals.setflags(write=False)
        self.__threshold = float(threshold)
        self.__consensus = float(consensus)

    @property
    def inliers(self):
        """ 每个数据点是否为内点的 mask """
        return self.__inliers

    @property
    def residuals(self):
        """ 每个数据点对最终模型的残差 """
        return self.__residuals

    @property
    def threshold(self):
        """ 区分内点使用的阈值，中位数方法为由鲁棒标准差得到的有效阈值 """
        return self.__threshold

    @property
    def consensus(self):
        """ 最终模型的一致性得分，越大越好 """
        return self.__consensus

    @property
    def inlier_number(self):
        return int(np.count_nonzero(self.__inliers))

    def indices(self):
        """ 内点的序号 """
        return np.flatnonzero(self.__inliers)

    def __repr__(self):
        return "InliersData(inlier_number=%d, threshold=%g, consensus=%g)" % (
            self.inlier_number, self.__threshold, self.__consensus)
