import math as m

import numpy as np


# 1.4826 * MAD 是高斯分布下标准差的鲁棒估计
STD_CONSTANT = 1.4826


class Score:
    """ 候选模型的一致性评分，value 越大模型越好 """

    def __init__(self):
        self.inlier_number = 0       # 内点数目
        self.value = float("-inf")   # 得分
        self.threshold = 0.0         # 区分内点的有效阈值

    def __lt__(self, v):
        return self.value < v.value

    def __gt__(self, v):
        return self.value > v.value

    def __eq__(self, v):
        return self.value == v.value

    def __repr__(self):
        return "Score(value=%g, inlier_number=%d, threshold=%g)" % (
            self.value, self.inlier_number, self.threshold)


def weightedMedian(values, weights):
    """ 加权中位数：累计权重首次达到总权重一半时对应的值 """
    order = np.argsort(values, kind="stable")
    cumulative = np.cumsum(weights[order])
    position = int(np.searchsorted(cumulative, 0.5 * cumulative[-1]))
    return float(values[order[min(position, len(order) - 1)]])


class ScoringFunction:
    """ 评分函数基类 """

    def __init__(self):
        self.threshold = 0.0
        self.point_number = 0

    def initialize(self, threshold, point_number):
        self.threshold = threshold
        self.point_number = point_number

    def computeResiduals(self, points, model, estimator):
        """ 计算所有点对模型的残差，存在非有限值时返回 None """
        residuals = np.asarray(estimator.residuals(points, model), dtype=np.float64)
        if residuals.shape != (self.point_number,) or not np.all(np.isfinite(residuals)):
            return None
        return residuals

    def getScore(self, points, model, estimator):
        """ 求解模型对应的评估得分

        参数
        ----------
        points : numpy
            输入的数据点集
        model : Model
            当前模型参数
        estimator : Estimator
            模型的估计器

        返回
        ----------
        Score, numpy, numpy
            当前模型参数的评估得分，内点 mask，每个点的残差；
            残差无法计算时三者均为 None
        """
        raise NotImplementedError


class RansacScoringFunction(ScoringFunction):
    """ RANSAC / PROSAC 评分：残差不超过阈值的点数 """

    def getScore(self, points, model, estimator):
        residuals = self.computeResiduals(points, model, estimator)
        if residuals is None:
            return None, None, None

        inliers = residuals <= self.threshold
        score = Score()
        score.inlier_number = int(np.count_nonzero(inliers))
        score.value = float(score.inlier_number)
        score.threshold = self.threshold
        return score, inliers, residuals


class MSACScoringFunction(ScoringFunction):
    """ MSAC 评分：截断二次损失之和的相反数 """

    def __init__(self):
        super().__init__()
        self.squared_truncated_threshold = 0.0

    def initialize(self, threshold, point_number):
        super().initialize(threshold, point_number)
        self.squared_truncated_threshold = threshold ** 2

    def getScore(self, points, model, estimator):
        residuals = self.computeResiduals(points, model, estimator)
        if residuals is None:
            return None, None, None

        # 残差超过阈值的点贡献固定的损失 threshold^2
        losses = np.minimum(residuals ** 2, self.squared_truncated_threshold)
        inliers = residuals <= self.threshold
        score = Score()
        score.inlier_number = int(np.count_nonzero(inliers))
        score.value = -float(np.sum(losses))
        score.threshold = self.threshold
        return score, inliers, residuals


class LMedSScoringFunction(ScoringFunction):
    """ LMedS 评分：残差平方中位数的相反数

    内点由中位数得到的鲁棒标准差决定：
        sigma = 1.4826 * (1 + 5 / (N - m)) * sqrt(median)
        threshold = max(inlier_factor * sigma, stop_threshold)
    """

    def __init__(self):
        super().__init__()
        self.sample_size = 0
        self.inlier_factor = 1.5

    def initialize(self, threshold, point_number, sample_size=0, inlier_factor=1.5):
        """ threshold 为停止阈值，也作为有效内点阈值的下限 """
        super().initialize(threshold, point_number)
        self.sample_size = sample_size
        self.inlier_factor = inlier_factor

    def median(self, squared_residuals):
        return float(np.median(squared_residuals))

    def getScore(self, points, model, estimator):
        residuals = self.computeResiduals(points, model, estimator)
        if residuals is None:
            return None, None, None

        median = self.median(residuals ** 2)
        redundancy = self.point_number - self.sample_size
        correction = 1.0 + 5.0 / redundancy if redundancy > 0 else 1.0
        standard_deviation = STD_CONSTANT * correction * m.sqrt(median)
        threshold = max(self.inlier_factor * standard_deviation, self.threshold)

        inliers = residuals <= threshold
        score = Score()
        score.inlier_number = int(np.count_nonzero(inliers))
        score.value = -median
        score.threshold = threshold
        return score, inliers, residuals


class PROMedSScoringFunction(LMedSScoringFunction):
    """ PROMedS 评分：按质量权重计算的加权中位数，低质量点对中位数的影响更小 """

    def __init__(self):
        super().__init__()
        self.weights = None

    def setWeights(self, weights):
        self.weights = np.asarray(weights, dtype=np.float64)

    def median(self, squared_residuals):
        if self.weights is None:
            return super().median(squared_residuals)
        return weightedMedian(squared_residuals, self.weights)
