import math as m
import sys

import numpy as np
from scipy.stats import binom

# 内点比例的上限，避免 log(1 - w^m) 在 w = 1 时无定义
MAX_INLIER_RATIO = 1.0 - 1e-12


class IterationController:
    """ 根据当前最佳模型的内点比例估计所需的迭代次数

    N = ceil(log(1 - confidence) / log(1 - w^m))，并限制在 [1, max_iteration_number]。
    迭代上界在一次估计中只会减小。
    """

    def __init__(self, confidence, max_iteration_number, sample_size, point_number, initial_inlier_ratio=None):
        """ 初始化迭代控制器

        参数
        ----------
        confidence : float
            结果的置信率，位于 (0, 1]
        max_iteration_number : int
            最大迭代次数
        sample_size : int
            最小样本大小 m
        point_number : int
            数据点数目 N
        initial_inlier_ratio : float 可选
            初始假设的内点比例，LMedS 和 PROMedS 使用 0.5；为 None 时从最大迭代次数开始
        """
        self.confidence = confidence
        self.max_iteration_number = max_iteration_number
        self.sample_size = sample_size
        self.point_number = point_number
        self.max_iteration = max_iteration_number
        if initial_inlier_ratio is not None:
            self.max_iteration = self.getIterationNumber(initial_inlier_ratio)

    def getIterationNumber(self, inlier_ratio):
        """ 计算给定内点比例下期望的迭代数目 """
        inlier_ratio = min(max(inlier_ratio, 0.0), MAX_INLIER_RATIO)
        probability = inlier_ratio ** self.sample_size
        if self.confidence >= 1.0 or probability < sys.float_info.epsilon:
            return self.max_iteration_number
        log1 = m.log(1.0 - self.confidence)
        log2 = m.log1p(-probability)
        iterations = m.ceil(log1 / log2)
        return int(min(max(iterations, 1), self.max_iteration_number))

    def update(self, inliers):
        """ 找到更好的模型后更新迭代上界

        参数
        ----------
        inliers : numpy
            最佳模型的内点 mask

        返回
        ----------
        int
            更新后的迭代上界
        """
        inlier_number = int(np.count_nonzero(inliers))
        iterations = self.getIterationNumber(float(inlier_number) / self.point_number)
        self.max_iteration = min(self.max_iteration, iterations)
        return self.max_iteration

    def shouldStop(self, iteration_number):
        return iteration_number >= self.max_iteration


class ProsacIterationController(IterationController):
    """ PROSAC 的停止条件

    对每个前缀 U_n（质量最高的 n 个点），当其中的内点数 I_n 通过非随机性检验
    I_n >= I_min(n) 时，按 I_n / n 计算迭代次数 k_n，迭代上界取所有通过前缀的最小值。
    没有前缀通过检验时使用标准规则。
    """

    def __init__(self, confidence, max_iteration_number, sample_size, sorted_indices,
                 initial_inlier_ratio=None, beta=0.05, non_randomness_probability=0.05):
        self.sorted_indices = np.asarray(sorted_indices, dtype=np.int64)
        self.beta = beta                                              # 外点偶然落入阈值内的概率
        self.non_randomness_probability = non_randomness_probability  # ψ
        super().__init__(confidence,
                         max_iteration_number,
                         sample_size,
                         len(self.sorted_indices),
                         initial_inlier_ratio)
        self.prefix_lengths = np.arange(1, self.point_number + 1)
        self.minimum_inlier_numbers = self.__minimumInlierNumbers()

    def __minimumInlierNumbers(self):
        """ 每个前缀长度 n 的 I_min(n)

        前缀中除样本外的 n - m 个点若均为外点，偶然成为内点的个数服从 Binom(n - m, beta)，
        I_min(n) 为使该个数达到 I_min(n) - m 的概率不超过 ψ 的最小值。
        """
        # n <= m 的前缀只包含样本本身，永远不能通过检验
        minimum = np.full(self.point_number, np.iinfo(np.int64).max, dtype=np.int64)
        trials = self.prefix_lengths[self.sample_size:] - self.sample_size
        if len(trials) > 0:
            quantiles = binom.ppf(1.0 - self.non_randomness_probability, trials, self.beta)
            minimum[self.sample_size:] = self.sample_size + quantiles.astype(np.int64) + 1
        return minimum

    def update(self, inliers):
        sorted_inliers = np.asarray(inliers, dtype=bool)[self.sorted_indices]
        prefix_inliers = np.cumsum(sorted_inliers)
        passing = prefix_inliers >= self.minimum_inlier_numbers

        if not np.any(passing):
            return super().update(inliers)

        iterations = min(self.getIterationNumber(float(prefix_inliers[i]) / self.prefix_lengths[i])
                         for i in np.flatnonzero(passing))
        self.max_iteration = min(self.max_iteration, iterations)
        return self.max_iteration
