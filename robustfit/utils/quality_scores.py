import numpy as np


class QualityScores:
    """ 数据点的质量得分表，得分越高表示对应点越可靠

    PROSAC 和 PROMedS 根据得分的降序进行渐进采样，
    PROMedS 和结果的精化过程还会使用由得分得到的权重。
    """

    # 得分最低的点在权重中保留的比例，避免权重为 0
    WEIGHT_FLOOR = 0.1

    def __init__(self, scores):
        scores = np.array(scores, dtype=np.float64)
        if scores.ndim != 1:
            raise ValueError("quality scores must be a 1-D sequence, got shape %s" % (scores.shape,))
        if not np.all(np.isfinite(scores)):
            raise ValueError("quality scores must be finite")
        self.scores = scores
        self.scores.setflags(write=False)
        self.__sorted_indices = None
        self.__weights = None

    def __len__(self):
        return self.scores.shape[0]

    def sortedIndices(self):
        """ 按得分降序排列的点序号，得分相同时保持原有顺序 """
        if self.__sorted_indices is None:
            self.__sorted_indices = np.argsort(-self.scores, kind="stable")
        return self.__sorted_indices

    def weights(self):
        """ 由质量得分得到的 (0, 1] 区间内的权重

        得分全部为正时直接按最大得分归一化，
        否则线性映射到 [WEIGHT_FLOOR, 1]。

        返回
        ----------
        numpy
            每个点的权重
        """
        if self.__weights is not None:
            return self.__weights

        max_score = np.max(self.scores)
        min_score = np.min(self.scores)
        if min_score > 0.0:
            weights = self.scores / max_score
        elif max_score - min_score <= 0.0:
            weights = np.ones_like(self.scores)
        else:
            weights = self.WEIGHT_FLOOR + (1.0 - self.WEIGHT_FLOOR) * \
                (self.scores - min_score) / (max_score - min_score)
        self.__weights = weights
        return weights
