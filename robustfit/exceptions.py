class RobustFitError(Exception):
    """ robustfit 所有异常的基类 """
    pass


class LockedError(RobustFitError):
    """ 估计器正在运行 estimate() 时调用了修改方法或再次调用 estimate() """

    def __init__(self, message="estimator is locked while an estimation is in progress"):
        super().__init__(message)


class NotReadyError(RobustFitError):
    """ 数据不足或不一致时调用 estimate() """

    def __init__(self, message="estimator is not ready, data is missing or inconsistent"):
        super().__init__(message)


class RobustEstimatorError(RobustFitError):
    """ 鲁棒估计失败：无法得到非退化样本，或者没有任何有效的候选模型 """
    pass
