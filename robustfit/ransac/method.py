from enum import Enum


class RobustEstimatorMethod(Enum):
    """ 鲁棒估计方法，决定使用的采样器和评分函数

    RANSAC、LMEDS、MSAC 使用均匀采样；
    PROSAC、PROMEDS 按质量得分渐进采样，需要提供质量得分。
    """
    RANSAC = "ransac"
    LMEDS = "lmeds"
    MSAC = "msac"
    PROSAC = "prosac"
    PROMEDS = "promeds"

    def isProgressive(self):
        """ 是否按质量得分渐进采样 """
        return self in (RobustEstimatorMethod.PROSAC, RobustEstimatorMethod.PROMEDS)

    def isMedianBased(self):
        """ 是否以残差中位数评分，此类方法不使用内点阈值 """
        return self in (RobustEstimatorMethod.LMEDS, RobustEstimatorMethod.PROMEDS)
