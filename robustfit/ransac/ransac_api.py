import numpy as np

from robustfit.estimator import (EstimatorAffine, EstimatorConic,
                                 EstimatorEuclidean, EstimatorHomography,
                                 EstimatorLine, EstimatorPinholeCamera,
                                 EstimatorPlane)
from robustfit.exceptions import RobustEstimatorError
from robustfit.utils import get_logger

from .method import RobustEstimatorMethod
from .robust_estimator import RobustEstimator

logger = get_logger()


def __transformInliersToMask(inliers_data, point_number):
    """ 转换内点数据为 cv2 match 所需的 mask

    参数
    --------
    inliers_data : InliersData
        内点数据，估计失败时为 None
    point_number : int
        点集的数目

    返回
    --------
    numpy
        包含 0 1 的 mask
    """
    if inliers_data is None:
        return np.zeros(point_number, dtype=int)
    return inliers_data.inliers.astype(int)


def create(estimator, method=RobustEstimatorMethod.PROMEDS, points=None, quality_scores=None, listener=None):
    """ 创建鲁棒估计器，默认使用 PROMedS

    参数
    --------
    estimator : Estimator
        模型的估计器
    method : RobustEstimatorMethod
        鲁棒估计方法
    points : numpy 可选
        数据点集
    quality_scores : array_like 可选
        质量得分，PROSAC 和 PROMedS 必须提供
    listener : RobustEstimatorListener 可选
        估计过程的监听器

    返回
    --------
    RobustEstimator
        配置好的鲁棒估计器
    """
    return RobustEstimator(estimator, method, points=points, quality_scores=quality_scores, listener=listener)


def __estimate(estimator, points, method, threshold, conf, max_iters, quality_scores, seed, refine):
    """ find* 系列函数的公共过程，估计失败时返回 (None, 全零 mask) """
    robust_estimator = create(estimator, method, points=points, quality_scores=quality_scores)
    if threshold is not None:
        if robust_estimator.getMethod().isMedianBased():
            robust_estimator.setStopThreshold(threshold)
        else:
            robust_estimator.setThreshold(threshold)
    robust_estimator.setConfidence(conf)
    robust_estimator.setMaxIterations(max_iters)
    robust_estimator.setRefineResult(refine)
    robust_estimator.setSeed(seed)

    point_number = robust_estimator.getPoints().shape[0]
    try:
        model = robust_estimator.estimate()
    except RobustEstimatorError as e:
        logger.warning("%s estimation failed: %s", type(estimator).__name__, e)
        return None, __transformInliersToMask(None, point_number)

    logger.debug("Number of iterations = %d", robust_estimator.statistics.iteration_number)
    return model, __transformInliersToMask(robust_estimator.getInliersData(), point_number)


def findLine(points, method=RobustEstimatorMethod.RANSAC, threshold=None, conf=0.99, max_iters=5000,
             quality_scores=None, seed=None, refine=True):
    """ 二维直线求解

    参数
    --------
    points : numpy
        (N, 2) 的点或 (N, 3) 的齐次点
    method : RobustEstimatorMethod
        鲁棒估计方法
    threshold : float
        决定内点和外点的阈值；LMedS / PROMedS 中为停止阈值；None 时使用默认值
    conf : float
        置信参数
    max_iters : int
        最大迭代次数
    quality_scores : array_like
        质量得分，PROSAC 和 PROMedS 必须提供
    seed : int
        随机数种子
    refine : bool
        是否精化结果

    返回
    --------
    Line2D, numpy
        直线模型，标注内点和外点的mask
    """
    return __estimate(EstimatorLine(), points, method, threshold, conf, max_iters, quality_scores, seed, refine)


def findConic(points, method=RobustEstimatorMethod.RANSAC, threshold=None, conf=0.99, max_iters=5000,
              quality_scores=None, seed=None, refine=True):
    """ 二次曲线求解，参数同 findLine，返回 Conic 和 mask """
    return __estimate(EstimatorConic(), points, method, threshold, conf, max_iters, quality_scores, seed, refine)


def findPlane(points, method=RobustEstimatorMethod.RANSAC, threshold=None, conf=0.99, max_iters=5000,
              quality_scores=None, seed=None, refine=True):
    """ 三维平面求解，points 为 (N, 3) 的点或 (N, 4) 的齐次点，返回 Plane 和 mask """
    return __estimate(EstimatorPlane(), points, method, threshold, conf, max_iters, quality_scores, seed, refine)


""" 用于特征点匹配，变换矩阵求解的函数 """
def findAffineTransformation(src_points, dst_points, method=RobustEstimatorMethod.RANSAC, threshold=1.0,
                             conf=0.99, max_iters=5000, quality_scores=None, seed=None, refine=True):
    """ 二维仿射变换求解

    参数
    --------
    src_points : numpy
        源图像特征点集合
    dst_points : numpy
        目标图像特征点集合
    threshold : float
        决定内点和外点的阈值（像素）

    返回
    --------
    AffineTransformation2D, numpy
        仿射变换，标注内点和外点的mask
    """
    # 合并points到同个矩阵：
    # src在前两列，dst在后两列
    points = np.c_[src_points, dst_points]
    return __estimate(EstimatorAffine(), points, method, threshold, conf, max_iters, quality_scores, seed, refine)


def findHomography(src_points, dst_points, method=RobustEstimatorMethod.RANSAC, threshold=1.0,
                   conf=0.99, max_iters=5000, quality_scores=None, seed=None, refine=True):
    """ 单应矩阵求解

    参数
    --------
    src_points : numpy
        源图像特征点集合
    dst_points : numpy
        目标图像特征点集合
    method : RobustEstimatorMethod
        鲁棒估计方法
    threshold : float
        决定内点和外点的阈值（像素）
    conf : float
        置信参数
    max_iters : int
        最大迭代次数

    返回
    --------
    ProjectiveTransformation2D, numpy
        单应矩阵，标注内点和外点的mask
    """
    points = np.c_[src_points, dst_points]
    return __estimate(EstimatorHomography(), points, method, threshold, conf, max_iters, quality_scores, seed, refine)


def findEuclideanTransformation(src_points, dst_points, method=RobustEstimatorMethod.RANSAC, threshold=1.0,
                                conf=0.99, max_iters=5000, quality_scores=None, seed=None, refine=True):
    """ 二维欧氏变换（旋转 + 平移）求解，返回 EuclideanTransformation2D 和 mask """
    points = np.c_[src_points, dst_points]
    return __estimate(EstimatorEuclidean(), points, method, threshold, conf, max_iters, quality_scores, seed, refine)


def findPinholeCamera(object_points, image_points, method=RobustEstimatorMethod.RANSAC, threshold=1.0,
                      conf=0.99, max_iters=5000, quality_scores=None, seed=None, refine=True):
    """ 针孔相机求解

    参数
    --------
    object_points : numpy
        (N, 3) 的三维点
    image_points : numpy
        (N, 2) 的像点

    返回
    --------
    PinholeCamera, numpy
        3x4 投影矩阵，标注内点和外点的mask
    """
    points = np.c_[object_points, image_points]
    return __estimate(EstimatorPinholeCamera(), points, method, threshold, conf, max_iters, quality_scores, seed,
                      refine)
