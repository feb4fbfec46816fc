import math as m
from enum import Enum

import numpy as np

from robustfit.exceptions import LockedError, NotReadyError, RobustEstimatorError
from robustfit.sampler import ProsacSampler, UniformSampler
from robustfit.utils import QualityScores, UniformRandomGenerator, get_logger
from robustfit.utils.score import (LMedSScoringFunction, MSACScoringFunction,
                                   PROMedSScoringFunction, RansacScoringFunction)

from .inliers_data import InliersData
from .iteration_controller import IterationController, ProsacIterationController
from .method import RobustEstimatorMethod
from .refiner import Refiner

logger = get_logger()

# LMedS 和 PROMedS 在得到第一个模型前假设的内点比例
WORST_CASE_INLIER_RATIO = 0.5


class RobustEstimatorState(Enum):
    NOT_READY = "not_ready"  # 数据缺失或不一致
    READY = "ready"          # 可以调用 estimate()
    LOCKED = "locked"        # 正在估计


class _Settings:

    def __init__(self):
        self.confidence = 0.99                 # 结果的置信率
        self.max_iteration_number = 5000       # 全局最大迭代次数
        self.progress_delta = 0.05             # 进度通知的最小增量
        self.threshold = None                  # 决定内点和外点的阈值，None 时使用估计器的默认值
        self.stop_threshold = None             # LMedS / PROMedS 的停止阈值，None 时使用估计器的默认值
        self.inlier_factor = 1.5               # LMedS / PROMedS 中有效阈值与鲁棒标准差的比例
        self.refine_result = True              # 是否对结果进行非线性精化
        self.keep_covariance = False           # 是否保留精化结果的协方差
        self.max_sample_retries = 100          # 每次迭代允许的连续退化采样次数
        self.seed = None                       # 随机数种子


class _Statistics:

    def __init__(self):
        self.iteration_number = 0              # 完成的迭代次数
        self.max_iteration = 0                 # 最终的迭代上界
        self.degenerate_sample_number = 0      # 被丢弃的退化采样次数
        self.model_number = 0                  # 评估过的候选模型数目
        self.best_model_update_number = 0      # 最佳模型的更新次数
        self.refinement_attempted = False      # 是否尝试了精化
        self.non_minimal_fit_used = False      # 精化是否从内点的非最小拟合开始
        self.result_refined = False            # 精化结果是否被接受


class _RunContext:
    """ 一次 estimate() 调用内的全部可变状态 """

    def __init__(self, points, sample_size, sampler, scoring_function, controller, confirmation_threshold=None):
        self.points = points
        self.point_number = points.shape[0]
        self.sample_size = sample_size
        self.sampler = sampler
        self.scoring_function = scoring_function
        self.controller = controller
        # 中位数方法中用于更新迭代上界的残差阈值，None 时使用评分函数的内点
        self.confirmation_threshold = confirmation_threshold

        self.best_model = None
        self.best_score = None
        self.best_inliers = None
        self.best_residuals = None
        self.last_notified_progress = 0.0


class RobustEstimator:
    """ 通用的鲁棒模型估计器

    估计器由具体的几何模型 Estimator 和鲁棒估计方法组合而成：
    反复抽取最小样本拟合候选模型，在全部数据上评分，保留一致性最好的模型，
    最后可选地只用内点对模型进行非线性精化并估计协方差。
    """

    def __init__(self, estimator, method, points=None, quality_scores=None, listener=None):
        """ 初始化鲁棒估计器

        参数
        ----------
        estimator : Estimator
            模型的估计器
        method : RobustEstimatorMethod
            鲁棒估计方法
        points : numpy 可选
            数据点集，形状为 (N, D)
        quality_scores : array_like 可选
            每个数据点的质量得分，PROSAC 和 PROMedS 必须提供
        listener : RobustEstimatorListener 可选
            估计过程的监听器
        """
        if estimator is None:
            raise ValueError("an estimator is required")
        self.__estimator = estimator
        self.__method = RobustEstimatorMethod(method)
        self.__settings = _Settings()
        self.statistics = _Statistics()

        self.__points = None
        self.__quality_scores = None
        self.__listener = None
        self.__locked = False

        # 结果
        self.__inliers_data = None
        self.__covariance = None

        if points is not None:
            self.setPoints(points)
        if quality_scores is not None:
            self.setQualityScores(quality_scores)
        self.setListener(listener)

    # 状态查询

    def isLocked(self):
        return self.__locked

    def isReady(self):
        """ 数据存在且一致时返回 True """
        if self.__points is None:
            return False
        if self.__quality_scores is not None and len(self.__quality_scores) != self.__points.shape[0]:
            return False
        if self.__method.isProgressive() and self.__quality_scores is None:
            return False
        return True

    def getState(self):
        if self.__locked:
            return RobustEstimatorState.LOCKED
        if self.isReady():
            return RobustEstimatorState.READY
        return RobustEstimatorState.NOT_READY

    def __checkUnlocked(self):
        if self.__locked:
            raise LockedError()

    # 配置

    def getEstimator(self):
        return self.__estimator

    def getMethod(self):
        return self.__method

    def getPoints(self):
        return self.__points

    def setPoints(self, points):
        """ 设置数据点集，估计期间不能修改

        float64 的 numpy 数组按引用保存，getPoints() 返回同一个对象；
        其他类型（整数数组、float32 数组、列表）会被复制转换为 float64。

        参数
        ----------
        points : array_like
            数据点集，形状为 (N, D)，D 必须为估计器支持的维度，N 不小于最小样本大小；
            为 None 时清除数据点集
        """
        self.__checkUnlocked()
        if points is None:
            self.__points = None
            return

        points = np.asarray(points, dtype=np.float64)
        if points.ndim != 2:
            raise ValueError("points must be a 2-D array, got shape %s" % (points.shape,))
        if points.shape[1] not in self.__estimator.dataDimensions():
            raise ValueError("points must have one of %s columns, got %d"
                             % (self.__estimator.dataDimensions(), points.shape[1]))
        if points.shape[0] < self.__estimator.sampleSize():
            raise ValueError("at least %d points are required, got %d"
                             % (self.__estimator.sampleSize(), points.shape[0]))
        if not np.all(np.isfinite(points)):
            raise ValueError("points must be finite")
        self.__points = points

    def getQualityScores(self):
        return self.__quality_scores

    def setQualityScores(self, quality_scores):
        """ 设置每个数据点的质量得分，长度必须与数据点数目一致

        参数
        ----------
        quality_scores : array_like 或 QualityScores
            质量得分，越大越可靠；为 None 时清除
        """
        self.__checkUnlocked()
        if quality_scores is None:
            self.__quality_scores = None
            return

        if not isinstance(quality_scores, QualityScores):
            quality_scores = QualityScores(quality_scores)
        if self.__points is not None and len(quality_scores) != self.__points.shape[0]:
            raise ValueError("expected %d quality scores, got %d"
                             % (self.__points.shape[0], len(quality_scores)))
        self.__quality_scores = quality_scores

    def getListener(self):
        return self.__listener

    def setListener(self, listener):
        self.__checkUnlocked()
        self.__listener = listener

    def getThreshold(self):
        """ RANSAC、MSAC 和 PROSAC 使用的内点阈值 """
        if self.__settings.threshold is None:
            return self.__estimator.defaultThreshold()
        return self.__settings.threshold

    def setThreshold(self, threshold):
        self.__checkUnlocked()
        self.__settings.threshold = _positive(threshold, "threshold")

    def getStopThreshold(self):
        """ LMedS 和 PROMedS 的停止阈值，同时是有效内点阈值的下限 """
        if self.__settings.stop_threshold is None:
            return self.__estimator.defaultStopThreshold()
        return self.__settings.stop_threshold

    def setStopThreshold(self, stop_threshold):
        self.__checkUnlocked()
        self.__settings.stop_threshold = _positive(stop_threshold, "stop threshold")

    def getInlierFactor(self):
        return self.__settings.inlier_factor

    def setInlierFactor(self, inlier_factor):
        self.__checkUnlocked()
        inlier_factor = float(inlier_factor)
        if not m.isfinite(inlier_factor) or inlier_factor < 1.0:
            raise ValueError("inlier factor must be a finite value >= 1, got %r" % inlier_factor)
        self.__settings.inlier_factor = inlier_factor

    def getConfidence(self):
        return self.__settings.confidence

    def setConfidence(self, confidence):
        self.__checkUnlocked()
        confidence = float(confidence)
        if not 0.0 < confidence <= 1.0:
            raise ValueError("confidence must be in (0, 1], got %r" % confidence)
        self.__settings.confidence = confidence

    def getMaxIterations(self):
        return self.__settings.max_iteration_number

    def setMaxIterations(self, max_iterations):
        self.__checkUnlocked()
        self.__settings.max_iteration_number = _atLeastOne(max_iterations, "max iterations")

    def getProgressDelta(self):
        return self.__settings.progress_delta

    def setProgressDelta(self, progress_delta):
        self.__checkUnlocked()
        progress_delta = float(progress_delta)
        if not 0.0 <= progress_delta <= 1.0:
            raise ValueError("progress delta must be in [0, 1], got %r" % progress_delta)
        self.__settings.progress_delta = progress_delta

    def isResultRefined(self):
        """ 是否对结果进行精化；本次精化是否被接受见 statistics.result_refined """
        return self.__settings.refine_result

    def setRefineResult(self, refine_result):
        self.__checkUnlocked()
        self.__settings.refine_result = bool(refine_result)

    def isCovarianceKept(self):
        return self.__settings.keep_covariance

    def setCovarianceKept(self, keep_covariance):
        self.__checkUnlocked()
        self.__settings.keep_covariance = bool(keep_covariance)

    def getSeed(self):
        return self.__settings.seed

    def setSeed(self, seed):
        self.__checkUnlocked()
        if seed is not None and (isinstance(seed, bool) or int(seed) != seed or seed < 0):
            raise ValueError("seed must be None or a non-negative integer, got %r" % (seed,))
        self.__settings.seed = None if seed is None else int(seed)

    def getMaxSampleRetries(self):
        return self.__settings.max_sample_retries

    def setMaxSampleRetries(self, max_sample_retries):
        self.__checkUnlocked()
        self.__settings.max_sample_retries = _atLeastOne(max_sample_retries, "max sample retries")

    # 结果

    def getInliersData(self):
        """ 最近一次成功估计的内点数据，之前没有成功的估计时为 None """
        return self.__inliers_data

    def getCovariance(self):
        """ 精化后模型参数的协方差，只有精化被接受且要求保留协方差时才存在 """
        return self.__covariance

    # 估计

    def estimate(self):
        """ 运行鲁棒估计

        返回
        ----------
        Model
            一致性最好的模型（可能经过精化）

        异常
        ----------
        LockedError
            估计正在进行中
        NotReadyError
            数据缺失或不一致
        RobustEstimatorError
            无法得到非退化样本或任何有效模型
        """
        self.__checkUnlocked()
        if not self.isReady():
            raise NotReadyError()

        self.__locked = True
        try:
            self.__inliers_data = None
            self.__covariance = None
            self.statistics = _Statistics()
            try:
                if self.__listener is not None:
                    self.__listener.onEstimateStart(self)
                model = self.__run()
            except BaseException:
                self.__notifyEndAfterFailure()
                raise
            if self.__listener is not None:
                self.__listener.onEstimateEnd(self)
            return model
        finally:
            self.__locked = False

    def __notifyEndAfterFailure(self):
        """ 估计失败时通知监听器，监听器的异常不能覆盖原来的异常 """
        if self.__listener is None:
            return
        try:
            self.__listener.onEstimateEnd(self)
        except Exception:
            logger.exception("listener raised in onEstimateEnd after a failed estimation")

    def __createContext(self):
        points = self.__points
        point_number = points.shape[0]
        sample_size = self.__estimator.sampleSize()
        random_generator = UniformRandomGenerator(self.__settings.seed)
        median_based = self.__method.isMedianBased()
        initial_inlier_ratio = WORST_CASE_INLIER_RATIO if median_based else None

        # 评分函数
        if self.__method == RobustEstimatorMethod.MSAC:
            scoring_function = MSACScoringFunction()
        elif self.__method == RobustEstimatorMethod.LMEDS:
            scoring_function = LMedSScoringFunction()
        elif self.__method == RobustEstimatorMethod.PROMEDS:
            scoring_function = PROMedSScoringFunction()
            scoring_function.setWeights(self.__quality_scores.weights())
        else:
            scoring_function = RansacScoringFunction()

        if median_based:
            scoring_function.initialize(self.getStopThreshold(),
                                        point_number,
                                        sample_size,
                                        self.__settings.inlier_factor)
        else:
            scoring_function.initialize(self.getThreshold(), point_number)

        # 采样器和迭代控制器
        if self.__method.isProgressive():
            sorted_indices = self.__quality_scores.sortedIndices()
            controller = ProsacIterationController(self.__settings.confidence,
                                                   self.__settings.max_iteration_number,
                                                   sample_size,
                                                   sorted_indices,
                                                   initial_inlier_ratio)
            sampler = None
            if point_number > sample_size:
                # 初始迭代上界内采样池增长到全部数据，之后退化为均匀采样
                sampler = ProsacSampler(sorted_indices,
                                        sample_size,
                                        random_generator,
                                        ransac_convergence_iterations=controller.max_iteration)
        else:
            sampler = UniformSampler(point_number, random_generator)
            controller = IterationController(self.__settings.confidence,
                                             self.__settings.max_iteration_number,
                                             sample_size,
                                             point_number,
                                             initial_inlier_ratio)

        confirmation_threshold = self.getStopThreshold() if median_based else None
        return _RunContext(points, sample_size, sampler, scoring_function, controller, confirmation_threshold)

    def __run(self):
        context = self.__createContext()

        if context.point_number == context.sample_size:
            # 全部数据即为唯一的样本，不进行迭代
            sample = list(range(context.point_number))
            if not self.__estimator.isValidSample(context.points, sample):
                raise RobustEstimatorError("the only available sample is degenerate")
            self.__scoreModels(context, self.__estimator.estimateModel(context.points, sample), sample)
        else:
            self.__sampleModels(context)

        self.statistics.max_iteration = context.controller.max_iteration
        if context.best_model is None:
            raise RobustEstimatorError("no valid model was found after %d iterations"
                                       % self.statistics.iteration_number)

        model, score, inliers, residuals = \
            context.best_model, context.best_score, context.best_inliers, context.best_residuals
        if self.__settings.refine_result:
            model, score, inliers, residuals = self.__refineResult(context)

        self.__inliers_data = InliersData(inliers, residuals, score.threshold, score.value)
        logger.info("%s finished after %d iterations: %d / %d inliers, consensus %g%s",
                    self.__method.name,
                    self.statistics.iteration_number,
                    score.inlier_number,
                    context.point_number,
                    score.value,
                    ", refined" if self.statistics.result_refined else "")
        return model

    def __sampleModels(self, context):
        """ 鲁棒估计的主循环 """
        median_based = self.__method.isMedianBased()
        stop_threshold = self.getStopThreshold()

        while not context.controller.shouldStop(self.statistics.iteration_number):
            sample, models = self.__drawSample(context)
            self.statistics.iteration_number += 1

            if self.__scoreModels(context, models, sample):
                logger.debug("iteration %d: new best model %r, consensus %g, %d inliers, iteration bound %d",
                             self.statistics.iteration_number,
                             context.best_model,
                             context.best_score.value,
                             context.best_score.inlier_number,
                             context.controller.max_iteration)

            self.__notifyIteration(context)

            # 中位数足够小时提前结束
            if median_based and context.best_score is not None and \
                    m.sqrt(max(-context.best_score.value, 0.0)) <= stop_threshold:
                break

        self.__notifyProgress(context, 1.0)

    def __drawSample(self, context):
        """ 抽取一个非退化样本并拟合候选模型

        返回
        ----------
        list, list(Model)
            样本序号列表和候选模型列表

        异常
        ----------
        RobustEstimatorError
            连续退化采样次数超过上限
        """
        for _ in range(self.__settings.max_sample_retries):
            sample = context.sampler.sample(context.sample_size)
            # 检查采样是否有效，无效则重新采样
            if not self.__estimator.isValidSample(context.points, sample):
                self.statistics.degenerate_sample_number += 1
                continue

            models = self.__estimator.estimateModel(context.points, sample)
            if len(models) == 0:
                self.statistics.degenerate_sample_number += 1
                continue
            return sample, models

        raise RobustEstimatorError("could not draw a non-degenerate sample in %d attempts"
                                   % self.__settings.max_sample_retries)

    def __scoreModels(self, context, models, sample):
        """ 评估候选模型，严格更好时替换最佳模型

        返回
        ----------
        bool
            最佳模型是否被更新
        """
        updated = False
        for model in models:
            if not self.__estimator.isValidModel(model, data=context.points, minimal_sample=sample):
                continue
            score, inliers, residuals = context.scoring_function.getScore(context.points,
                                                                          model,
                                                                          self.__estimator)
            if score is None:
                continue
            self.statistics.model_number += 1

            # 得分相同时保留先找到的模型
            if context.best_score is None or score > context.best_score:
                context.best_model = model
                context.best_score = score
                context.best_inliers = inliers
                context.best_residuals = residuals
                if context.confirmation_threshold is None:
                    context.controller.update(inliers)
                else:
                    # 只有停止阈值内的点计入内点比例
                    context.controller.update(residuals <= context.confirmation_threshold)
                self.statistics.best_model_update_number += 1
                updated = True
        return updated

    def __refineResult(self, context):
        """ 对最佳模型进行精化，只有一致性不变差时才接受精化结果 """
        best = (context.best_model, context.best_score, context.best_inliers, context.best_residuals)
        if context.best_score.inlier_number < context.sample_size:
            logger.debug("skipping refinement: %d inliers, %d required",
                         context.best_score.inlier_number, context.sample_size)
            return best

        weights = None
        if self.__quality_scores is not None and self.__estimator.isWeightingApplicable():
            weights = self.__quality_scores.weights()

        self.statistics.refinement_attempted = True
        refiner = Refiner(self.__estimator, keep_covariance=self.__settings.keep_covariance)
        try:
            initial_model = self.__nonMinimalFit(context, weights)
            result = refiner.refine(context.points,
                                    initial_model,
                                    context.best_inliers,
                                    context.best_score.threshold,
                                    weights)
        except (ValueError, np.linalg.LinAlgError) as e:
            logger.warning("refinement failed, keeping the unrefined model: %s", e)
            return best
        if result is None:
            logger.warning("refinement did not converge, keeping the unrefined model")
            return best

        if not self.__estimator.isValidModel(result.model, data=context.points):
            logger.warning("refinement produced an invalid model, keeping the unrefined model")
            return best
        score, inliers, residuals = context.scoring_function.getScore(context.points,
                                                                      result.model,
                                                                      self.__estimator)
        if score is None or score < context.best_score:
            logger.warning("refined model has a worse consensus (%s < %g), keeping the unrefined model",
                           "invalid" if score is None else "%g" % score.value, context.best_score.value)
            return best

        self.statistics.result_refined = True
        self.__covariance = result.covariance
        return result.model, score, inliers, residuals

    def __nonMinimalFit(self, context, weights):
        """ 用最佳模型的全部内点做（加权）非最小拟合，作为精化的初值

        候选模型的一致性不差于获胜模型时才使用，否则从获胜模型开始精化。

        返回
        ----------
        Model
            精化使用的初始模型
        """
        initial_model = context.best_model
        initial_score = context.best_score
        inlier_indices = np.flatnonzero(context.best_inliers)
        models = self.__estimator.estimateModelNonminimal(context.points,
                                                          inlier_indices,
                                                          len(inlier_indices),
                                                          weights=weights)
        for model in models:
            if not self.__estimator.isValidModel(model, data=context.points, inliers=inlier_indices):
                continue
            score, _, _ = context.scoring_function.getScore(context.points, model, self.__estimator)
            if score is None or score < initial_score:
                continue
            initial_model = model
            initial_score = score
        self.statistics.non_minimal_fit_used = initial_model is not context.best_model
        return initial_model

    def __notifyIteration(self, context):
        if self.__listener is not None:
            self.__listener.onEstimateNextIteration(self, self.statistics.iteration_number)
        progress = min(float(self.statistics.iteration_number) / context.controller.max_iteration, 1.0)
        self.__notifyProgress(context, progress)

    def __notifyProgress(self, context, progress):
        """ 进度相对上次通知至少增加 progress_delta 时通知监听器 """
        if progress <= context.last_notified_progress:
            return
        if progress < 1.0 and progress - context.last_notified_progress < self.__settings.progress_delta:
            return
        context.last_notified_progress = progress
        if self.__listener is not None:
            self.__listener.onEstimateProgressChange(self, progress)


def _positive(value, name):
    value = float(value)
    if not m.isfinite(value) or value <= 0.0:
        raise ValueError("%s must be a finite value > 0, got %r" % (name, value))
    return value


def _atLeastOne(value, name):
    if isinstance(value, bool) or int(value) != value or value < 1:
        raise ValueError("%s must be an integer >= 1, got %r" % (name, value))
    return int(value)
