import numpy as np
from scipy.optimize import least_squares


class RefinementResult:
    """ 非线性精化的结果 """

    def __init__(self, model, covariance, cost, iteration_number):
        self.model = model                        # 精化后的模型
        self.covariance = covariance              # 参数协方差矩阵，未要求时为 None
        self.cost = cost                          # 0.5 * 加权残差平方和
        self.iteration_number = iteration_number  # 残差函数的调用次数


class Refiner:
    """ 仅使用内点，对模型参数做加权非线性最小二乘精化

    残差为 sqrt(w_i) * r_i / sigma，其中 sigma 为精化使用的标准差，
    因此协方差 (J^T J)^+ 直接位于参数空间。
    """

    def __init__(self, estimator, keep_covariance=False, max_function_evaluations=None):
        self.estimator = estimator
        self.keep_covariance = keep_covariance
        self.max_function_evaluations = max_function_evaluations

    def refine(self, points, model, inliers, standard_deviation, weights=None):
        """ 从获胜模型出发精化模型参数

        参数
        ----------
        points : numpy
            输入的数据点集
        model : Model
            采样阶段得到的最佳模型
        inliers : numpy
            最佳模型的内点 mask
        standard_deviation : float
            残差的标准差，用于对残差进行缩放
        weights : numpy 可选
            每个数据点的权重，为 None 时权重相同

        返回
        ----------
        RefinementResult
            精化结果；优化没有收敛时返回 None

        异常
        ----------
        ValueError, numpy.linalg.LinAlgError
            残差或参数出现非有限值等数值错误
        """
        inlier_points = points[inliers]
        inlier_number = inlier_points.shape[0]
        if weights is None:
            sqrt_weights = np.ones(inlier_number)
        else:
            sqrt_weights = np.sqrt(np.asarray(weights, dtype=np.float64)[inliers])
        scale = sqrt_weights / standard_deviation

        def weightedResiduals(parameters):
            candidate = self.estimator.parametersToModel(parameters)
            residuals = np.asarray(self.estimator.refinementResiduals(inlier_points, candidate), dtype=np.float64)
            residuals = residuals.reshape((inlier_number, -1)) * scale[:, None]
            return residuals.ravel()

        x0 = np.asarray(self.estimator.modelToParameters(model), dtype=np.float64)
        if x0.shape != (self.estimator.parameterNumber(),):
            raise ValueError("expected %d model parameters, got shape %s"
                             % (self.estimator.parameterNumber(), x0.shape))
        result = least_squares(weightedResiduals, x0, method="trf", max_nfev=self.max_function_evaluations)
        if result.status <= 0 or not np.all(np.isfinite(result.x)):
            return None

        refined_model = self.estimator.parametersToModel(result.x)
        covariance = None
        if self.keep_covariance:
            covariance = self.covariance(result.jac)
        return RefinementResult(refined_model, covariance, float(result.cost), int(result.nfev))

    @staticmethod
    def covariance(jacobian):
        """ 由最优解处的雅可比矩阵计算参数协方差 (J^T J)^+ """
        jacobian = np.asarray(jacobian, dtype=np.float64)
        return np.linalg.pinv(jacobian.T @ jacobian)
