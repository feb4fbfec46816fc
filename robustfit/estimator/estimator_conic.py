import numpy as np

from robustfit.model import Conic
from robustfit.solver import SolverConicFivePoint
from .estimator import Estimator


class EstimatorConic(Estimator):
    """ 二次曲线估计器

    数据为 (N, 2) 的点或 (N, 3) 的齐次点。残差为归一化二次曲线
    对归一化齐次点的代数值 |p^T C p|，与 Conic.isLocus 的判定一致。
    """

    def __init__(self, minimalSolver=SolverConicFivePoint, nonMinimalSolver=SolverConicFivePoint):
        super().__init__(minimalSolver, nonMinimalSolver)

    def dataDimensions(self):
        return (2, 3)

    def defaultThreshold(self):
        return 1e-6

    def defaultStopThreshold(self):
        return 1e-9

    def refinementResiduals(self, data, model):
        return model.evaluate(data)

    def residuals(self, data, model):
        return np.abs(model.evaluate(data))

    def isValidModel(self,
                     model,
                     data=None,
                     inliers=None,
                     minimal_sample=None,
                     threshold=None):
        return super().isValidModel(model) and np.linalg.norm(model.descriptor) > 0.0

    def parameterNumber(self):
        return 6

    def modelToParameters(self, model):
        parameters = model.parameters()
        return parameters / np.linalg.norm(parameters)

    def parametersToModel(self, parameters):
        return Conic.fromParameters(parameters)
