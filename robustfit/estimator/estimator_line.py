import numpy as np

from robustfit.model import Line2D
from robustfit.solver import SolverLineTwoPoint
from robustfit.solver.solver_line_two_point import toInhomogeneous2D
from .estimator import Estimator


class EstimatorLine(Estimator):
    """ 二维直线估计器，数据为 (N, 2) 的点或 (N, 3) 的齐次点 """

    def __init__(self, minimalSolver=SolverLineTwoPoint, nonMinimalSolver=SolverLineTwoPoint):
        super().__init__(minimalSolver, nonMinimalSolver)

    def dataDimensions(self):
        return (2, 3)

    def defaultThreshold(self):
        return 1e-6

    def defaultStopThreshold(self):
        return 1e-9

    def refinementResiduals(self, data, model):
        """ 点到直线的带符号距离 """
        points = toInhomogeneous2D(np.asarray(data, dtype=np.float64))
        a, b, c = model.descriptor
        return (points @ np.array([a, b]) + c) / np.hypot(a, b)

    def residuals(self, data, model):
        return np.abs(self.refinementResiduals(data, model))

    def isValidSample(self, data, sample):
        """ 两点重合时无法确定直线 """
        points = toInhomogeneous2D(np.asarray(data, dtype=np.float64)[list(sample)])
        return bool(np.any(points[0] != points[1]))

    def parameterNumber(self):
        return 3

    def modelToParameters(self, model):
        return model.normalized().descriptor.copy()

    def parametersToModel(self, parameters):
        return Line2D(parameters)
