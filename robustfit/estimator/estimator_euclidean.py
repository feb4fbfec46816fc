import numpy as np

from robustfit.model import EuclideanTransformation2D
from robustfit.solver import SolverEuclideanTwoPoint
from .estimator import Estimator, hypotRows, transferErrors


class EstimatorEuclidean(Estimator):
    """ 二维欧氏变换估计器，数据每行为 [x1, y1, x2, y2]

    精化参数为 [angle, tx, ty]。
    """

    def __init__(self, minimalSolver=SolverEuclideanTwoPoint, nonMinimalSolver=SolverEuclideanTwoPoint):
        super().__init__(minimalSolver, nonMinimalSolver)

    def dataDimensions(self):
        return (4,)

    def defaultThreshold(self):
        return 1.0

    def defaultStopThreshold(self):
        return 1e-3

    def refinementResiduals(self, data, model):
        return transferErrors(model.descriptor, data)

    def residuals(self, data, model):
        return hypotRows(self.refinementResiduals(data, model))

    def isValidSample(self, data, sample):
        points = np.asarray(data, dtype=np.float64)[list(sample)]
        return bool(np.any(points[0, 0:2] != points[1, 0:2]))

    def parameterNumber(self):
        return 3

    def modelToParameters(self, model):
        return np.r_[model.angle, model.translation]

    def parametersToModel(self, parameters):
        return EuclideanTransformation2D(parameters[0], parameters[1:3])
