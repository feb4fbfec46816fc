import numpy as np

from robustfit.model import AffineTransformation2D
from robustfit.solver import SolverAffineThreePoint
from .estimator import Estimator, hypotRows, transferErrors, triangleArea


class EstimatorAffine(Estimator):
    """ 二维仿射变换估计器，数据每行为 [x1, y1, x2, y2] """

    # 三角形面积（两倍）小于该值时认为三点共线
    MIN_TRIANGLE_AREA = 1e-9

    def __init__(self, minimalSolver=SolverAffineThreePoint, nonMinimalSolver=SolverAffineThreePoint):
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
        """ 源点或目标点共线时仿射变换不唯一 """
        points = np.asarray(data, dtype=np.float64)[list(sample)]
        return triangleArea(points[0, 0:2], points[1, 0:2], points[2, 0:2]) > self.MIN_TRIANGLE_AREA and \
            triangleArea(points[0, 2:4], points[1, 2:4], points[2, 2:4]) > self.MIN_TRIANGLE_AREA

    def parameterNumber(self):
        return 6

    def modelToParameters(self, model):
        return model.descriptor[0:2, :].ravel().copy()

    def parametersToModel(self, parameters):
        return AffineTransformation2D(np.r_[np.asarray(parameters).reshape((2, 3)), [[0.0, 0.0, 1.0]]])
