import numpy as np

from robustfit.model import Plane
from robustfit.solver import SolverPlaneThreePoint
from robustfit.solver.solver_plane_three_point import toInhomogeneous3D
from .estimator import Estimator


class EstimatorPlane(Estimator):
    """ 三维平面估计器，数据为 (N, 3) 的点或 (N, 4) 的齐次点 """

    def __init__(self, minimalSolver=SolverPlaneThreePoint, nonMinimalSolver=SolverPlaneThreePoint):
        super().__init__(minimalSolver, nonMinimalSolver)

    def dataDimensions(self):
        return (3, 4)

    def defaultThreshold(self):
        return 1e-6

    def defaultStopThreshold(self):
        return 1e-9

    def refinementResiduals(self, data, model):
        """ 点到平面的带符号距离 """
        points = toInhomogeneous3D(np.asarray(data, dtype=np.float64))
        return model.signedDistance(points)

    def residuals(self, data, model):
        return np.abs(self.refinementResiduals(data, model))

    def isValidModel(self,
                     model,
                     data=None,
                     inliers=None,
                     minimal_sample=None,
                     threshold=None):
        return super().isValidModel(model) and np.linalg.norm(model.descriptor[0:3]) > 0.0

    def parameterNumber(self):
        return 4

    def modelToParameters(self, model):
        return model.normalized().descriptor.copy()

    def parametersToModel(self, parameters):
        return Plane(parameters)
