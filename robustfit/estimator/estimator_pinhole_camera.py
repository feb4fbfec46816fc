import numpy as np

from robustfit.model import PinholeCamera
from robustfit.solver import SolverPinholeCameraDLT
from .estimator import Estimator, hypotRows


class EstimatorPinholeCamera(Estimator):
    """ 针孔相机估计器，数据每行为 3D-2D 点对应 [X, Y, Z, u, v]，残差为重投影误差 """

    def __init__(self, minimalSolver=SolverPinholeCameraDLT, nonMinimalSolver=SolverPinholeCameraDLT):
        super().__init__(minimalSolver, nonMinimalSolver)

    def dataDimensions(self):
        return (5,)

    def defaultThreshold(self):
        return 1.0

    def defaultStopThreshold(self):
        return 1e-3

    def refinementResiduals(self, data, model):
        data = np.atleast_2d(np.asarray(data, dtype=np.float64))
        with np.errstate(divide="ignore", invalid="ignore"):
            return model.project(data[:, 0:3]) - data[:, 3:5]

    def residuals(self, data, model):
        return hypotRows(self.refinementResiduals(data, model))

    def parameterNumber(self):
        return 12

    def modelToParameters(self, model):
        return model.normalized().descriptor.ravel().copy()

    def parametersToModel(self, parameters):
        return PinholeCamera(np.asarray(parameters).reshape((3, 4)))
