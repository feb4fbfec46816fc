from .inliers_data import InliersData
from .iteration_controller import IterationController, ProsacIterationController
from .listener import RobustEstimatorListener
from .method import RobustEstimatorMethod
from .refiner import Refiner, RefinementResult
from .robust_estimator import RobustEstimator, RobustEstimatorState
from .ransac_api import (create, findAffineTransformation, findConic,
                         findEuclideanTransformation, findHomography, findLine,
                         findPinholeCamera, findPlane)
