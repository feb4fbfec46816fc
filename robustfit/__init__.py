from .exceptions import (LockedError, NotReadyError, RobustEstimatorError,
                         RobustFitError)
from .ransac import (InliersData, RobustEstimator, RobustEstimatorListener,
                     RobustEstimatorMethod, RobustEstimatorState, create,
                     findAffineTransformation, findConic,
                     findEuclideanTransformation, findHomography, findLine,
                     findPinholeCamera, findPlane)
from .utils import QualityScores

__version__ = "0.1.0"
