from .estimator import Estimator
from .estimator_affine import EstimatorAffine
from .estimator_conic import EstimatorConic
from .estimator_euclidean import EstimatorEuclidean
from .estimator_homography import EstimatorHomography
from .estimator_line import EstimatorLine
from .estimator_pinhole_camera import EstimatorPinholeCamera
from .estimator_plane import EstimatorPlane
