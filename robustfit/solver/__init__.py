from .solver_engine import SolverEngine
from .solver_affine_three_point import SolverAffineThreePoint
from .solver_conic_five_point import SolverConicFivePoint
from .solver_euclidean_two_point import SolverEuclideanTwoPoint
from .solver_homography_four_point import SolverHomographyFourPoint
from .solver_line_two_point import SolverLineTwoPoint
from .solver_pinhole_camera_dlt import SolverPinholeCameraDLT
from .solver_plane_three_point import SolverPlaneThreePoint
