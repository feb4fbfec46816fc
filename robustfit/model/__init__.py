from .models import (AffineTransformation2D, Conic, EuclideanTransformation2D,
                     Line2D, Model, PinholeCamera, Plane,
                     ProjectiveTransformation2D, transformPoints)
