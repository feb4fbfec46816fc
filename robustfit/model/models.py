import numpy as np


class Model:
    """ 鲁棒估计求解模型基类 """

    def __init__(self):
        self.descriptor = None

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, np.array2string(np.asarray(self.descriptor), precision=6))


class Line2D(Model):
    """ 二维直线 a*x + b*y + c = 0 """

    def __init__(self, parameters=np.zeros(3)):
        super().__init__()
        self.descriptor = np.asarray(parameters, dtype=np.float64).reshape(3)

    def normalized(self):
        """ 法向量 (a, b) 为单位向量的直线 """
        norm = np.linalg.norm(self.descriptor[0:2])
        return Line2D(self.descriptor / norm)


class Plane(Model):
    """ 三维平面 a*x + b*y + c*z + d = 0 """

    def __init__(self, parameters=np.zeros(4)):
        super().__init__()
        self.descriptor = np.asarray(parameters, dtype=np.float64).reshape(4)

    def normalized(self):
        """ 法向量为单位向量且第一个非零分量为正的平面，便于比较 """
        descriptor = self.descriptor / np.linalg.norm(self.descriptor[0:3])
        pivot = descriptor[np.flatnonzero(np.abs(descriptor) > 0.0)[0]]
        return Plane(descriptor * np.sign(pivot))

    def signedDistance(self, point):
        point = np.asarray(point, dtype=np.float64)
        if point.shape[-1] == 4:
            point = point[..., 0:3] / point[..., 3:4]
        return (point @ self.descriptor[0:3] + self.descriptor[3]) / np.linalg.norm(self.descriptor[0:3])


class Conic(Model):
    """ 二次曲线，以对称矩阵 C 表示，曲线上的齐次点满足 p^T C p = 0

        C = [[a,   b/2, d/2],
             [b/2, c,   e/2],
             [d/2, e/2, f  ]]
    """

    def __init__(self, matrix=np.zeros([3, 3])):
        super().__init__()
        self.descriptor = np.asarray(matrix, dtype=np.float64).reshape((3, 3))

    @staticmethod
    def fromParameters(parameters):
        a, b, c, d, e, f = parameters
        return Conic(np.array([[a, b / 2.0, d / 2.0],
                               [b / 2.0, c, e / 2.0],
                               [d / 2.0, e / 2.0, f]]))

    def parameters(self):
        C = self.descriptor
        return np.array([C[0, 0], 2.0 * C[0, 1], C[1, 1], 2.0 * C[0, 2], 2.0 * C[1, 2], C[2, 2]])

    def normalized(self):
        return Conic(self.descriptor / np.linalg.norm(self.descriptor))

    def evaluate(self, points):
        """ 归一化二次曲线对归一化齐次点的代数值 p^T C p """
        points = np.atleast_2d(np.asarray(points, dtype=np.float64))
        if points.shape[1] == 2:
            points = np.c_[points, np.ones(points.shape[0])]
        points = points / np.linalg.norm(points, axis=1, keepdims=True)
        C = self.descriptor / np.linalg.norm(self.descriptor)
        return np.einsum("ij,jk,ik->i", points, C, points)

    def isLocus(self, point, threshold=1e-12):
        """ 判断点是否位于二次曲线上 """
        return bool(abs(self.evaluate(point)[0]) <= threshold)


class AffineTransformation2D(Model):
    """ 二维仿射变换，3x3 齐次矩阵且最后一行为 [0, 0, 1] """

    def __init__(self, matrix=np.eye(3)):
        super().__init__()
        self.descriptor = np.asarray(matrix, dtype=np.float64).reshape((3, 3))

    def transform(self, points):
        return transformPoints(self.descriptor, points)


class ProjectiveTransformation2D(Model):
    """ 二维射影变换（单应矩阵） """

    def __init__(self, matrix=np.eye(3)):
        super().__init__()
        self.descriptor = np.asarray(matrix, dtype=np.float64).reshape((3, 3))

    def normalized(self):
        return ProjectiveTransformation2D(self.descriptor / np.linalg.norm(self.descriptor))

    def transform(self, points):
        return transformPoints(self.descriptor, points)


class EuclideanTransformation2D(Model):
    """ 二维欧氏变换（旋转 + 平移） """

    def __init__(self, angle=0.0, translation=np.zeros(2)):
        super().__init__()
        self.angle = float(angle)
        self.translation = np.asarray(translation, dtype=np.float64).reshape(2)
        cos_a, sin_a = np.cos(self.angle), np.sin(self.angle)
        self.descriptor = np.array([[cos_a, -sin_a, self.translation[0]],
                                    [sin_a, cos_a, self.translation[1]],
                                    [0.0, 0.0, 1.0]])

    def transform(self, points):
        return transformPoints(self.descriptor, points)


class PinholeCamera(Model):
    """ 针孔相机的 3x4 投影矩阵 P，像点 x ~ P X """

    def __init__(self, matrix=np.zeros([3, 4])):
        super().__init__()
        self.descriptor = np.asarray(matrix, dtype=np.float64).reshape((3, 4))

    def normalized(self):
        descriptor = self.descriptor / np.linalg.norm(self.descriptor)
        # 固定符号：让场景点位于相机前方时深度为正
        if np.linalg.det(descriptor[:, 0:3]) < 0:
            descriptor = -descriptor
        return PinholeCamera(descriptor)

    def project(self, points):
        """ 将 (N, 3) 的三维点投影为 (N, 2) 的像点 """
        points = np.atleast_2d(np.asarray(points, dtype=np.float64))
        homogeneous = np.c_[points, np.ones(points.shape[0])] @ self.descriptor.T
        return homogeneous[:, 0:2] / homogeneous[:, 2:3]


def transformPoints(matrix, points):
    """ 用 3x3 齐次矩阵变换 (N, 2) 的点 """
    points = np.atleast_2d(np.asarray(points, dtype=np.float64))
    homogeneous = np.c_[points, np.ones(points.shape[0])] @ matrix.T
    return homogeneous[:, 0:2] / homogeneous[:, 2:3]
