from robustfit.utils.uniform_random_generator import UniformRandomGenerator


class Sampler:
    """ 采样器基类 """

    def __init__(self, point_number, random_generator=None):
        self.point_number = point_number  # 采样的数据集大小
        self.random_generator = random_generator if random_generator is not None else UniformRandomGenerator()
        self.initialized = False          # 采样器是否被初始化

    def sample(self, sample_size):
        """ 根据给定的样本大小进行采样

        参数
        ----------
        sample_size : int
            采样的样本数

        返回
        ----------
        list
            采样的数据集合序号列表，序号对应原始数据集
        """
        raise NotImplementedError
