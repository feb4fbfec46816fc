from .sampler import Sampler


class UniformSampler(Sampler):
    """ 均匀随机采样器，用于 RANSAC、LMedS 和 MSAC """

    def __init__(self, point_number, random_generator=None):
        super().__init__(point_number, random_generator)
        self.initialized = self.__initialize()

    def __initialize(self):
        """ 初始化样本构建，必须在样本被调用前"""
        self.random_generator.resetGenerator(0, self.point_number - 1)
        return True

    def sample(self, sample_size):
        """ 不放回地从全部数据点中均匀采样

        参数
        ----------
        sample_size : int
            采样的样本数

        返回
        ----------
        list
            采样的数据集合序号列表
        """
        if sample_size > self.point_number:
            raise ValueError("sample size %d exceeds the %d available points" % (sample_size, self.point_number))
        return self.random_generator.generateUniqueRandomSet(sample_size, max=self.point_number - 1)
