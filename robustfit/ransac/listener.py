class RobustEstimatorListener:
    """ 鲁棒估计过程的监听器，所有回调都在调用 estimate() 的线程中同步执行

    回调执行时估计器仍处于锁定状态，可以读取状态，
    但调用任何修改方法或再次调用 estimate() 都会抛出 LockedError。
    """

    def onEstimateStart(self, estimator):
        """ 估计开始，采样之前调用 """
        pass

    def onEstimateEnd(self, estimator):
        """ 估计结束（成功或失败）时调用 """
        pass

    def onEstimateNextIteration(self, estimator, iteration):
        """ 每完成一次迭代后调用

        参数
        ----------
        estimator : RobustEstimator
            正在运行的估计器
        iteration : int
            已完成的迭代次数
        """
        pass

    def onEstimateProgressChange(self, estimator, progress):
        """ 进度相对上次通知增加了至少 progress_delta 时调用，progress 位于 [0, 1] """
        pass
