import logging


LOGGER_NAME = "robustfit"
LOG_FORMAT = "[%(asctime)s %(levelname)s %(filename)s line %(lineno)d] %(message)s"


def get_logger(name=LOGGER_NAME, level=logging.INFO):
    """ 获取包内统一的 logger，处理器只在第一次调用时添加

    参数
    ----------
    name : str 可选
        logger 的名称
    level : int 可选
        日志级别

    返回
    ----------
    logging.Logger
        配置好的 logger
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(level)
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
