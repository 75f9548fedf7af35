"""
日志配置
"""
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """配置根日志器（应用启动时调用一次）"""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
