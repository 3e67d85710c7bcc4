"""
日志配置模块
使用 loguru 提供结构化日志
"""
import os
import sys
from loguru import logger
from typing import Optional


def setup_logger(
    log_level: str = 'INFO',
    log_file: Optional[str] = None,
    rotation: str = '10 MB',
    retention: str = '7 days'
) -> None:
    """
    配置日志系统

    Args:
        log_level: 日志级别 (DEBUG, INFO, WARNING, ERROR)
        log_file: 日志文件路径（可选）
        rotation: 日志轮转大小
        retention: 日志保留时间
    """
    logger.remove()

    level = os.environ.get('LOG_LEVEL', log_level).upper()

    # {extra[name]} 由 get_logger 绑定，未绑定时回退到模块名
    console_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    )
    logger.configure(extra={'name': 'bili_backup'})

    logger.add(
        sys.stderr,
        format=console_format,
        level=level,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if log_file:
        file_format = (
            "{time:YYYY-MM-DD HH:mm:ss} | "
            "{level: <8} | "
            "{extra[name]}:{function}:{line} | "
            "{message}"
        )
        logger.add(
            log_file,
            format=file_format,
            level=level,
            rotation=rotation,
            retention=retention,
            compression='zip',
            encoding='utf-8',
        )

    logger.info(f"Logger initialized with level: {level}")


def get_logger(name: str = None):
    """
    获取日志器实例

    Args:
        name: 日志器名称

    Returns:
        logger 实例
    """
    if name:
        return logger.bind(name=name)
    return logger


def log_sync_event(domain: str, event: str, details: dict = None):
    """记录备份/恢复事件"""
    msg = f"Sync Event: domain={domain}, event={event}"
    if details:
        msg += f", details={details}"
    logger.info(msg)
