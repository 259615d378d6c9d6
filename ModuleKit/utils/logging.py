"""
日志工具 - 配置日志系统
Logging utility - configures the logging system.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

import colorlog

ROOT_LOGGER = "ModuleKit"

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# 标签化日志的前缀
_LABEL = "ModuleKit"


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
) -> logging.Logger:
    """
    配置日志系统
    Configure the logging system.

    重复调用会替换之前安装的处理器。
    Calling it again replaces the handlers installed before.
    """
    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(root_logger.handlers):
        if getattr(handler, "_modulekit_handler", False):
            root_logger.removeHandler(handler)
            handler.close()

    # 控制台输出（带颜色）
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(
        colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s [%(levelname)s]%(reset)s %(name)s: %(message)s",
            datefmt=_DATE_FORMAT,
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )
    )
    console_handler._modulekit_handler = True
    root_logger.addHandler(console_handler)

    # 文件输出（可选）
    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
        file_handler._modulekit_handler = True
        root_logger.addHandler(file_handler)

    root_logger.debug("日志系统已初始化 (级别=%s)", level)
    return root_logger


def log_labeled(message: str, *args: object, level: int = logging.INFO) -> None:
    """
    输出带标签的日志（启动横幅等）
    Log a labelled message (startup banners and the like).
    """
    logging.getLogger(ROOT_LOGGER).log(level, f"{_LABEL} · {message}", *args)
