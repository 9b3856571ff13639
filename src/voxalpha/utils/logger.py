"""
日誌工具模組

所有 logger 皆掛在 "voxalpha" 命名空間之下，預設不主動輸出，
讓使用者可以透過標準 logging 控制。

使用方式:
    from voxalpha.utils.logger import get_logger, TimingContext

    logger = get_logger("matching")
    with TimingContext("select_best", logger):
        ...
"""

from __future__ import annotations

import functools
import logging
import sys
import time
from typing import Callable, Optional

ROOT_LOGGER_NAME = "voxalpha"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_handler_installed = False

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    取得 voxalpha 子 logger

    Args:
        name: 子模組名稱 (例如 "matching.selector")，None 時回傳根 logger
    """
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name.startswith(ROOT_LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logger(level: int = logging.INFO, fmt: str = DEFAULT_FORMAT) -> logging.Logger:
    """
    為根 logger 安裝一個 StreamHandler (只安裝一次)

    Args:
        level: 日誌等級
        fmt: 輸出格式
    """
    global _handler_installed

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if not _handler_installed:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)
        _handler_installed = True
    logger.setLevel(level)
    return logger


def enable_debug_logging() -> logging.Logger:
    """開啟 DEBUG 等級日誌"""
    return setup_logger(level=logging.DEBUG)


def enable_timing_logging() -> logging.Logger:
    """只開啟計時相關日誌 (voxalpha.timing)"""
    setup_logger(level=logging.INFO)
    timing_logger = get_logger("timing")
    timing_logger.setLevel(logging.DEBUG)
    return timing_logger


class TimingContext:
    """
    計時上下文管理器

    離開區塊時以指定等級記錄耗時，並可選擇性呼叫
    callback(operation, elapsed_seconds)。
    """

    def __init__(
        self,
        operation: str,
        logger: Optional[logging.Logger] = None,
        level: int = logging.DEBUG,
        callback: Optional[Callable[[str, float], None]] = None,
    ):
        self.operation = operation
        self.logger = logger or get_logger("timing")
        self.level = level
        self.callback = callback
        self.elapsed = 0.0
        self._start = 0.0

    def __enter__(self) -> "TimingContext":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.elapsed = time.perf_counter() - self._start
        self.logger.log(self.level, f"[Timing] {self.operation}: {self.elapsed * 1000:.2f} ms")
        if self.callback is not None:
            try:
                self.callback(self.operation, self.elapsed)
            except Exception:
                self.logger.exception("timing 回呼執行失敗")


def log_timing(operation: Optional[str] = None, level: int = logging.DEBUG):
    """
    計時裝飾器

    範例:
        >>> @log_timing("load_gazetteer")
        ... def load():
        ...     ...
    """

    def decorator(func: Callable) -> Callable:
        name = operation or func.__qualname__

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with TimingContext(name, level=level):
                return func(*args, **kwargs)

        return wrapper

    return decorator
