"""
自定义日志处理器

- ErrorOnlyHandler: error.log 专用，只写入 ERROR 及以上
- ColoredConsoleHandler: 按级别给控制台输出上色
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from typing import Optional, TextIO


class ErrorOnlyHandler(TimedRotatingFileHandler):
    """按天轮转，低于 ERROR 的记录直接丢弃"""

    def emit(self, record: logging.LogRecord) -> None:
        if record.levelno >= logging.ERROR:
            super().emit(record)


class ColoredConsoleHandler(logging.StreamHandler):
    """
    彩色控制台日志处理器

    use_color 为 None 时自动检测: 只有输出流是终端才加 ANSI 颜色，
    重定向到文件或被测试捕获时输出纯文本
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[90m",
        logging.WARNING: "\033[93m",
        logging.ERROR: "\033[91m",
        logging.CRITICAL: "\033[91;1m",
    }
    RESET = "\033[0m"

    def __init__(self, stream: Optional[TextIO] = None, use_color: Optional[bool] = None):
        super().__init__(stream or sys.stderr)
        if use_color is None:
            isatty = getattr(self.stream, "isatty", None)
            use_color = bool(isatty and isatty())
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = self.LEVEL_COLORS.get(record.levelno)
        if not self.use_color or color is None:
            return message
        return f"{color}{message}{self.RESET}"
