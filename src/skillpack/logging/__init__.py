"""
skillpack 日志系统

功能:
- 主日志文件输出（按大小轮转）
- 分离 error.log（只记录 ERROR/CRITICAL，按天轮转）
- 控制台彩色输出
"""

from .config import get_logger, setup_logging, setup_logging_from_settings
from .handlers import ColoredConsoleHandler, ErrorOnlyHandler

__all__ = [
    "setup_logging",
    "setup_logging_from_settings",
    "get_logger",
    "ColoredConsoleHandler",
    "ErrorOnlyHandler",
]
