"""
日志配置和初始化

根日志记录器上最多挂三个处理器:
- 控制台 (彩色，输出到 stderr，不干扰 CLI 的 stdout)
- <prefix>.log 主日志 (按大小轮转)
- error.log (只记录 ERROR/CRITICAL，每天午夜轮转)
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from .handlers import ColoredConsoleHandler, ErrorOnlyHandler

if TYPE_CHECKING:
    from ..config import Settings

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _file_handlers(
    log_dir: Path,
    prefix: str,
    max_bytes: int,
    backup_count: int,
) -> list[logging.Handler]:
    log_dir.mkdir(parents=True, exist_ok=True)

    main_handler = RotatingFileHandler(
        log_dir / f"{prefix}.log",
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    main_handler.setLevel(logging.DEBUG)

    error_handler = ErrorOnlyHandler(
        log_dir / "error.log",
        when="midnight",
        backupCount=backup_count,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)

    return [main_handler, error_handler]


def setup_logging(
    log_dir: Optional[Union[str, Path]] = None,
    log_level: str = "INFO",
    log_format: str = DEFAULT_FORMAT,
    log_file_prefix: str = "skillpack",
    log_max_size_mb: int = 10,
    log_backup_count: int = 30,
    log_to_console: bool = True,
    log_to_file: bool = False,
) -> logging.Logger:
    """
    配置根日志记录器

    重复调用会先移除已有处理器，可以安全地多次调用。

    Args:
        log_dir: 日志目录，log_to_file 为 True 时才使用
        log_level: 日志级别名称 (大小写不敏感，无法识别时用 INFO)
        log_format: logging.Formatter 格式串
        log_file_prefix: 主日志文件名前缀
        log_max_size_mb: 主日志单个文件上限（MB）
        log_backup_count: 轮转保留的文件数量
        log_to_console: 是否输出到控制台
        log_to_file: 是否输出到文件

    Returns:
        根日志记录器
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = []
    if log_to_console:
        console_handler = ColoredConsoleHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG)
        handlers.append(console_handler)

    if log_to_file and log_dir:
        handlers.extend(
            _file_handlers(
                Path(log_dir),
                log_file_prefix,
                log_max_size_mb * 1024 * 1024,
                log_backup_count,
            )
        )

    formatter = logging.Formatter(log_format)
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    return root_logger


def setup_logging_from_settings(
    settings: "Settings",
    log_level: Optional[str] = None,
) -> logging.Logger:
    """按 Settings 中的 log_* 字段配置日志，log_level 可临时覆盖"""
    return setup_logging(
        log_dir=settings.log_dir_path,
        log_level=log_level or settings.log_level,
        log_format=settings.log_format,
        log_file_prefix=settings.log_file_prefix,
        log_max_size_mb=settings.log_max_size_mb,
        log_backup_count=settings.log_backup_count,
        log_to_console=settings.log_to_console,
        log_to_file=settings.log_to_file,
    )


def get_logger(name: str) -> logging.Logger:
    """获取指定名称的日志记录器"""
    return logging.getLogger(name)
