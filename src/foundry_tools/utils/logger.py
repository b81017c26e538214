"""
Unified logging system for the Foundry localisation engine.

Provides:
- Structured logging with levels (DEBUG, INFO, WARNING, ERROR)
- Rich console output and optional file output
- Performance timing and progress tracking
- Custom exception hierarchy
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn

_console = Console(stderr=True)

LOGGER_NAME = "foundry_tools"


# ========================================
# 自定义异常层次结构
# ========================================

class FoundryToolsError(Exception):
    """本地化引擎基础异常"""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class FileOperationError(FoundryToolsError):
    """文件操作错误（读取、写入、编码等）"""

    def __init__(self, message: str, file_path: Optional[Path] = None, **kwargs):
        details = {"file_path": str(file_path) if file_path else None, **kwargs}
        super().__init__(message, details)
        self.file_path = file_path


class ScriptParseError(FoundryToolsError):
    """脚本无法解析（语法错误），该文件不产生任何条目"""

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        dialect: Optional[str] = None,
        **kwargs
    ):
        details = {"line": line, "column": column, "dialect": dialect, **kwargs}
        super().__init__(message, details)
        self.line = line
        self.column = column
        self.dialect = dialect


class MalformedDocumentError(FoundryToolsError):
    """数据文档不是合法的 JSON"""

    def __init__(self, message: str, position: Optional[int] = None, **kwargs):
        details = {"position": position, **kwargs}
        super().__init__(message, details)
        self.position = position


class PathCollisionError(FoundryToolsError):
    """属性名中包含保留分隔符，扁平化后的路径无法还原"""

    def __init__(self, message: str, key: Optional[str] = None, separator: Optional[str] = None, **kwargs):
        details = {"key": key, "separator": separator, **kwargs}
        super().__init__(message, details)
        self.key = key
        self.separator = separator


class ConfigurationError(FoundryToolsError):
    """配置错误（缺少必要参数、无效值等）"""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        details = {"config_key": config_key, **kwargs}
        super().__init__(message, details)
        self.config_key = config_key


# ========================================
# 日志类
# ========================================


class TranslationLogger:
    """Logger wrapper with convenience methods."""

    def __init__(
        self,
        name: str = LOGGER_NAME,
        level: int = logging.INFO,
        log_file: Optional[Path] = None,
        use_rich: bool = True
    ):
        """
        Initialize logger.

        Args:
            name: Logger name
            level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_file: Optional file path for log output
            use_rich: Use rich formatting for console output
        """
        self.use_rich = use_rich
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)
        self.logger.handlers = []  # Clear existing handlers

        # Console handler
        if use_rich:
            console_handler = RichHandler(
                console=_console,
                rich_tracebacks=True,
                markup=False,
                show_time=True,
                show_path=False
            )
        else:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))

        console_handler.setLevel(level)
        self.logger.addHandler(console_handler)

        # File handler
        if log_file:
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            file_handler.setLevel(logging.DEBUG)  # Log everything to file
            self.logger.addHandler(file_handler)

    def debug(self, msg: str, *args, **kwargs):
        """Log debug message."""
        self.logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        """Log info message."""
        self.logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        """Log warning message."""
        self.logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        """Log error message."""
        self.logger.error(msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        """Log exception with traceback."""
        self.logger.exception(msg, *args, **kwargs)

    @contextmanager
    def timer(self, operation: str, level: int = logging.INFO):
        """
        Context manager for timing operations.

        Usage:
            with logger.timer("Scanning module"):
                ...
        """
        start = time.time()
        self.logger.log(level, f"Starting: {operation}")
        try:
            yield
        finally:
            elapsed = time.time() - start
            self.logger.log(level, f"Completed: {operation} (took {elapsed:.2f}s)")

    @contextmanager
    def progress(
        self,
        total: int,
        description: str = "Processing",
        disable: bool = False
    ):
        """
        Context manager for progress tracking.

        Usage:
            with logger.progress(len(files), "Scanning") as update:
                for f in files:
                    update(1)
        """
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=_console,
            disable=disable,
        ) as progress:
            task = progress.add_task(description, total=total)

            def update(advance: int = 1):
                progress.update(task, advance=advance)

            yield update


# Global logger instance
_default_logger: Optional[TranslationLogger] = None


def get_logger(
    name: str = LOGGER_NAME,
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    use_rich: bool = True
) -> TranslationLogger:
    """
    Get or create global logger instance.

    Args:
        name: Logger name
        level: Logging level
        log_file: Optional log file path
        use_rich: Use rich formatting

    Returns:
        TranslationLogger instance
    """
    global _default_logger
    if _default_logger is None:
        _default_logger = TranslationLogger(
            name=name,
            level=level,
            log_file=log_file,
            use_rich=use_rich
        )
    return _default_logger


def setup_logger(
    name: str = LOGGER_NAME,
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    use_rich: bool = True
) -> TranslationLogger:
    """
    Setup and configure global logger, replacing any previous one.

    Returns:
        Configured TranslationLogger instance
    """
    global _default_logger
    _default_logger = TranslationLogger(
        name=name,
        level=level,
        log_file=log_file,
        use_rich=use_rich
    )
    return _default_logger
