"""Process-wide helpers: logging, config files and asyncio task plumbing."""

from .asyncio_utils import add_task_exception_logger, cancel_and_wait, create_logged_task
from .config_manager import ConfigManager, get_config_manager
from .logging_config import configure_logging
from .logging_utils import LoggerLike, StructuredLogger, ensure_structured_logger, get_module_logger

__all__ = [
    "ConfigManager",
    "LoggerLike",
    "StructuredLogger",
    "add_task_exception_logger",
    "cancel_and_wait",
    "configure_logging",
    "create_logged_task",
    "ensure_structured_logger",
    "get_config_manager",
    "get_module_logger",
]
