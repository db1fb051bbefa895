from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Optional


LOG_LEVELS: dict[str, int] = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def add_common_cli_arguments(
    parser: argparse.ArgumentParser,
    *,
    include_config: bool = True,
    include_console_control: bool = True,
    default_console_output: bool = True,
) -> None:
    # Defaults are None so values from the config file survive unless overridden.
    parser.add_argument(
        "--log-level",
        choices=sorted(LOG_LEVELS.keys()),
        default=None,
        help="Logging verbosity (default: info)",
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Optional path to write logs to (rotated)",
    )

    if include_config:
        parser.add_argument(
            "--config",
            type=Path,
            default=None,
            help="Optional key = value configuration file; CLI arguments take precedence",
        )

    if include_console_control:
        console_group = parser.add_mutually_exclusive_group()
        console_group.add_argument(
            "--console",
            dest="console_output",
            action="store_true",
            default=default_console_output,
            help="Log to the console (default)",
        )
        console_group.add_argument(
            "--no-console",
            dest="console_output",
            action="store_false",
            help="Log to file only (no console output)",
        )


def _positive_number(value: str, typ: type, name: str):
    """Generic positive number validator for argparse."""
    try:
        parsed = typ(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Value must be a {name}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("Value must be positive")
    return parsed


def positive_int(value: str) -> int:
    return _positive_number(value, int, "integer")


def positive_float(value: str) -> float:
    return _positive_number(value, float, "number")


def install_exception_handlers(
    logger: Any,
    loop: Optional[asyncio.AbstractEventLoop] = None
) -> None:
    def handle_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logger.critical(
            "Uncaught exception",
            exc_info=(exc_type, exc_value, exc_traceback)
        )

    sys.excepthook = handle_exception

    if loop is not None:
        def handle_asyncio_exception(loop, context):
            exception = context.get("exception")
            message = context.get("message", "Unhandled asyncio exception")
            if exception:
                logger.error("Asyncio exception: %s", message, exc_info=exception)
            else:
                logger.error("Asyncio error: %s, context: %s", message, context)

        loop.set_exception_handler(handle_asyncio_exception)


def install_signal_handlers(supervisor: Any, loop: asyncio.AbstractEventLoop) -> None:
    """Register SIGINT/SIGTERM handlers that ask the supervisor to shut down."""

    shutdown_event = getattr(supervisor, "shutdown_event", None)

    def signal_handler():
        if shutdown_event is not None and shutdown_event.is_set():
            return
        loop.create_task(supervisor.shutdown())

    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, signal_handler)


def log_module_startup(logger: Any, module_name: str, **extra_info) -> None:
    logger.info("=" * 60)
    logger.info("%s starting", module_name)
    for key, value in extra_info.items():
        display_key = key.replace("_", " ").title()
        logger.info("%s: %s", display_key, value)
    logger.info("=" * 60)


def log_module_shutdown(logger: Any, module_name: str) -> None:
    logger.info("=" * 60)
    logger.info("%s stopped", module_name)
    logger.info("=" * 60)
