"""LiveText entry point.

Captures a still every few seconds, recognizes any text in it, translates the
text and logs the overlay. Optionally serves the overlay and the language
selectors over a localhost HTTP API.
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Optional

from lens_translator.cli.common import (
    LOG_LEVELS,
    add_common_cli_arguments,
    install_exception_handlers,
    install_signal_handlers,
    log_module_shutdown,
    log_module_startup,
    positive_float,
    positive_int,
)
from lens_translator.core.config_manager import get_config_manager
from lens_translator.core.logging_config import configure_logging
from lens_translator.core.logging_utils import get_module_logger

from .api import APIServer
from .capture import OpenCVCameraSource
from .config import LiveTextConfig, load_config
from .core import CaptureLoopController
from .defaults import RESOLUTION_PRESETS
from .display import ConsoleOverlay
from .errors import UnknownLanguageError
from .languages import LANGUAGE_CATALOG
from .recognition import TesseractRecognizer
from .translation import GoogleTranslator

MODULE_DIR = Path(__file__).resolve().parent
DEFAULT_CONFIG_PATH = MODULE_DIR / "config.txt"
MODULE_NAME = "LiveText"

logger = get_module_logger("MainLiveText")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Live camera text translator")
    add_common_cli_arguments(parser)

    language_codes = [language.code for language in LANGUAGE_CATALOG]

    parser.add_argument(
        "--interval",
        type=positive_float,
        default=None,
        help="Seconds between capture attempts (default: 5)",
    )
    parser.add_argument(
        "--device",
        type=str,
        default=None,
        help="Camera index or device path (default: first available)",
    )
    parser.add_argument(
        "--resolution",
        choices=list(RESOLUTION_PRESETS),
        default=None,
        help="Capture resolution preset (default: medium)",
    )
    parser.add_argument(
        "--from",
        dest="source_language",
        choices=language_codes,
        default=None,
        help="Source language code (default: en)",
    )
    parser.add_argument(
        "--to",
        dest="target_language",
        choices=language_codes,
        default=None,
        help="Target language code (default: es)",
    )

    api_group = parser.add_mutually_exclusive_group()
    api_group.add_argument(
        "--api",
        dest="api_enabled",
        action="store_true",
        default=None,
        help="Serve the overlay and language selectors over HTTP",
    )
    api_group.add_argument(
        "--no-api",
        dest="api_enabled",
        action="store_false",
        help="Do not start the HTTP API",
    )
    parser.add_argument(
        "--api-host",
        type=str,
        default=None,
        help="HTTP API bind address (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--api-port",
        type=positive_int,
        default=None,
        help="HTTP API port (default: 8080)",
    )

    return parser.parse_args(argv)


def cli_overrides(args: argparse.Namespace) -> dict:
    """Map parsed arguments onto config keys; unset arguments map to None."""
    return {
        "capture.interval_s": args.interval,
        "capture.device": args.device,
        "capture.resolution_preset": args.resolution,
        "languages.source": args.source_language,
        "languages.target": args.target_language,
        "api.enabled": args.api_enabled,
        "api.host": args.api_host,
        "api.port": args.api_port,
        "logging.level": args.log_level,
        "logging.file": args.log_file,
    }


class LiveTextApp:
    """Owns the controller and the optional API server for one process run."""

    def __init__(self, config: LiveTextConfig) -> None:
        self.config = config
        self.shutdown_event = asyncio.Event()
        self.translator = GoogleTranslator(
            endpoint=config.translation.endpoint,
            timeout_s=config.translation.timeout_s,
        )
        self.controller = CaptureLoopController.from_config(
            config,
            OpenCVCameraSource(
                max_devices=config.capture.max_devices,
                artifact_dir=config.capture.artifact_dir,
                jpeg_quality=config.capture.jpeg_quality,
            ),
            TesseractRecognizer(
                languages=config.recognition.languages,
                tesseract_cmd=config.recognition.tesseract_cmd,
            ),
            self.translator,
        )
        self.api_server: Optional[APIServer] = None
        if config.api.enabled:
            self.api_server = APIServer(self.controller, host=config.api.host, port=config.api.port)

    async def run(self) -> int:
        self.controller.subscribe(ConsoleOverlay())

        if not await self.controller.initialize():
            await self.translator.close()
            return 1

        self.controller.start_polling()
        if self.api_server is not None:
            await self.api_server.start()

        try:
            await self.shutdown_event.wait()
        finally:
            if self.api_server is not None:
                await self.api_server.stop()
            await self.controller.shutdown()
        return 0

    async def shutdown(self) -> None:
        logger.info("Shutdown requested")
        self.shutdown_event.set()


async def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the LiveText module."""
    args = parse_args(argv)

    config_path = args.config or DEFAULT_CONFIG_PATH
    raw = await get_config_manager().read_config_async(config_path)
    config = load_config(raw, cli_overrides(args))

    level = LOG_LEVELS.get(config.logging.level.lower())
    configure_logging(
        level if level is not None else LOG_LEVELS["info"],
        force=True,
        console=args.console_output,
        log_file=config.logging.file,
    )
    if level is None:
        logger.warning("Unknown log level %r, using info", config.logging.level)
    install_exception_handlers(logger, asyncio.get_running_loop())

    try:
        app = LiveTextApp(config)
    except UnknownLanguageError as e:
        logger.error("Invalid language configuration: %s", e)
        return 2

    log_module_startup(
        logger,
        MODULE_NAME,
        config_file=config_path,
        languages=f"{config.languages.source} -> {config.languages.target}",
        interval=f"{config.capture.interval_s:g}s",
        resolution=config.capture.resolution_preset,
        api=app.api_server.url if app.api_server else "disabled",
    )

    install_signal_handlers(app, asyncio.get_running_loop())
    exit_code = await app.run()
    log_module_shutdown(logger, MODULE_NAME)
    return exit_code


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
