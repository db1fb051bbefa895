"""
API Server - aiohttp REST server for the LiveText loop.

Runs on the same event loop as the capture loop and exposes the overlay,
session state and language selectors over HTTP.
"""

from typing import Optional

from aiohttp import web

from lens_translator.core.logging_utils import get_module_logger

from ..defaults import DEFAULT_API_HOST, DEFAULT_API_PORT
from .middleware import error_handling_middleware, localhost_only_middleware
from .routes import setup_live_text_routes


logger = get_module_logger("APIServer")


def create_app(controller, *, localhost_only: bool = True) -> web.Application:
    """Create and configure the aiohttp application."""
    middlewares = [error_handling_middleware]
    if localhost_only:
        middlewares.insert(0, localhost_only_middleware)

    app = web.Application(middlewares=middlewares)
    app["controller"] = controller
    setup_live_text_routes(app)
    return app


class APIServer:
    """
    REST API server for a CaptureLoopController.

    Args:
        controller: Controller whose state and language selectors are exposed
        host: Host to bind to (default: localhost only)
        port: Port to bind to
        localhost_only: If True, reject requests from non-localhost peers
    """

    def __init__(
        self,
        controller,
        host: str = DEFAULT_API_HOST,
        port: int = DEFAULT_API_PORT,
        localhost_only: bool = True,
    ):
        self.controller = controller
        self.host = host
        self.port = port
        self.localhost_only = localhost_only

        self._app: Optional[web.Application] = None
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None
        self._running = False

    async def start(self) -> None:
        """Start the API server (non-blocking)."""
        if self._running:
            logger.warning("API server already running")
            return

        self._app = create_app(self.controller, localhost_only=self.localhost_only)
        self._runner = web.AppRunner(self._app, access_log=None)
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.host, self.port)
        await self._site.start()

        self._running = True
        logger.info("API server started on %s", self.url)

    async def stop(self) -> None:
        """Stop the API server gracefully."""
        if not self._running:
            return

        logger.info("Stopping API server...")

        if self._site:
            await self._site.stop()
            self._site = None

        if self._runner:
            await self._runner.cleanup()
            self._runner = None

        self._app = None
        self._running = False

        logger.info("API server stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"
