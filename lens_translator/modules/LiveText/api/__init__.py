"""HTTP API for the LiveText loop."""

from .routes import setup_live_text_routes
from .server import APIServer, create_app

__all__ = ["APIServer", "create_app", "setup_live_text_routes"]
