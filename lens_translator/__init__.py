"""Live camera text translator."""

from __future__ import annotations

import asyncio
from importlib import metadata
from typing import Optional, Sequence

try:
    __version__ = metadata.version("lens-translator")
except metadata.PackageNotFoundError:  # pragma: no cover - local dev
    __version__ = "0.0.0"


def run(argv: Optional[Sequence[str]] = None) -> None:
    """Convenience wrapper that runs the async entry point and exits with its code."""
    from .modules.LiveText.main_live_text import main

    raise SystemExit(asyncio.run(main(list(argv) if argv is not None else None)))


__all__ = ["__version__", "run"]
