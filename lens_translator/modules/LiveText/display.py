"""Headless overlay output."""

from typing import Optional

from lens_translator.core.logging_utils import LoggerLike, ensure_structured_logger

from .core.state import SessionState


class ConsoleOverlay:
    """State subscriber that logs the overlay string each time it changes."""

    def __init__(self, logger: LoggerLike = None) -> None:
        self._logger = ensure_structured_logger(logger, component="Overlay", fallback_name=__name__)
        self._last_text: Optional[str] = None
        self._last_error = ""

    @property
    def text(self) -> Optional[str]:
        return self._last_text

    def __call__(self, state: SessionState) -> None:
        if state.error and state.error != self._last_error:
            self._logger.error("%s", state.error)
        self._last_error = state.error

        overlay = state.overlay_text
        if overlay == self._last_text:
            return
        self._last_text = overlay
        self._logger.info("%s", overlay.replace("\n", " | "))
