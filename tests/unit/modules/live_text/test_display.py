"""Unit tests for the console overlay subscriber."""

import logging

from lens_translator.modules.LiveText.core import Phase, SessionState
from lens_translator.modules.LiveText.display import ConsoleOverlay


class TestConsoleOverlay:

    def test_logs_only_on_change(self, caplog):
        overlay = ConsoleOverlay()
        state = SessionState(phase=Phase.IDLE)

        with caplog.at_level(logging.INFO, logger="lens_translator"):
            overlay(state)
            overlay(state)
            state.last_translated_text = "Hola mundo"
            overlay(state)

        messages = [record.getMessage() for record in caplog.records]
        assert messages == [
            "[Overlay] Awaiting text capture...",
            "[Overlay] Translated Text: | Hola mundo",
        ]
        assert overlay.text == "Translated Text:\nHola mundo"

    def test_logs_new_errors(self, caplog):
        overlay = ConsoleOverlay()
        state = SessionState(error="No camera available")

        with caplog.at_level(logging.INFO, logger="lens_translator"):
            overlay(state)
            overlay(state)

        errors = [record for record in caplog.records if record.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "No camera available" in errors[0].getMessage()
