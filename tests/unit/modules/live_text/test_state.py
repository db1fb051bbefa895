"""Unit tests for session state and overlay formatting."""

import dataclasses

import pytest

from lens_translator.modules.LiveText.core import LoopMetrics, Phase, SessionState, format_overlay


class TestFormatOverlay:

    def test_placeholder_when_empty(self):
        assert format_overlay("") == "Awaiting text capture..."

    def test_prefix_when_text_present(self):
        assert format_overlay("Hola mundo") == "Translated Text:\nHola mundo"

    def test_multiline_text_kept(self):
        assert format_overlay("a\nb") == "Translated Text:\na\nb"


class TestSessionState:

    def test_defaults(self):
        state = SessionState()

        assert state.phase is Phase.NOT_READY
        assert not state.camera_ready
        assert not state.busy
        assert state.source_language == "en"
        assert state.target_language == "es"
        assert state.overlay_text == "Awaiting text capture..."

    @pytest.mark.parametrize("phase,ready,busy", [
        (Phase.NOT_READY, False, False),
        (Phase.IDLE, True, False),
        (Phase.BUSY, True, True),
        (Phase.CLOSED, False, False),
    ])
    def test_phase_flags(self, phase, ready, busy):
        state = SessionState(phase=phase)

        assert state.camera_ready is ready
        assert state.busy is busy

    def test_to_dict(self):
        state = SessionState(phase=Phase.IDLE, last_translated_text="Bonjour")
        state.metrics = dataclasses.replace(state.metrics, ticks=3)

        data = state.to_dict()

        assert data["phase"] == "idle"
        assert data["overlay"] == "Translated Text:\nBonjour"
        assert data["metrics"]["ticks"] == 3
        assert data["metrics"]["failures"] == {}


class TestLoopMetrics:

    def test_failure_count_defaults_to_zero(self):
        assert LoopMetrics().failure_count("capture") == 0

    def test_is_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            LoopMetrics().ticks = 1
