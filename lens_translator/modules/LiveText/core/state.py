"""State definitions for the LiveText capture loop."""

from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ..defaults import (
    DEFAULT_SOURCE_LANGUAGE,
    DEFAULT_TARGET_LANGUAGE,
    OVERLAY_PLACEHOLDER,
    OVERLAY_PREFIX,
)
from ..translation import TranslationResult


class Phase(Enum):
    """Controller lifecycle phase."""

    NOT_READY = auto()  # Camera not initialized yet (or init failed)
    IDLE = auto()
    BUSY = auto()  # One pipeline run in flight
    CLOSED = auto()


@dataclass(frozen=True)
class LoopMetrics:
    """Loop counters - immutable snapshot."""

    ticks: int = 0
    skipped_ticks: int = 0  # Ticks that found the camera not ready or a run in flight
    runs_started: int = 0
    runs_completed: int = 0
    translations: int = 0  # Successful translate calls (runs + language changes)
    failures: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))

    def failure_count(self, stage: str) -> int:
        return self.failures.get(stage, 0)


def format_overlay(translated_text: str) -> str:
    if translated_text:
        return f"{OVERLAY_PREFIX}{translated_text}"
    return OVERLAY_PLACEHOLDER


@dataclass
class SessionState:
    """Mutable session state, written by the controller and read by displays."""

    phase: Phase = Phase.NOT_READY
    last_translated_text: str = ""
    last_translation: Optional[TranslationResult] = None
    source_language: str = DEFAULT_SOURCE_LANGUAGE
    target_language: str = DEFAULT_TARGET_LANGUAGE
    error: str = ""
    metrics: LoopMetrics = field(default_factory=LoopMetrics)

    @property
    def camera_ready(self) -> bool:
        return self.phase in (Phase.IDLE, Phase.BUSY)

    @property
    def busy(self) -> bool:
        return self.phase is Phase.BUSY

    @property
    def overlay_text(self) -> str:
        return format_overlay(self.last_translated_text)

    def to_dict(self) -> dict[str, Any]:
        metrics = self.metrics
        return {
            "phase": self.phase.name.lower(),
            "camera_ready": self.camera_ready,
            "busy": self.busy,
            "last_translated_text": self.last_translated_text,
            "overlay": self.overlay_text,
            "source_language": self.source_language,
            "target_language": self.target_language,
            "error": self.error,
            "metrics": {
                "ticks": metrics.ticks,
                "skipped_ticks": metrics.skipped_ticks,
                "runs_started": metrics.runs_started,
                "runs_completed": metrics.runs_completed,
                "translations": metrics.translations,
                "failures": dict(metrics.failures),
            },
        }
