"""LiveText module - periodic capture, text recognition and translation."""

from .core import CaptureLoopController, Phase, SessionState
from .errors import (
    CameraUnavailable,
    LiveTextError,
    PipelineError,
    UnknownLanguageError,
)
from .languages import LANGUAGE_CATALOG, Language, LanguageCatalog, LanguageSlot

__all__ = [
    "CameraUnavailable",
    "CaptureLoopController",
    "LANGUAGE_CATALOG",
    "Language",
    "LanguageCatalog",
    "LanguageSlot",
    "LiveTextError",
    "Phase",
    "PipelineError",
    "SessionState",
    "UnknownLanguageError",
]
