"""Exception hierarchy for the capture/recognize/translate pipeline."""

from __future__ import annotations

from typing import Iterable


class LiveTextError(Exception):
    """Base class for LiveText failures."""


class CameraUnavailable(LiveTextError):
    """No camera could be found or opened at initialization."""


class PipelineError(LiveTextError):
    """A stage of one pipeline run failed; the loop keeps going."""

    stage = "pipeline"


class CaptureFailure(PipelineError):
    stage = "capture"


class RecognitionFailure(PipelineError):
    stage = "recognition"


class TranslationError(PipelineError):
    """Translator transport, quota or payload failure."""

    stage = "translation"

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


# Name used in the error taxonomy of the pipeline.
TranslationFailure = TranslationError


class ArtifactCleanupFailure(PipelineError):
    stage = "cleanup"


class UnknownLanguageError(LiveTextError, ValueError):
    """Language code outside the fixed catalog."""

    def __init__(self, code: str, known: Iterable[str] = ()) -> None:
        known_codes = ", ".join(known)
        message = f"Unknown language code {code!r}"
        if known_codes:
            message += f" (expected one of: {known_codes})"
        super().__init__(message)
        self.code = code


__all__ = [
    "ArtifactCleanupFailure",
    "CameraUnavailable",
    "CaptureFailure",
    "LiveTextError",
    "PipelineError",
    "RecognitionFailure",
    "TranslationError",
    "TranslationFailure",
    "UnknownLanguageError",
]
