"""Capture artifact data structures."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from ..errors import ArtifactCleanupFailure


@dataclass(frozen=True, slots=True)
class CameraDevice:
    """A camera the source can open."""

    index: int | str  # OpenCV device index or path
    name: str


@dataclass(frozen=True, slots=True)
class CaptureArtifact:
    """Snapshot written to disk for one pipeline run, deleted after recognition."""

    path: Path
    frame_number: int  # Sequential capture number for this camera handle
    wall_time: float  # time.time() when the frame was read
    size: tuple[int, int]  # (width, height)

    def delete(self) -> None:
        try:
            os.remove(self.path)
        except OSError as exc:
            raise ArtifactCleanupFailure(f"Could not delete capture {self.path}: {exc}") from exc
