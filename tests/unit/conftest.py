"""Unit test fixtures for isolated, fast test execution.

Collaborators of the capture loop are replaced with in-memory fakes:
- FakeCameraSource / FakeCameraHandle write small real files so artifact
  deletion can be observed
- FakeRecognizer returns scripted text, optionally after a delay
- FakeTranslator records calls and returns table lookups or "[to] text"
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Callable, Iterable, Optional

import pytest
import pytest_asyncio

from lens_translator.modules.LiveText.capture import CameraDevice, CaptureArtifact
from lens_translator.modules.LiveText.core import CaptureLoopController
from lens_translator.modules.LiveText.recognition import RecognizedText
from lens_translator.modules.LiveText.translation import TranslationResult


# =============================================================================
# Fake collaborators
# =============================================================================

class FakeCameraHandle:
    def __init__(self, artifact_dir: Path) -> None:
        self.artifact_dir = artifact_dir
        self.captures = 0
        self.release_calls = 0
        self.fail_with: Optional[BaseException] = None
        self.artifacts: list[CaptureArtifact] = []

    async def capture_frame(self) -> CaptureArtifact:
        if self.fail_with is not None:
            raise self.fail_with
        self.captures += 1
        path = self.artifact_dir / f"capture_{self.captures}.jpg"
        path.write_bytes(b"\xff\xd8fake-jpeg\xff\xd9")
        artifact = CaptureArtifact(path=path, frame_number=self.captures, wall_time=time.time(), size=(720, 480))
        self.artifacts.append(artifact)
        return artifact

    async def release(self) -> None:
        self.release_calls += 1


class FakeCameraSource:
    def __init__(
        self,
        handle: FakeCameraHandle,
        cameras: Optional[list[CameraDevice]] = None,
        open_error: Optional[BaseException] = None,
    ) -> None:
        self.handle = handle
        self.cameras = [CameraDevice(index=0, name="Camera 0")] if cameras is None else cameras
        self.open_error = open_error
        self.opened: list[tuple[CameraDevice, str]] = []

    async def list_available_cameras(self) -> list[CameraDevice]:
        return list(self.cameras)

    async def open(self, device: CameraDevice, resolution_preset: str) -> FakeCameraHandle:
        self.opened.append((device, resolution_preset))
        if self.open_error is not None:
            raise self.open_error
        return self.handle


class FakeRecognizer:
    """Returns each scripted text in turn, repeating the last one."""

    def __init__(self, texts: Iterable[str] = ("Hello world",), delay: float = 0.0) -> None:
        self.texts = list(texts)
        self.delay = delay
        self.calls: list[tuple[Path, str]] = []
        self.seen_existing: list[bool] = []
        self.fail_with: Optional[BaseException] = None
        self.before_return: Optional[Callable[[Path], None]] = None
        self.active = 0
        self.max_active = 0

    async def recognize(self, image_path: Path, script: str = "latin") -> RecognizedText:
        self.calls.append((image_path, script))
        self.seen_existing.append(Path(image_path).exists())
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail_with is not None:
                raise self.fail_with
            if self.before_return is not None:
                self.before_return(Path(image_path))
            index = min(len(self.calls), len(self.texts)) - 1
            return RecognizedText(text=self.texts[index])
        finally:
            self.active -= 1


class FakeTranslator:
    def __init__(self, table: Optional[dict] = None, delay: float = 0.0) -> None:
        self.table = {("Hello world", "en", "es"): "Hola mundo"}
        self.table.update(table or {})
        self.delay = delay
        self.calls: list[tuple[str, str, str]] = []
        self.fail_with: Optional[BaseException] = None
        self.close_calls = 0

    async def translate(self, text: str, from_code: str, to_code: str) -> TranslationResult:
        self.calls.append((text, from_code, to_code))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        translated = self.table.get((text, from_code, to_code), f"[{to_code}] {text}")
        return TranslationResult(text=translated, source=from_code, target=to_code)

    async def close(self) -> None:
        self.close_calls += 1


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def camera_handle(tmp_path: Path) -> FakeCameraHandle:
    artifact_dir = tmp_path / "captures"
    artifact_dir.mkdir()
    return FakeCameraHandle(artifact_dir)


@pytest.fixture
def camera_source(camera_handle: FakeCameraHandle) -> FakeCameraSource:
    return FakeCameraSource(camera_handle)


@pytest.fixture
def recognizer() -> FakeRecognizer:
    return FakeRecognizer()


@pytest.fixture
def translator() -> FakeTranslator:
    return FakeTranslator()


@pytest.fixture
def make_controller(camera_source, recognizer, translator):
    """Factory for controllers wired to the fakes, with short timings."""

    def _make(**kwargs) -> CaptureLoopController:
        kwargs.setdefault("interval_s", 0.05)
        kwargs.setdefault("clear_after_s", 5.0)
        kwargs.setdefault("shutdown_timeout_s", 1.0)
        return CaptureLoopController(
            kwargs.pop("camera_source", camera_source),
            kwargs.pop("recognizer", recognizer),
            kwargs.pop("translator", translator),
            **kwargs,
        )

    return _make


@pytest_asyncio.fixture
async def ready_controller(make_controller):
    """An initialized controller; shut down after the test."""
    controller = make_controller()
    assert await controller.initialize()
    yield controller
    await controller.shutdown()
