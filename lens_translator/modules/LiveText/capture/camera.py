"""Camera source backed by OpenCV."""

import os
import sys

# Disable MSMF hardware transforms on Windows to fix slow camera initialization.
# See: https://github.com/opencv/opencv/issues/17687
if sys.platform == "win32":
    os.environ.setdefault("OPENCV_VIDEOIO_MSMF_ENABLE_HW_TRANSFORMS", "0")

import asyncio
import tempfile
import threading
import time
from pathlib import Path
from typing import Optional, Protocol

import cv2

from lens_translator.core.logging_utils import get_module_logger

from ..defaults import DEFAULT_JPEG_QUALITY, DEFAULT_MAX_DEVICES, RESOLUTION_PRESETS
from ..errors import CameraUnavailable, CaptureFailure
from .frame import CameraDevice, CaptureArtifact

logger = get_module_logger(__name__)


class CameraHandle(Protocol):
    """An opened camera that can snapshot frames to disk."""

    async def capture_frame(self) -> CaptureArtifact: ...

    async def release(self) -> None: ...


class CameraSource(Protocol):
    """Enumerates and opens cameras."""

    async def list_available_cameras(self) -> list[CameraDevice]: ...

    async def open(self, device: CameraDevice, resolution_preset: str) -> CameraHandle: ...


def _open_capture(index: int | str) -> "cv2.VideoCapture":
    # Explicit backend avoids "DSHOW can't capture by index" warnings on Windows.
    if sys.platform == "win32" and isinstance(index, int):
        return cv2.VideoCapture(index, cv2.CAP_MSMF)
    return cv2.VideoCapture(index)


class OpenCVCameraHandle:
    """Wraps one ``cv2.VideoCapture`` and writes snapshots as JPEG files.

    OpenCV calls block, so every read and write runs in a worker thread. A
    lock keeps the capture object from being read and released concurrently.
    """

    def __init__(
        self,
        capture: "cv2.VideoCapture",
        device: CameraDevice,
        *,
        artifact_dir: Optional[Path] = None,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
    ) -> None:
        self._cap: Optional["cv2.VideoCapture"] = capture
        self._device = device
        self._artifact_dir = Path(artifact_dir) if artifact_dir else Path(tempfile.gettempdir())
        self._jpeg_quality = jpeg_quality
        self._lock = threading.Lock()
        self._frame_number = 0

    @property
    def device(self) -> CameraDevice:
        return self._device

    @property
    def is_open(self) -> bool:
        return self._cap is not None

    @property
    def frame_count(self) -> int:
        return self._frame_number

    async def capture_frame(self) -> CaptureArtifact:
        return await asyncio.to_thread(self._capture_sync)

    def _capture_sync(self) -> CaptureArtifact:
        with self._lock:
            if self._cap is None or not self._cap.isOpened():
                raise CaptureFailure(f"Camera {self._device.name} is not open")
            ok, frame = self._cap.read()
            if not ok or frame is None:
                raise CaptureFailure(f"Camera {self._device.name} returned no frame")
            self._frame_number += 1
            frame_number = self._frame_number

        wall_time = time.time()
        self._artifact_dir.mkdir(parents=True, exist_ok=True)
        fd, raw_path = tempfile.mkstemp(prefix="capture_", suffix=".jpg", dir=self._artifact_dir)
        os.close(fd)
        path = Path(raw_path)

        written = cv2.imwrite(str(path), frame, [int(cv2.IMWRITE_JPEG_QUALITY), self._jpeg_quality])
        if not written:
            path.unlink(missing_ok=True)
            raise CaptureFailure(f"Failed to write capture to {path}")

        height, width = frame.shape[:2]
        logger.debug("Captured frame %d (%dx%d) -> %s", frame_number, width, height, path)
        return CaptureArtifact(
            path=path,
            frame_number=frame_number,
            wall_time=wall_time,
            size=(width, height),
        )

    async def release(self) -> None:
        await asyncio.to_thread(self._release_sync)

    def _release_sync(self) -> None:
        with self._lock:
            if self._cap is None:
                return
            self._cap.release()
            self._cap = None
        logger.info("Camera %s released after %d captures", self._device.name, self._frame_number)


class OpenCVCameraSource:
    """Discovers cameras by probing OpenCV device indices."""

    def __init__(
        self,
        *,
        max_devices: int = DEFAULT_MAX_DEVICES,
        artifact_dir: Optional[Path] = None,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
    ) -> None:
        self._max_devices = max_devices
        self._artifact_dir = artifact_dir
        self._jpeg_quality = jpeg_quality

    async def list_available_cameras(self) -> list[CameraDevice]:
        return await asyncio.to_thread(self._discover_sync)

    def _discover_sync(self) -> list[CameraDevice]:
        cameras: list[CameraDevice] = []
        for index in range(self._max_devices):
            cap = _open_capture(index)
            try:
                if not cap or not cap.isOpened():
                    break
                cameras.append(CameraDevice(index=index, name=f"Camera {index}"))
                logger.debug("Discovered camera at index %d", index)
            finally:
                if cap:
                    cap.release()
        logger.debug("Discovered %d cameras", len(cameras))
        return cameras

    async def open(self, device: CameraDevice, resolution_preset: str) -> OpenCVCameraHandle:
        return await asyncio.to_thread(self._open_sync, device, resolution_preset)

    def _open_sync(self, device: CameraDevice, resolution_preset: str) -> OpenCVCameraHandle:
        if resolution_preset not in RESOLUTION_PRESETS:
            raise ValueError(f"Unknown resolution preset: {resolution_preset!r}")
        width, height = RESOLUTION_PRESETS[resolution_preset]

        index = device.index
        if isinstance(index, str) and index.isdigit():
            index = int(index)

        start_time = time.time()
        cap = _open_capture(index)
        logger.debug("cv2.VideoCapture(%s) took %.2f seconds", index, time.time() - start_time)

        if not cap or not cap.isOpened():
            if cap:
                cap.release()
            raise CameraUnavailable(f"Failed to open camera: {device.name}")

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        # Keep only the newest frame so snapshots are not stale.
        cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)

        actual = (int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)), int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)))
        logger.info(
            "Camera opened: device=%s, preset=%s, requested=%dx%d, actual=%dx%d",
            device.name,
            resolution_preset,
            width,
            height,
            *actual,
        )
        return OpenCVCameraHandle(
            cap,
            device,
            artifact_dir=self._artifact_dir,
            jpeg_quality=self._jpeg_quality,
        )


__all__ = ["CameraHandle", "CameraSource", "OpenCVCameraHandle", "OpenCVCameraSource"]
