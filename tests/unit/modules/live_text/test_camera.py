"""Unit tests for the OpenCV camera source (cv2.VideoCapture mocked)."""

from unittest.mock import MagicMock, patch

import cv2
import numpy as np
import pytest

from lens_translator.modules.LiveText.capture import CameraDevice, OpenCVCameraHandle, OpenCVCameraSource
from lens_translator.modules.LiveText.errors import (
    ArtifactCleanupFailure,
    CameraUnavailable,
    CaptureFailure,
)

CAMERA_MODULE = "lens_translator.modules.LiveText.capture.camera"


def make_capture(opened: bool = True, frame=None):
    cap = MagicMock()
    cap.isOpened.return_value = opened
    if frame is None:
        frame = np.zeros((480, 720, 3), dtype=np.uint8)
    cap.read.return_value = (True, frame)
    cap.get.side_effect = lambda prop: {cv2.CAP_PROP_FRAME_WIDTH: 720, cv2.CAP_PROP_FRAME_HEIGHT: 480}.get(prop, 0)
    return cap


class TestDiscovery:

    @pytest.mark.asyncio
    async def test_probes_until_first_missing_index(self):
        captures = [make_capture(), make_capture(), make_capture(opened=False)]
        source = OpenCVCameraSource(max_devices=4)

        with patch(f"{CAMERA_MODULE}._open_capture", side_effect=captures) as open_capture:
            cameras = await source.list_available_cameras()

        assert [camera.index for camera in cameras] == [0, 1]
        assert open_capture.call_count == 3
        for cap in captures:
            cap.release.assert_called_once()

    @pytest.mark.asyncio
    async def test_no_cameras(self):
        source = OpenCVCameraSource(max_devices=2)

        with patch(f"{CAMERA_MODULE}._open_capture", return_value=make_capture(opened=False)):
            assert await source.list_available_cameras() == []


class TestOpen:

    @pytest.mark.asyncio
    async def test_applies_resolution_preset(self, tmp_path):
        cap = make_capture()
        source = OpenCVCameraSource(artifact_dir=tmp_path)

        with patch(f"{CAMERA_MODULE}._open_capture", return_value=cap):
            handle = await source.open(CameraDevice(0, "Camera 0"), "high")

        cap.set.assert_any_call(cv2.CAP_PROP_FRAME_WIDTH, 1280)
        cap.set.assert_any_call(cv2.CAP_PROP_FRAME_HEIGHT, 720)
        cap.set.assert_any_call(cv2.CAP_PROP_BUFFERSIZE, 1)
        assert handle.is_open
        await handle.release()

    @pytest.mark.asyncio
    async def test_unopenable_camera(self):
        cap = make_capture(opened=False)
        source = OpenCVCameraSource()

        with patch(f"{CAMERA_MODULE}._open_capture", return_value=cap):
            with pytest.raises(CameraUnavailable):
                await source.open(CameraDevice(0, "Camera 0"), "medium")

        cap.release.assert_called_once()

    @pytest.mark.asyncio
    async def test_unknown_preset(self):
        source = OpenCVCameraSource()

        with pytest.raises(ValueError):
            await source.open(CameraDevice(0, "Camera 0"), "gigantic")


class TestCaptureFrame:

    @pytest.mark.asyncio
    async def test_writes_jpeg_artifact(self, tmp_path):
        handle = OpenCVCameraHandle(make_capture(), CameraDevice(0, "Camera 0"), artifact_dir=tmp_path)

        artifact = await handle.capture_frame()

        assert artifact.path.parent == tmp_path
        assert artifact.path.name.startswith("capture_")
        assert artifact.path.suffix == ".jpg"
        assert artifact.path.stat().st_size > 0
        assert artifact.size == (720, 480)
        assert artifact.frame_number == 1
        assert handle.frame_count == 1

        artifact.delete()
        assert not artifact.path.exists()

    @pytest.mark.asyncio
    async def test_artifact_names_are_unique(self, tmp_path):
        handle = OpenCVCameraHandle(make_capture(), CameraDevice(0, "Camera 0"), artifact_dir=tmp_path)

        first = await handle.capture_frame()
        second = await handle.capture_frame()

        assert first.path != second.path
        assert second.frame_number == 2

    @pytest.mark.asyncio
    async def test_missing_frame(self, tmp_path):
        cap = make_capture()
        cap.read.return_value = (False, None)
        handle = OpenCVCameraHandle(cap, CameraDevice(0, "Camera 0"), artifact_dir=tmp_path)

        with pytest.raises(CaptureFailure):
            await handle.capture_frame()
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_failed_write_removes_file(self, tmp_path):
        handle = OpenCVCameraHandle(make_capture(), CameraDevice(0, "Camera 0"), artifact_dir=tmp_path)

        with patch(f"{CAMERA_MODULE}.cv2.imwrite", return_value=False):
            with pytest.raises(CaptureFailure):
                await handle.capture_frame()
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_capture_after_release(self, tmp_path):
        cap = make_capture()
        handle = OpenCVCameraHandle(cap, CameraDevice(0, "Camera 0"), artifact_dir=tmp_path)

        await handle.release()
        await handle.release()

        cap.release.assert_called_once()
        assert not handle.is_open
        with pytest.raises(CaptureFailure):
            await handle.capture_frame()


class TestArtifactDelete:

    @pytest.mark.asyncio
    async def test_delete_missing_file(self, tmp_path):
        handle = OpenCVCameraHandle(make_capture(), CameraDevice(0, "Camera 0"), artifact_dir=tmp_path)
        artifact = await handle.capture_frame()
        artifact.path.unlink()

        with pytest.raises(ArtifactCleanupFailure):
            artifact.delete()


@pytest.mark.hardware
class TestRealCamera:

    @pytest.mark.asyncio
    async def test_capture_from_first_camera(self, tmp_path):
        source = OpenCVCameraSource(artifact_dir=tmp_path)
        cameras = await source.list_available_cameras()
        assert cameras, "No camera connected"

        handle = await source.open(cameras[0], "low")
        try:
            artifact = await handle.capture_frame()
            assert artifact.path.exists()
            artifact.delete()
        finally:
            await handle.release()
