"""Capture module - camera discovery and snapshots."""

from .frame import CameraDevice, CaptureArtifact
from .camera import CameraHandle, CameraSource, OpenCVCameraHandle, OpenCVCameraSource

__all__ = [
    "CameraDevice",
    "CameraHandle",
    "CameraSource",
    "CaptureArtifact",
    "OpenCVCameraHandle",
    "OpenCVCameraSource",
]
