"""Core module - session state and the capture loop controller."""

from .state import LoopMetrics, Phase, SessionState, format_overlay
from .controller import CaptureLoopController, StateCallback

__all__ = [
    "CaptureLoopController",
    "LoopMetrics",
    "Phase",
    "SessionState",
    "StateCallback",
    "format_overlay",
]
