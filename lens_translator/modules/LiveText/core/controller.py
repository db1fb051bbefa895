"""Capture loop controller - periodic capture, recognition and translation."""

import asyncio
import dataclasses
from types import MappingProxyType
from typing import Any, Callable, Optional

from lens_translator.core.asyncio_utils import cancel_and_wait, create_logged_task
from lens_translator.core.logging_utils import LoggerLike, ensure_structured_logger

from ..capture import CameraDevice, CameraHandle, CameraSource, CaptureArtifact
from ..config import LiveTextConfig
from ..defaults import (
    DEFAULT_CAPTURE_INTERVAL_S,
    DEFAULT_CLEAR_AFTER_S,
    DEFAULT_RESOLUTION_PRESET,
    DEFAULT_SCRIPT,
    DEFAULT_SOURCE_LANGUAGE,
    DEFAULT_TARGET_LANGUAGE,
    NO_TEXT_SENTINEL,
)
from ..errors import (
    ArtifactCleanupFailure,
    CameraUnavailable,
    CaptureFailure,
    PipelineError,
    RecognitionFailure,
    TranslationError,
)
from ..languages import LanguageCatalog, LanguageSlot
from ..recognition import TextRecognizer
from ..translation import Translator
from .state import Phase, SessionState

StateCallback = Callable[[SessionState], None]


class CaptureLoopController:
    """Drives the capture -> recognize -> translate -> display -> expire loop.

    A repeating tick starts a pipeline run only while the camera is ready and
    no other run is in flight; ticks that arrive during a run are dropped, not
    queued. The phase check and the switch to ``BUSY`` happen in the same event
    loop step, which is what keeps runs mutually exclusive.

    Every run that gets past cleanup schedules a clear of the displayed text
    ``clear_after_s`` seconds later. Clears are not tied to the newest result:
    an older run's clear will wipe a newer translation unless
    ``cancel_superseded`` is enabled. Pending clears also outlive
    :meth:`shutdown`.
    """

    def __init__(
        self,
        camera_source: CameraSource,
        recognizer: TextRecognizer,
        translator: Translator,
        *,
        catalog: Optional[LanguageCatalog] = None,
        source_language: str = DEFAULT_SOURCE_LANGUAGE,
        target_language: str = DEFAULT_TARGET_LANGUAGE,
        device: Optional[int | str] = None,
        resolution_preset: str = DEFAULT_RESOLUTION_PRESET,
        script: str = DEFAULT_SCRIPT,
        interval_s: float = DEFAULT_CAPTURE_INTERVAL_S,
        clear_after_s: float = DEFAULT_CLEAR_AFTER_S,
        cancel_superseded: bool = False,
        shutdown_timeout_s: float = 2.0,
        logger: LoggerLike = None,
    ) -> None:
        self._catalog = catalog or LanguageCatalog()
        self._catalog.require(source_language)
        self._catalog.require(target_language)

        self._camera_source = camera_source
        self._recognizer = recognizer
        self._translator = translator
        self._device = device
        self._resolution_preset = resolution_preset
        self._script = script
        self._interval_s = interval_s
        self._clear_after_s = clear_after_s
        self._cancel_superseded = cancel_superseded
        self._shutdown_timeout_s = shutdown_timeout_s
        self._logger = ensure_structured_logger(
            logger,
            component="CaptureLoop",
            fallback_name=__name__,
        )

        self._state = SessionState(source_language=source_language, target_language=target_language)
        self._subscribers: list[StateCallback] = []

        self._camera: Optional[CameraHandle] = None
        self._poll_task: Optional[asyncio.Task] = None
        self._tasks: set[asyncio.Task] = set()
        self._pending_clears: dict[int, asyncio.TimerHandle] = {}
        self._run_counter = 0

    @classmethod
    def from_config(
        cls,
        config: LiveTextConfig,
        camera_source: CameraSource,
        recognizer: TextRecognizer,
        translator: Translator,
        *,
        logger: LoggerLike = None,
    ) -> "CaptureLoopController":
        return cls(
            camera_source,
            recognizer,
            translator,
            source_language=config.languages.source,
            target_language=config.languages.target,
            device=config.capture.device,
            resolution_preset=config.capture.resolution_preset,
            script=config.recognition.script,
            interval_s=config.capture.interval_s,
            clear_after_s=config.expiry.clear_after_s,
            cancel_superseded=config.expiry.cancel_superseded,
            logger=logger,
        )

    # ------------------------------------------------------------------ State

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def catalog(self) -> LanguageCatalog:
        return self._catalog

    @property
    def interval_s(self) -> float:
        return self._interval_s

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    @property
    def pending_clear_count(self) -> int:
        return len(self._pending_clears)

    def subscribe(self, callback: StateCallback) -> None:
        """Subscribe to state changes; the callback is invoked immediately once."""
        self._subscribers.append(callback)
        callback(self._state)

    def unsubscribe(self, callback: StateCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _notify(self) -> None:
        for sub in list(self._subscribers):
            try:
                sub(self._state)
            except Exception as e:
                self._logger.error("Subscriber error: %s", e)

    def _bump(self, **deltas: int) -> None:
        metrics = self._state.metrics
        changes = {name: getattr(metrics, name) + delta for name, delta in deltas.items()}
        self._state.metrics = dataclasses.replace(metrics, **changes)

    def _record_failure(self, stage: str) -> None:
        metrics = self._state.metrics
        failures = dict(metrics.failures)
        failures[stage] = failures.get(stage, 0) + 1
        self._state.metrics = dataclasses.replace(metrics, failures=MappingProxyType(failures))

    # ------------------------------------------------------------------ Lifecycle

    async def initialize(self) -> bool:
        """Open the configured (or first available) camera.

        Returns True once the camera is ready. A missing or unopenable camera is
        reported by returning False with ``state.error`` set.
        """
        if self._state.phase is not Phase.NOT_READY:
            self._logger.warning("Cannot initialize camera: phase=%s", self._state.phase.name)
            return self._state.camera_ready

        try:
            cameras = await self._camera_source.list_available_cameras()
            device = self._select_device(cameras)
            self._logger.info("Opening camera %s (preset=%s)", device.name, self._resolution_preset)
            camera = await self._camera_source.open(device, self._resolution_preset)
        except CameraUnavailable as exc:
            return self._fail_initialization(str(exc))
        except Exception as exc:
            self._logger.debug("Camera open raised", exc_info=True)
            return self._fail_initialization(f"Failed to open camera: {exc}")

        if self._state.phase is Phase.CLOSED:
            # Shut down while the camera was opening.
            await camera.release()
            return False

        self._camera = camera
        self._state.phase = Phase.IDLE
        self._state.error = ""
        self._notify()
        self._logger.info("Camera ready")
        return True

    def _select_device(self, cameras: list[CameraDevice]) -> CameraDevice:
        if self._device is None:
            if not cameras:
                raise CameraUnavailable("No camera available")
            return cameras[0]

        for camera in cameras:
            if camera.index == self._device:
                return camera
        # Device paths are not probed; hand them to the source as given.
        return CameraDevice(index=self._device, name=f"Camera {self._device}")

    def _fail_initialization(self, message: str) -> bool:
        self._logger.error("Camera unavailable: %s", message)
        self._state.error = message
        self._notify()
        return False

    def start_polling(self, interval_s: Optional[float] = None) -> asyncio.Task:
        """Start the repeating tick. Must be called from the running loop."""
        if self.is_polling:
            self._logger.warning("Polling already running")
            return self._poll_task

        interval = self._interval_s if interval_s is None else interval_s
        if interval <= 0:
            raise ValueError(f"Polling interval must be positive, got {interval}")
        self._interval_s = interval

        self._poll_task = create_logged_task(
            self._poll_loop(interval),
            logger=self._logger,
            context="LiveTextPoll",
        )
        self._logger.info("Polling every %.2fs", interval)
        return self._poll_task

    async def stop_polling(self) -> None:
        await cancel_and_wait(self._poll_task, timeout=self._shutdown_timeout_s)
        self._poll_task = None

    async def _poll_loop(self, interval: float) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time() + interval
        while True:
            await asyncio.sleep(max(0.0, next_at - loop.time()))
            self.tick()
            now = loop.time()
            next_at += interval
            if next_at <= now:
                # Stalled past one or more ticks; resume the cadence from now.
                next_at = now + interval

    async def shutdown(self) -> None:
        """Stop ticking, let an in-flight run finish briefly, release the camera."""
        if self._state.phase is Phase.CLOSED:
            return

        await self.stop_polling()

        pending = [task for task in self._tasks if not task.done()]
        if pending:
            _, still_running = await asyncio.wait(pending, timeout=self._shutdown_timeout_s)
            for task in still_running:
                await cancel_and_wait(task, timeout=self._shutdown_timeout_s)

        self._state.phase = Phase.CLOSED

        camera, self._camera = self._camera, None
        if camera is not None:
            try:
                await camera.release()
            except Exception as e:
                self._logger.error("Failed to release camera: %s", e)

        try:
            await self._translator.close()
        except Exception as e:
            self._logger.warning("Failed to close translator: %s", e)

        if self._pending_clears:
            self._logger.debug("%d delayed clears still pending at shutdown", len(self._pending_clears))

        self._notify()
        self._logger.info("Capture loop closed")

    # ------------------------------------------------------------------ Pipeline

    def tick(self) -> Optional[asyncio.Task]:
        """Handle one timer firing; returns the started run or None if skipped."""
        self._bump(ticks=1)
        if self._camera is None or not self._state.camera_ready or self._state.busy:
            self._bump(skipped_ticks=1)
            self._logger.debug("Tick skipped (phase=%s)", self._state.phase.name)
            return None

        run_id = self._begin_run()
        return create_logged_task(
            self._run_pipeline(run_id),
            logger=self._logger,
            context=f"LiveTextRun-{run_id}",
            pending=self._tasks,
        )

    async def run_pipeline_once(self) -> bool:
        """Run one capture/recognize/translate pass now if the loop is idle."""
        if self._camera is None or self._state.phase is not Phase.IDLE:
            return False
        run_id = self._begin_run()
        await self._run_pipeline(run_id)
        return True

    def _begin_run(self) -> int:
        self._run_counter += 1
        self._state.phase = Phase.BUSY
        self._bump(runs_started=1)
        self._notify()
        return self._run_counter

    async def _run_pipeline(self, run_id: int) -> None:
        try:
            if await self._execute_stages(run_id):
                self._bump(runs_completed=1)
        except PipelineError as exc:
            self._record_failure(exc.stage)
            self._logger.warning("Run %d aborted at %s: %s", run_id, exc.stage, exc)
        except Exception:
            self._record_failure("unexpected")
            self._logger.exception("Run %d failed unexpectedly", run_id)
        finally:
            if self._state.phase is Phase.BUSY:
                self._state.phase = Phase.IDLE
            self._notify()

    async def _execute_stages(self, run_id: int) -> bool:
        artifact = await self._capture()
        try:
            text = await self._recognize(artifact)
            await self.translate_text(text, self._state.source_language, self._state.target_language)
        finally:
            cleaned = await self._discard(artifact)
        if not cleaned:
            return False
        self._schedule_clear(run_id)
        return True

    async def _capture(self) -> CaptureArtifact:
        camera = self._camera
        if camera is None:
            raise CaptureFailure("Camera released")
        try:
            return await camera.capture_frame()
        except CaptureFailure:
            raise
        except Exception as exc:
            raise CaptureFailure(str(exc)) from exc

    async def _recognize(self, artifact: CaptureArtifact) -> str:
        try:
            recognized = await self._recognizer.recognize(artifact.path, self._script)
        except RecognitionFailure:
            raise
        except Exception as exc:
            raise RecognitionFailure(str(exc)) from exc

        text = recognized.text
        self._logger.debug("Recognized %d characters from %s", len(text), artifact.path.name)
        return text if text else NO_TEXT_SENTINEL

    async def _discard(self, artifact: CaptureArtifact) -> bool:
        try:
            await asyncio.to_thread(artifact.delete)
        except ArtifactCleanupFailure as exc:
            self._record_failure(exc.stage)
            self._logger.warning("%s", exc)
            return False
        return True

    async def translate_text(self, text: str, from_code: str, to_code: str) -> Optional[str]:
        """Translate ``text`` and publish it; failures leave the old text in place."""
        try:
            result = await self._translator.translate(text, from_code, to_code)
        except Exception as exc:
            failure = exc if isinstance(exc, TranslationError) else TranslationError(str(exc))
            self._record_failure(failure.stage)
            self._logger.warning("Translation error (%s -> %s): %s", from_code, to_code, failure)
            return None

        self._state.last_translated_text = result.text
        self._state.last_translation = result
        self._bump(translations=1)
        self._notify()
        self._logger.debug("Translated %s -> %s: %r", from_code, to_code, result.text)
        return result.text

    # ------------------------------------------------------------------ Expiry

    def _schedule_clear(self, run_id: int) -> None:
        loop = asyncio.get_running_loop()
        if self._cancel_superseded:
            for handle in self._pending_clears.values():
                handle.cancel()
            self._pending_clears.clear()
        self._pending_clears[run_id] = loop.call_later(self._clear_after_s, self._expire_result, run_id)

    def _expire_result(self, run_id: int) -> None:
        self._pending_clears.pop(run_id, None)
        self._logger.debug("Clearing translated text (scheduled by run %d)", run_id)
        self._state.last_translated_text = ""
        self._state.last_translation = None
        self._notify()

    # ------------------------------------------------------------------ Languages

    def change_language(self, slot: LanguageSlot | str, code: str) -> Optional[asyncio.Task]:
        """Select a source or target language.

        Changing the target while a translation is displayed re-translates the
        displayed (already translated) text into the new target, so repeated
        changes compound. Returns that re-translation task, if one was started;
        none is started once the controller is closed.
        """
        slot = LanguageSlot.parse(slot)
        self._catalog.require(code)

        if slot is LanguageSlot.SOURCE:
            self._state.source_language = code
            self._notify()
            self._logger.info("Source language set to %s", code)
            return None

        self._state.target_language = code
        self._notify()
        self._logger.info("Target language set to %s", code)

        held = self._state.last_translated_text
        if not held:
            return None
        if self._state.phase is Phase.CLOSED:
            # Translator is closed; the selection is kept but nothing is re-sent.
            self._logger.debug("Skipping re-translation on closed controller")
            return None
        return create_logged_task(
            self.translate_text(held, self._state.source_language, code),
            logger=self._logger,
            context="LiveTextRetranslate",
            pending=self._tasks,
        )

    def describe(self) -> dict[str, Any]:
        data = self._state.to_dict()
        data["polling"] = self.is_polling
        data["interval_s"] = self._interval_s
        data["pending_clears"] = len(self._pending_clears)
        return data


__all__ = ["CaptureLoopController", "StateCallback"]
