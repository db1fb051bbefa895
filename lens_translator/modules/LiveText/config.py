"""Typed configuration helpers for LiveText."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from lens_translator.core.logging_utils import LoggerLike, ensure_structured_logger
from lens_translator.modules.LiveText.defaults import (
    DEFAULT_API_HOST,
    DEFAULT_API_PORT,
    DEFAULT_CAPTURE_INTERVAL_S,
    DEFAULT_CLEAR_AFTER_S,
    DEFAULT_JPEG_QUALITY,
    DEFAULT_MAX_DEVICES,
    DEFAULT_RESOLUTION_PRESET,
    DEFAULT_SCRIPT,
    DEFAULT_SOURCE_LANGUAGE,
    DEFAULT_TARGET_LANGUAGE,
    DEFAULT_TRANSLATE_ENDPOINT,
    DEFAULT_TRANSLATE_TIMEOUT_S,
    RESOLUTION_PRESETS,
    SCRIPT_LANGUAGES,
)

DEFAULT_LOG_LEVEL = "INFO"


@dataclass(slots=True)
class CaptureSettings:
    interval_s: float
    device: Optional[int | str]
    resolution_preset: str
    max_devices: int
    artifact_dir: Optional[Path]
    jpeg_quality: int


@dataclass(slots=True)
class ExpirySettings:
    clear_after_s: float
    cancel_superseded: bool


@dataclass(slots=True)
class RecognitionSettings:
    script: str
    languages: Optional[str]
    tesseract_cmd: Optional[str]


@dataclass(slots=True)
class TranslationSettings:
    endpoint: str
    timeout_s: float


@dataclass(slots=True)
class LanguageSettings:
    source: str
    target: str


@dataclass(slots=True)
class ApiSettings:
    enabled: bool
    host: str
    port: int


@dataclass(slots=True)
class LoggingSettings:
    level: str
    file: Optional[Path]


@dataclass(slots=True)
class LiveTextConfig:
    capture: CaptureSettings
    expiry: ExpirySettings
    recognition: RecognitionSettings
    translation: TranslationSettings
    languages: LanguageSettings
    api: ApiSettings
    logging: LoggingSettings


# ---------------------------------------------------------------------------
# Public API


def load_config(
    raw: Optional[Dict[str, Any]] = None,
    overrides: Optional[Dict[str, Any]] = None,
    *,
    logger: LoggerLike = None,
) -> LiveTextConfig:
    """Build a typed config from raw ``key = value`` pairs + optional overrides.

    Overrides with a value of ``None`` are ignored so argparse namespaces can be
    passed through without clobbering file values.
    """

    log = ensure_structured_logger(logger, fallback_name=__name__)
    merged: Dict[str, Any] = dict(raw or {})
    if overrides:
        for key, value in overrides.items():
            if value is not None:
                merged[key] = value

    preset = _coerce_str(merged, ("capture.resolution_preset", "resolution_preset"), DEFAULT_RESOLUTION_PRESET)
    if preset not in RESOLUTION_PRESETS:
        log.warning("Unknown resolution preset %r, using %s", preset, DEFAULT_RESOLUTION_PRESET)
        preset = DEFAULT_RESOLUTION_PRESET

    capture = CaptureSettings(
        interval_s=_coerce_positive_float(
            merged, ("capture.interval_s", "interval_s"), DEFAULT_CAPTURE_INTERVAL_S, logger=log
        ),
        device=_coerce_device(merged, ("capture.device", "device")),
        resolution_preset=preset,
        max_devices=max(1, _coerce_int(merged, ("capture.max_devices",), DEFAULT_MAX_DEVICES)),
        artifact_dir=_coerce_optional_path(merged, ("capture.artifact_dir",)),
        jpeg_quality=min(100, max(1, _coerce_int(merged, ("capture.jpeg_quality",), DEFAULT_JPEG_QUALITY))),
    )

    expiry = ExpirySettings(
        clear_after_s=_coerce_positive_float(
            merged, ("expiry.clear_after_s", "clear_after_s"), DEFAULT_CLEAR_AFTER_S, logger=log
        ),
        cancel_superseded=_coerce_bool(merged, ("expiry.cancel_superseded",), False),
    )

    script = _coerce_str(merged, ("recognition.script", "script"), DEFAULT_SCRIPT).lower()
    if script not in SCRIPT_LANGUAGES:
        log.warning("Unknown recognition script %r, using %s", script, DEFAULT_SCRIPT)
        script = DEFAULT_SCRIPT

    recognition = RecognitionSettings(
        script=script,
        languages=_coerce_optional_str(merged, ("recognition.languages",), None),
        tesseract_cmd=_coerce_optional_str(merged, ("recognition.tesseract_cmd", "tesseract_cmd"), None),
    )

    translation = TranslationSettings(
        endpoint=_coerce_str(merged, ("translation.endpoint",), DEFAULT_TRANSLATE_ENDPOINT),
        timeout_s=_coerce_positive_float(
            merged, ("translation.timeout_s",), DEFAULT_TRANSLATE_TIMEOUT_S, logger=log
        ),
    )

    languages = LanguageSettings(
        source=_coerce_str(merged, ("languages.source", "source_language"), DEFAULT_SOURCE_LANGUAGE),
        target=_coerce_str(merged, ("languages.target", "target_language"), DEFAULT_TARGET_LANGUAGE),
    )

    api = ApiSettings(
        enabled=_coerce_bool(merged, ("api.enabled",), False),
        host=_coerce_str(merged, ("api.host",), DEFAULT_API_HOST),
        port=_coerce_int(merged, ("api.port",), DEFAULT_API_PORT),
    )

    logging_settings = LoggingSettings(
        level=_coerce_str(merged, ("logging.level", "log_level"), DEFAULT_LOG_LEVEL),
        file=_coerce_optional_path(merged, ("logging.file", "log_file")),
    )

    return LiveTextConfig(
        capture=capture,
        expiry=expiry,
        recognition=recognition,
        translation=translation,
        languages=languages,
        api=api,
        logging=logging_settings,
    )


# ---------------------------------------------------------------------------
# Internal helpers


def _coerce_bool(data: Dict[str, Any], keys: Tuple[str, ...], default: bool) -> bool:
    raw = _first_present(data, keys)
    if raw is None:
        return default
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


def _coerce_optional_str(data: Dict[str, Any], keys: Tuple[str, ...], default: Optional[str]) -> Optional[str]:
    raw = _first_present(data, keys)
    if raw is None:
        return default
    text = str(raw).strip()
    return text if text else default


def _coerce_str(data: Dict[str, Any], keys: Tuple[str, ...], default: str) -> str:
    raw = _first_present(data, keys)
    if raw is None:
        return default
    text = str(raw).strip()
    return text or default


def _coerce_int(data: Dict[str, Any], keys: Tuple[str, ...], default: int) -> int:
    raw = _first_present(data, keys)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _coerce_positive_float(
    data: Dict[str, Any],
    keys: Tuple[str, ...],
    default: float,
    *,
    logger,
) -> float:
    raw = _first_present(data, keys)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.debug("Failed to parse float from %r, using default %s", raw, default)
        return default
    if value <= 0:
        logger.debug("Non-positive value %r for %s, using default %s", raw, keys[0], default)
        return default
    return value


def _coerce_device(data: Dict[str, Any], keys: Tuple[str, ...]) -> Optional[int | str]:
    raw = _first_present(data, keys)
    if raw is None:
        return None
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if not text or text.lower() in {"auto", "first"}:
        return None
    return int(text) if text.isdigit() else text


def _coerce_optional_path(data: Dict[str, Any], keys: Tuple[str, ...]) -> Optional[Path]:
    raw = _first_present(data, keys)
    if raw is None or raw == "":
        return None
    return Path(str(raw))


def _first_present(data: Dict[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        if key in data:
            return data.get(key)
    return None


__all__ = [
    "ApiSettings",
    "CaptureSettings",
    "ExpirySettings",
    "LanguageSettings",
    "LiveTextConfig",
    "LoggingSettings",
    "RecognitionSettings",
    "TranslationSettings",
    "load_config",
]
