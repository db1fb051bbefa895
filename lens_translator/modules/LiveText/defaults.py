"""
Shared default values for the LiveText module.

Keep this module lightweight - it's imported by the CLI before anything heavy.
"""

DEFAULT_CAPTURE_INTERVAL_S = 5.0
DEFAULT_CLEAR_AFTER_S = 5.0
DEFAULT_RESOLUTION_PRESET = "medium"
DEFAULT_MAX_DEVICES = 4
DEFAULT_JPEG_QUALITY = 90
DEFAULT_SCRIPT = "latin"
DEFAULT_SOURCE_LANGUAGE = "en"
DEFAULT_TARGET_LANGUAGE = "es"
DEFAULT_TRANSLATE_ENDPOINT = "https://translate.googleapis.com/translate_a/single"
DEFAULT_TRANSLATE_TIMEOUT_S = 10.0
DEFAULT_API_HOST = "127.0.0.1"
DEFAULT_API_PORT = 8080

NO_TEXT_SENTINEL = "No text recognized."
OVERLAY_PREFIX = "Translated Text:\n"
OVERLAY_PLACEHOLDER = "Awaiting text capture..."

# (width, height) per named preset, matching the mobile camera plugin presets.
RESOLUTION_PRESETS = {
    "low": (320, 240),
    "medium": (720, 480),
    "high": (1280, 720),
    "veryHigh": (1920, 1080),
    "ultraHigh": (3840, 2160),
    "max": (4096, 2160),
}

# Recognition script -> Tesseract language pack(s).
SCRIPT_LANGUAGES = {
    "latin": "eng+spa+fra+deu",
    "chinese": "chi_sim",
    "devanagari": "hin",
    "japanese": "jpn",
    "korean": "kor",
}
