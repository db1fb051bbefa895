"""On-device text recognition using Tesseract."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

import pytesseract
from PIL import Image, ImageOps

from lens_translator.core.logging_utils import LoggerLike, ensure_structured_logger

from ..defaults import DEFAULT_SCRIPT, SCRIPT_LANGUAGES
from ..errors import RecognitionFailure


@dataclass(frozen=True, slots=True)
class RecognizedText:
    text: str


class TextRecognizer(Protocol):
    async def recognize(self, image_path: Path, script: str = DEFAULT_SCRIPT) -> RecognizedText: ...


class TesseractRecognizer:
    """Runs ``pytesseract.image_to_string`` on a capture in a worker thread.

    ``script`` picks the Tesseract language pack (see ``SCRIPT_LANGUAGES``);
    ``languages`` overrides it for every call, e.g. ``"eng+ita"``.
    """

    def __init__(
        self,
        *,
        languages: Optional[str] = None,
        tesseract_cmd: Optional[str] = None,
        logger: LoggerLike = None,
    ) -> None:
        self._languages = languages
        self._logger = ensure_structured_logger(
            logger,
            component="TesseractRecognizer",
            fallback_name=__name__,
        )
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    def languages_for(self, script: str) -> str:
        if self._languages:
            return self._languages
        try:
            return SCRIPT_LANGUAGES[script]
        except KeyError:
            raise RecognitionFailure(f"Unsupported recognition script: {script!r}") from None

    async def recognize(self, image_path: Path, script: str = DEFAULT_SCRIPT) -> RecognizedText:
        lang = self.languages_for(script)
        return await asyncio.to_thread(self._recognize_sync, Path(image_path), lang)

    def _recognize_sync(self, image_path: Path, lang: str) -> RecognizedText:
        try:
            with Image.open(image_path) as image:
                # Tesseract works best on greyscale with EXIF orientation applied.
                prepared = ImageOps.exif_transpose(image).convert("L")
                raw = pytesseract.image_to_string(prepared, lang=lang)
        except (OSError, pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as exc:
            raise RecognitionFailure(f"Text recognition failed for {image_path.name}: {exc}") from exc

        # Tesseract terminates pages with a form feed; drop it and blank lines.
        lines = [line.rstrip() for line in raw.replace("\f", "").splitlines()]
        text = "\n".join(line for line in lines if line.strip())
        self._logger.debug("Recognized %d characters (lang=%s)", len(text), lang)
        return RecognizedText(text=text)


__all__ = ["RecognizedText", "TesseractRecognizer", "TextRecognizer"]
