"""Remote translation client.

Talks to the public Google Translate ``translate_a/single`` endpoint with the
``gtx`` client id. The response is a nested JSON array whose first element
holds one ``[translated, original, ...]`` entry per sentence segment.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import aiohttp

from lens_translator.core.logging_utils import LoggerLike, ensure_structured_logger

from ..defaults import DEFAULT_TRANSLATE_ENDPOINT, DEFAULT_TRANSLATE_TIMEOUT_S
from ..errors import TranslationError


@dataclass(frozen=True, slots=True)
class TranslationResult:
    text: str
    source: str
    target: str
    detected_source: Optional[str] = None


class Translator(Protocol):
    async def translate(self, text: str, from_code: str, to_code: str) -> TranslationResult: ...

    async def close(self) -> None: ...


def parse_translation_payload(payload: Any) -> tuple[str, Optional[str]]:
    """Extract ``(translated_text, detected_source)`` from a gtx response body."""
    if not isinstance(payload, list) or not payload:
        raise TranslationError("Unexpected translation payload shape")

    segments = payload[0]
    if not isinstance(segments, list):
        raise TranslationError("Translation payload has no segments")

    parts = [
        segment[0]
        for segment in segments
        if isinstance(segment, list) and segment and isinstance(segment[0], str)
    ]
    detected = payload[2] if len(payload) > 2 and isinstance(payload[2], str) else None
    return "".join(parts), detected


class GoogleTranslator:
    """aiohttp client for the free Google Translate web endpoint.

    The session is created lazily on first use so the translator can be built
    outside a running event loop, and must be closed with :meth:`close`.
    """

    def __init__(
        self,
        *,
        endpoint: str = DEFAULT_TRANSLATE_ENDPOINT,
        timeout_s: float = DEFAULT_TRANSLATE_TIMEOUT_S,
        session: Optional[aiohttp.ClientSession] = None,
        logger: LoggerLike = None,
    ) -> None:
        self._endpoint = endpoint
        self._timeout = aiohttp.ClientTimeout(total=timeout_s)
        self._session = session
        self._owns_session = session is None
        self._closed = False
        self._logger = ensure_structured_logger(
            logger,
            component="GoogleTranslator",
            fallback_name=__name__,
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def closed(self) -> bool:
        return self._closed

    def _get_session(self) -> aiohttp.ClientSession:
        if self._closed:
            raise TranslationError("Translator is closed")
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    @staticmethod
    def build_params(text: str, from_code: str, to_code: str) -> dict[str, str]:
        return {
            "client": "gtx",
            "sl": from_code,
            "tl": to_code,
            "hl": to_code,
            "dt": "t",
            "ie": "UTF-8",
            "oe": "UTF-8",
            "q": text,
        }

    async def translate(self, text: str, from_code: str, to_code: str) -> TranslationResult:
        params = self.build_params(text, from_code, to_code)
        session = self._get_session()
        self._logger.debug("Translating %d characters %s -> %s", len(text), from_code, to_code)

        try:
            async with session.get(self._endpoint, params=params) as response:
                if response.status == 429:
                    raise TranslationError("Translation quota exceeded", status=response.status)
                if response.status >= 400:
                    raise TranslationError(
                        f"Translation request failed with HTTP {response.status}",
                        status=response.status,
                    )
                body = await response.text()
        except asyncio.TimeoutError as exc:
            raise TranslationError("Translation request timed out") from exc
        except aiohttp.ClientError as exc:
            raise TranslationError(f"Translation transport error: {exc}") from exc

        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise TranslationError("Translation response was not valid JSON") from exc

        translated, detected = parse_translation_payload(payload)
        return TranslationResult(
            text=translated,
            source=from_code,
            target=to_code,
            detected_source=detected,
        )

    async def close(self) -> None:
        self._closed = True
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None


__all__ = ["GoogleTranslator", "TranslationResult", "Translator", "parse_translation_payload"]
