"""Fixed language catalog offered by the source/target selectors."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .errors import UnknownLanguageError


@dataclass(frozen=True, slots=True)
class Language:
    display_name: str
    code: str


class LanguageSlot(str, Enum):
    """Which half of the language pair a selection applies to."""

    SOURCE = "source"
    TARGET = "target"

    @classmethod
    def parse(cls, value: "LanguageSlot | str") -> "LanguageSlot":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown language slot: {value!r}") from None


LANGUAGE_CATALOG: tuple[Language, ...] = (
    Language("English", "en"),
    Language("Spanish", "es"),
    Language("French", "fr"),
    Language("German", "de"),
    Language("Chinese", "zh"),
)


class LanguageCatalog:
    """Lookup wrapper around an immutable sequence of languages."""

    def __init__(self, languages: Iterable[Language] = LANGUAGE_CATALOG) -> None:
        self._languages = tuple(languages)
        self._by_code = {language.code: language for language in self._languages}

    def __iter__(self):
        return iter(self._languages)

    def __len__(self) -> int:
        return len(self._languages)

    def __contains__(self, code: object) -> bool:
        return code in self._by_code

    def get(self, code: str) -> Optional[Language]:
        return self._by_code.get(code)

    def require(self, code: str) -> Language:
        language = self._by_code.get(code)
        if language is None:
            raise UnknownLanguageError(code, self.codes())
        return language

    def codes(self) -> list[str]:
        return [language.code for language in self._languages]


__all__ = ["LANGUAGE_CATALOG", "Language", "LanguageCatalog", "LanguageSlot"]
