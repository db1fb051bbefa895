from .translator import GoogleTranslator, TranslationResult, Translator, parse_translation_payload

__all__ = ["GoogleTranslator", "TranslationResult", "Translator", "parse_translation_payload"]
