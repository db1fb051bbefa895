from .recognizer import RecognizedText, TesseractRecognizer, TextRecognizer

__all__ = ["RecognizedText", "TesseractRecognizer", "TextRecognizer"]
