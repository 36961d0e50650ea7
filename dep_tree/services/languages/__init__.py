from .base import Language
from .javascript import JavaScriptLanguage
from .python import PythonLanguage
from .registry import LANGUAGES, infer_language

__all__ = [
    "LANGUAGES",
    "JavaScriptLanguage",
    "Language",
    "PythonLanguage",
    "infer_language",
]
