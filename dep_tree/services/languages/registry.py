import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Final

from errors import NoEntryFilesError
from services.languages.base import Language
from services.languages.javascript import JavaScriptLanguage
from services.languages.python import PythonLanguage

logger = logging.getLogger(__name__)

LANGUAGES: Final[tuple[type[Language], ...]] = (JavaScriptLanguage, PythonLanguage)


def infer_language(files: Iterable[Path]) -> Language:
    """Pick the language most of the entry files are written in.

    Each file scores a point for the first language whose extensions match it.
    The first language to reach the highest score wins ties.

    Args:
        files: Entry files given by the user.

    Returns:
        An instance of the winning language.

    Raises:
        NoEntryFilesError: If no file has a supported extension.
    """

    scores: dict[type[Language], int] = {}
    top: type[Language] | None = None
    top_score = 0
    for file in files:
        for language in LANGUAGES:
            if file.name.endswith(language.extensions):
                scores[language] = scores.get(language, 0) + 1
                if scores[language] > top_score:
                    top, top_score = language, scores[language]
                break

    if top is None:
        raise NoEntryFilesError("at least one file of a supported language must be provided")

    logger.debug("Inferred language %s from %d matching files", top.name, top_score)
    return top()
