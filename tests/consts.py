"""Shared test path constants."""

from pathlib import Path
from typing import Final

TESTS_DIR: Final[Path] = Path(__file__).resolve().parent
PROJECT_ROOT: Final[Path] = TESTS_DIR.parent
TEST_DATA_DIR: Final[Path] = TESTS_DIR / "data"
SRC_DIR: Final[Path] = PROJECT_ROOT / "dep_tree"

PYTHON_PROJECT_ROOT: Final[Path] = TEST_DATA_DIR / "python_project"
PYTHON_MAIN_FILE: Final[Path] = PYTHON_PROJECT_ROOT / "main.py"

JS_PROJECT_ROOT: Final[Path] = TEST_DATA_DIR / "js_project"
JS_INDEX_FILE: Final[Path] = JS_PROJECT_ROOT / "src" / "index.ts"
