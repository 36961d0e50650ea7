import fnmatch
import re
from functools import lru_cache

from errors import ConfigError

WILDCARDS: frozenset[str] = frozenset("*?[")


def validate_pattern(pattern: str) -> None:
    """Reject empty patterns and unbalanced character classes.

    Raises:
        ConfigError: If the pattern is not a usable glob.
    """

    if not pattern or not pattern.strip():
        raise ConfigError("glob pattern must not be empty")
    depth = 0
    for char in pattern:
        if char == "[":
            depth += 1
        elif char == "]" and depth:
            depth -= 1
    if depth:
        raise ConfigError(f"glob pattern '{pattern}' is not correctly formatted")
    try:
        _compiled(pattern)
    except re.error as e:
        raise ConfigError(f"glob pattern '{pattern}' is not correctly formatted: {e}") from e


@lru_cache(maxsize=1024)
def _compiled(pattern: str) -> re.Pattern[str]:
    # "**" behaves like "*": fnmatch wildcards already cross "/".
    return re.compile(fnmatch.translate(pattern.replace("**", "*")))


def match(pattern: str, path: str) -> bool:
    return _compiled(pattern).match(path) is not None


def literal_prefix(pattern: str) -> str:
    """Characters of a pattern before its first wildcard."""

    for index, char in enumerate(pattern):
        if char in WILDCARDS:
            return pattern[:index]
    return pattern
