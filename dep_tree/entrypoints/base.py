import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, Field

from errors import NoEntryFilesError
from loaders.config_loader import apply_overrides, load_config
from models.config import Config

logger = logging.getLogger(__name__)

COMMANDS: Final[frozenset[str]] = frozenset(
    {"render", "entropy", "tree", "check", "export", "config"}
)
VERSION: Final[str] = "0.1.0"
DEFAULT_COMMAND: Final[str] = "render"
VALUE_OPTIONS: Final[frozenset[str]] = frozenset(
    {"--config", "-c", "--root", "--exclude", "--workers", "--log-level"}
)
PASSTHROUGH: Final[frozenset[str]] = frozenset({"--help", "-h", "--version", "-v"})


class CliState(BaseModel):
    """Global options shared by every command."""

    config_path: Path | None = None
    overrides: dict[str, Any] = Field(default_factory=dict)

    def load_config(self) -> Config:
        """Configuration file merged with the command line overrides.

        Raises:
            ConfigError: If the file or an override is invalid.
        """
        return apply_overrides(load_config(self.config_path), **self.overrides)


def files_from_args(args: Sequence[Path]) -> list[Path]:
    """Absolute paths of the given entry files that exist.

    Missing files are reported and skipped as long as at least one file is
    left.

    Raises:
        NoEntryFilesError: If none of the files exists.
    """

    files: list[Path] = []
    missing: list[str] = []
    for arg in args:
        path = Path(arg).absolute()
        if path.is_file():
            files.append(path)
        else:
            missing.append(f"file {arg} does not exist")

    if not files:
        if len(missing) == 1:
            raise NoEntryFilesError(missing[0])
        raise NoEntryFilesError("no valid files were provided")
    for message in missing:
        logger.warning(message)
    return files


def with_default_command(args: list[str]) -> list[str]:
    """Insert the default command when the first positional is not a command.

    ``dep-tree src/index.ts`` runs as ``dep-tree render src/index.ts``.
    """

    if not args or any(arg in PASSTHROUGH for arg in args):
        return args
    index = 0
    while index < len(args):
        arg = args[index]
        if arg.startswith("-"):
            index += 2 if arg in VALUE_OPTIONS else 1
            continue
        if arg in COMMANDS:
            return args
        return [*args[:index], DEFAULT_COMMAND, *args[index:]]
    return args
