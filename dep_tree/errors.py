from pathlib import Path


class DepTreeError(Exception):
    """Base class for every error raised by dep-tree."""


class ExtractionError(DepTreeError):
    """Import statements of a file could not be parsed."""

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class UnresolvedImportError(DepTreeError):
    """An import specifier does not point to any file of the project."""

    def __init__(self, specifier: str, importing_file: Path, line: int | None = None) -> None:
        self.specifier = specifier
        self.importing_file = importing_file
        self.line = line
        message = f"could not resolve import '{specifier}'"
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class ConfigError(DepTreeError):
    """Configuration is malformed. Raised before any build work starts."""


class NoEntryFilesError(DepTreeError):
    """Nothing to analyze: no valid entry file or no supported language."""


class EntryFileError(DepTreeError):
    """An explicitly given entry file could not be read."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"could not read entry file {path}: {reason}")


class BuildCancelledError(DepTreeError):
    """The graph build was stopped before all files were processed."""
