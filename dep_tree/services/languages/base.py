from abc import ABC, abstractmethod
from typing import ClassVar

from pydantic import BaseModel

from models.base import ImportRecord


class Language(ABC, BaseModel):
    """Capability interface implemented once per supported language.

    Attributes:
        name: Language tag stored on module nodes.
        extensions: File extensions, in resolution order.
        index_names: File stems that make a directory importable
            (``__init__`` for Python, ``index`` for JavaScript).
        absolute_from_parents: Whether absolute imports may also be rooted at
            any parent directory of the importing file.
    """

    name: ClassVar[str]
    extensions: ClassVar[tuple[str, ...]]
    index_names: ClassVar[tuple[str, ...]]
    absolute_from_parents: ClassVar[bool] = False

    def handles(self, file_name: str) -> bool:
        return file_name.endswith(self.extensions)

    @abstractmethod
    def extract_imports(self, content: bytes) -> list[ImportRecord]:
        """Extract the import statements of a file.

        Args:
            content: Raw file content.

        Returns:
            Import records in statement order.

        Raises:
            ExtractionError: If an import statement is malformed.
        """
