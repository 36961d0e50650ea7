import logging
from collections.abc import Iterator
from typing import ClassVar

import tree_sitter_python as tspython
from pydantic import ConfigDict, PrivateAttr
from tree_sitter import Language as TSLanguage
from tree_sitter import Node as TSNode
from tree_sitter import Parser

from errors import ExtractionError
from models.base import ImportedName, ImportRecord
from services.languages.base import Language

logger = logging.getLogger(__name__)

IMPORT_NODE_TYPES: frozenset[str] = frozenset({"import_statement", "import_from_statement"})
CONDITIONAL_NODE_TYPES: frozenset[str] = frozenset({"if_statement", "try_statement"})


class PythonLanguage(Language):
    """Extract Python ``import`` and ``from ... import`` statements with tree-sitter."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: ClassVar[str] = "python"
    extensions: ClassVar[tuple[str, ...]] = (".py", ".pyi")
    index_names: ClassVar[tuple[str, ...]] = ("__init__",)
    absolute_from_parents: ClassVar[bool] = True

    __parser: Parser = PrivateAttr(
        default_factory=lambda: Parser(TSLanguage(tspython.language()))
    )

    def extract_imports(self, content: bytes) -> list[ImportRecord]:
        tree = self.__parser.parse(content)
        records: list[ImportRecord] = []
        for node in self.__iter_import_nodes(tree.root_node):
            if node.type == "ERROR" or node.has_error:
                raise ExtractionError(
                    f"malformed import statement '{self.__text(node).strip()}'",
                    line=node.start_point[0] + 1,
                )
            if node.type == "import_statement":
                records.extend(self._process_import(node))
            else:
                records.append(self._process_import_from(node))
        logger.debug("Extracted %d python imports", len(records))
        return records

    def __text(self, node: TSNode) -> str:
        return (node.text or b"").decode("utf-8", errors="replace")

    def __iter_import_nodes(self, node: TSNode) -> Iterator[TSNode]:
        if node.type in IMPORT_NODE_TYPES:
            yield node
            return
        if node.type == "ERROR" and self.__text(node).lstrip().startswith(("import ", "from ")):
            yield node
            return
        for child in node.children:
            yield from self.__iter_import_nodes(child)

    def __is_conditional(self, node: TSNode) -> bool:
        parent = node.parent
        while parent is not None:
            if parent.type in CONDITIONAL_NODE_TYPES:
                return True
            parent = parent.parent
        return False

    def __dotted_path(self, node: TSNode) -> tuple[str, ...]:
        # dotted_name children are identifiers separated by "." tokens; spacing
        # around the dots is dropped by the grammar.
        return tuple(
            self.__text(child) for child in node.children if child.type == "identifier"
        )

    def _process_import(self, node: TSNode) -> Iterator[ImportRecord]:
        """``import a.b as c, d`` yields one record per imported module."""

        conditional = self.__is_conditional(node)
        line = node.start_point[0] + 1
        for name_node in node.children_by_field_name("name"):
            alias: str | None = None
            if name_node.type == "aliased_import":
                alias_node = name_node.child_by_field_name("alias")
                alias = self.__text(alias_node) if alias_node else None
                name_node = name_node.child_by_field_name("name")
                if name_node is None:
                    continue
            yield ImportRecord(
                path=self.__dotted_path(name_node),
                alias=alias,
                is_conditional=conditional,
                line=line,
            )

    def _process_import_from(self, node: TSNode) -> ImportRecord:
        module_node = node.child_by_field_name("module_name")
        if module_node is None:
            raise ExtractionError("missing module name", line=node.start_point[0] + 1)

        relative_depth = 0
        path: tuple[str, ...] = ()
        if module_node.type == "relative_import":
            for child in module_node.children:
                if child.type == "import_prefix":
                    relative_depth = self.__text(child).count(".")
                elif child.type == "dotted_name":
                    path = self.__dotted_path(child)
        else:
            path = self.__dotted_path(module_node)

        names: list[ImportedName] = []
        for name_node in node.children_by_field_name("name"):
            if name_node.type == "aliased_import":
                original = name_node.child_by_field_name("name")
                alias_node = name_node.child_by_field_name("alias")
                names.append(
                    ImportedName(
                        name=".".join(self.__dotted_path(original)) if original else "",
                        alias=self.__text(alias_node) if alias_node else None,
                    )
                )
            else:
                names.append(ImportedName(name=".".join(self.__dotted_path(name_node))))

        is_wildcard = any(child.type == "wildcard_import" for child in node.children)
        return ImportRecord(
            path=path,
            relative_depth=relative_depth,
            imported_names=tuple(names),
            is_wildcard=is_wildcard,
            is_conditional=self.__is_conditional(node),
            line=node.start_point[0] + 1,
        )
