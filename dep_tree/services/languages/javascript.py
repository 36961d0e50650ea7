import re
from typing import ClassVar

from errors import ExtractionError
from models.base import ImportedName, ImportRecord
from services.languages.base import Language

STATIC_IMPORT = re.compile(
    r"""^[ \t]*import\s+(?:type\s+)?(?P<clause>[\w$*{},\s]+?)\s+from\s*(?P<q>['"])(?P<spec>[^'"\n]+)(?P=q)""",
    re.MULTILINE,
)
SIDE_EFFECT_IMPORT = re.compile(r"""^[ \t]*import\s*(?P<q>['"])(?P<spec>[^'"\n]+)(?P=q)""", re.MULTILINE)
EXPORT_FROM = re.compile(
    r"""^[ \t]*export\s+(?:type\s+)?(?P<clause>\*(?:\s+as\s+[\w$]+)?|\{[^}]*\})\s*from\s*(?P<q>['"])(?P<spec>[^'"\n]+)(?P=q)""",
    re.MULTILINE,
)
REQUIRE = re.compile(r"""\brequire\s*\(\s*(?P<q>['"])(?P<spec>[^'"\n]+)(?P=q)\s*\)""")
DYNAMIC_IMPORT = re.compile(r"""\bimport\s*\(\s*(?P<q>['"])(?P<spec>[^'"\n]+)(?P=q)\s*\)""")
# An ``import``/``export ... from`` that none of the patterns above understood.
DANGLING_FROM = re.compile(
    r"""^[ \t]*(?:import|export)\b[^;\n'"]*\bfrom[ \t]+(?!['"])[\w./@$-]+[ \t]*;?[ \t]*$""",
    re.MULTILINE,
)
NAMED_BINDING = re.compile(r"^([\w$]+)(?:\s+as\s+([\w$]+))?$")


def _line_of(content: str, offset: int) -> int:
    return content.count("\n", 0, offset) + 1


def split_specifier(specifier: str) -> tuple[tuple[str, ...], int]:
    """Split a module specifier into path segments and a relative depth.

    ``./a/b`` has depth 1, ``../a`` depth 2, ``a/b`` depth 0.
    """

    segments = specifier.split("/")
    depth = 0
    if segments and segments[0] == ".":
        depth = 1
        segments = segments[1:]
    elif segments and segments[0] == "..":
        depth = 1
        while segments and segments[0] == "..":
            depth += 1
            segments = segments[1:]
    return tuple(s for s in segments if s and s != "."), depth


class JavaScriptLanguage(Language):
    """Extract ES module imports, re-exports and CommonJS requires."""

    name: ClassVar[str] = "javascript"
    extensions: ClassVar[tuple[str, ...]] = (
        ".ts",
        ".tsx",
        ".js",
        ".jsx",
        ".mjs",
        ".cjs",
        ".d.ts",
    )
    index_names: ClassVar[tuple[str, ...]] = ("index",)

    def extract_imports(self, content: bytes) -> list[ImportRecord]:
        text = content.decode("utf-8", errors="replace")

        dangling = DANGLING_FROM.search(text)
        if dangling:
            raise ExtractionError(
                f"malformed module specifier in '{dangling.group(0).strip()}'",
                line=_line_of(text, dangling.start()),
            )

        found: list[tuple[int, ImportRecord]] = []

        for match in STATIC_IMPORT.finditer(text):
            names, is_wildcard, alias = self._parse_clause(match.group("clause"), text, match.start())
            found.append(
                (
                    match.start(),
                    self._record(
                        match.group("spec"),
                        names=names,
                        alias=alias,
                        is_wildcard=is_wildcard,
                        line=_line_of(text, match.start()),
                    ),
                )
            )

        for match in SIDE_EFFECT_IMPORT.finditer(text):
            found.append(
                (match.start(), self._record(match.group("spec"), line=_line_of(text, match.start())))
            )

        for match in EXPORT_FROM.finditer(text):
            clause = match.group("clause").strip()
            if clause.startswith("*"):
                names: tuple[ImportedName, ...] = ()
                is_wildcard = True
            else:
                names, is_wildcard, _alias = self._parse_clause(clause, text, match.start())
            found.append(
                (
                    match.start(),
                    self._record(
                        match.group("spec"),
                        names=names,
                        is_wildcard=is_wildcard,
                        is_reexport=True,
                        line=_line_of(text, match.start()),
                    ),
                )
            )

        for match in REQUIRE.finditer(text):
            found.append(
                (match.start(), self._record(match.group("spec"), line=_line_of(text, match.start())))
            )

        for match in DYNAMIC_IMPORT.finditer(text):
            found.append(
                (
                    match.start(),
                    self._record(
                        match.group("spec"),
                        is_conditional=True,
                        line=_line_of(text, match.start()),
                    ),
                )
            )

        found.sort(key=lambda item: item[0])
        return [record for _offset, record in found]

    def _record(
        self,
        specifier: str,
        *,
        names: tuple[ImportedName, ...] = (),
        alias: str | None = None,
        is_wildcard: bool = False,
        is_conditional: bool = False,
        is_reexport: bool = False,
        line: int,
    ) -> ImportRecord:
        path, depth = split_specifier(specifier.strip())
        return ImportRecord(
            path=path,
            alias=alias,
            relative_depth=depth,
            imported_names=names,
            is_wildcard=is_wildcard,
            is_conditional=is_conditional,
            is_reexport=is_reexport,
            line=line,
        )

    def _parse_clause(
        self, clause: str, text: str, offset: int
    ) -> tuple[tuple[ImportedName, ...], bool, str | None]:
        """Parse ``Default, {a, b as c}`` or ``* as ns`` import clauses.

        Returns:
            Imported names, wildcard flag and namespace alias.
        """

        names: list[ImportedName] = []
        named: list[ImportedName] = []
        is_wildcard = False
        alias: str | None = None

        clause = " ".join(clause.split())
        braces = re.search(r"\{([^}]*)\}", clause)
        rest = clause
        if braces:
            for part in braces.group(1).split(","):
                part = part.strip()
                if part.startswith("type "):
                    part = part[len("type ") :].strip()
                if not part:
                    continue
                binding = NAMED_BINDING.match(part)
                if binding is None:
                    raise ExtractionError(
                        f"malformed import binding '{part}'", line=_line_of(text, offset)
                    )
                named.append(ImportedName(name=binding.group(1), alias=binding.group(2)))
            rest = clause[: braces.start()] + clause[braces.end() :]

        for part in rest.split(","):
            part = part.strip()
            if not part:
                continue
            if part.startswith("*"):
                is_wildcard = True
                namespace = re.match(r"\*\s*as\s+([\w$]+)$", part)
                alias = namespace.group(1) if namespace else None
            elif re.fullmatch(r"[\w$]+", part):
                names.append(ImportedName(name="default", alias=part))
            else:
                raise ExtractionError(f"malformed import clause '{part}'", line=_line_of(text, offset))

        return (*names, *named), is_wildcard, alias
