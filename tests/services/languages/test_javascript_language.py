import pytest

from errors import ExtractionError
from models.base import ImportedName, ImportRecord
from services.languages.javascript import JavaScriptLanguage, split_specifier


@pytest.mark.parametrize(
    "specifier, expected",
    [
        ("./a/b", (("a", "b"), 1)),
        ("../a", (("a",), 2)),
        ("../../a/b", (("a", "b"), 3)),
        ("a/b", (("a", "b"), 0)),
        ("@scope/pkg", (("@scope", "pkg"), 0)),
        (".", ((), 1)),
    ],
)
def test_split_specifier__returns_segments_and_depth(
    specifier: str, expected: tuple[tuple[str, ...], int]
) -> None:
    assert split_specifier(specifier) == expected


def test_extract_imports__on_every_statement_form__returns_records_in_order() -> None:
    source = b"""import Default, { a, b as c } from './module';
import * as ns from "../lib/ns";
import type { Props } from './types';
import './side-effect.css';
export { x as y } from './reexported';
export * from './everything';
const fs = require('fs');
const lazy = () => import('./lazy');
"""

    records = JavaScriptLanguage().extract_imports(source)

    assert records == [
        ImportRecord(
            path=("module",),
            relative_depth=1,
            imported_names=(
                ImportedName(name="default", alias="Default"),
                ImportedName(name="a"),
                ImportedName(name="b", alias="c"),
            ),
            line=1,
        ),
        ImportRecord(path=("lib", "ns"), relative_depth=2, alias="ns", is_wildcard=True, line=2),
        ImportRecord(
            path=("types",), relative_depth=1, imported_names=(ImportedName(name="Props"),), line=3
        ),
        ImportRecord(path=("side-effect.css",), relative_depth=1, line=4),
        ImportRecord(
            path=("reexported",),
            relative_depth=1,
            imported_names=(ImportedName(name="x", alias="y"),),
            is_reexport=True,
            line=5,
        ),
        ImportRecord(
            path=("everything",), relative_depth=1, is_wildcard=True, is_reexport=True, line=6
        ),
        ImportRecord(path=("fs",), line=7),
        ImportRecord(path=("lazy",), relative_depth=1, is_conditional=True, line=8),
    ]


def test_extract_imports__on_multiline_named_imports__keeps_statement_line() -> None:
    source = b"\nimport {\n  first,\n  second,\n} from 'pkg';\n"

    records = JavaScriptLanguage().extract_imports(source)

    assert records == [
        ImportRecord(
            path=("pkg",),
            imported_names=(ImportedName(name="first"), ImportedName(name="second")),
            line=2,
        )
    ]


def test_extract_imports__on_unquoted_specifier__raises_extraction_error() -> None:
    with pytest.raises(ExtractionError) as exc_info:
        JavaScriptLanguage().extract_imports(b"import a from './a';\nimport b from ./b;\n")

    assert exc_info.value.line == 2


def test_handles__matches_known_extensions_only() -> None:
    language = JavaScriptLanguage()

    assert language.handles("index.tsx")
    assert language.handles("types.d.ts")
    assert not language.handles("styles.css")
