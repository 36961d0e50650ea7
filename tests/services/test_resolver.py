from pathlib import Path

import pytest

from errors import UnresolvedImportError
from models.base import ImportedName, ImportRecord, ModuleID
from models.config import ModuleSystemConfig
from services.languages import JavaScriptLanguage, PythonLanguage
from services.resolver import PathResolver
from tests.consts import JS_PROJECT_ROOT, PYTHON_PROJECT_ROOT

APP_DIR = PYTHON_PROJECT_ROOT / "app"
SRC_DIR = JS_PROJECT_ROOT / "src"


def _python_resolver(**config: object) -> PathResolver:
    return PathResolver(
        root=PYTHON_PROJECT_ROOT,
        language=PythonLanguage(),
        config=ModuleSystemConfig(**config),
    )


def _js_resolver(**config: object) -> PathResolver:
    return PathResolver(
        root=JS_PROJECT_ROOT,
        language=JavaScriptLanguage(),
        config=ModuleSystemConfig(**config),
    )


def test_resolve__on_absolute_python_import__returns_module_file() -> None:
    record = ImportRecord(path=("app", "models"), imported_names=(ImportedName(name="User"),))

    resolved = _python_resolver().resolve(record, PYTHON_PROJECT_ROOT / "main.py")

    assert resolved == ModuleID.from_path(APP_DIR / "models.py")


def test_resolve__on_package_import__returns_package_index() -> None:
    record = ImportRecord(path=("app", "services"))

    resolved = _python_resolver().resolve(record, PYTHON_PROJECT_ROOT / "main.py")

    assert resolved == ModuleID.from_path(APP_DIR / "services" / "__init__.py")


def test_resolve__on_relative_imports__walks_up_depth_minus_one_directories() -> None:
    importing_file = APP_DIR / "services" / "worker.py"
    resolver = _python_resolver()

    sibling = resolver.resolve(ImportRecord(path=("worker",), relative_depth=1), importing_file)
    parent = resolver.resolve(ImportRecord(path=("models",), relative_depth=2), importing_file)

    assert sibling == ModuleID.from_path(APP_DIR / "services" / "worker.py")
    assert parent == ModuleID.from_path(APP_DIR / "models.py")


def test_resolve__on_from_dot_import__returns_own_package() -> None:
    record = ImportRecord(relative_depth=1, imported_names=(ImportedName(name="worker"),))

    resolved = _python_resolver().resolve(record, APP_DIR / "services" / "worker.py")

    assert resolved == ModuleID.from_path(APP_DIR / "services" / "__init__.py")


def test_resolve__on_python_import_rooted_at_parent_directory__finds_module() -> None:
    record = ImportRecord(path=("worker",))

    resolved = _python_resolver().resolve(record, APP_DIR / "services" / "__init__.py")

    assert resolved == ModuleID.from_path(APP_DIR / "services" / "worker.py")


def test_resolve__on_external_package__returns_none() -> None:
    resolver = _python_resolver()
    main = PYTHON_PROJECT_ROOT / "main.py"

    assert resolver.resolve(ImportRecord(path=("yaml",)), main) is None
    assert resolver.resolve(ImportRecord(path=("os", "path")), main) is None


def test_resolve__on_missing_project_module__raises_unresolved_import() -> None:
    record = ImportRecord(path=("app", "ghost"), line=2)

    with pytest.raises(UnresolvedImportError) as exc_info:
        _python_resolver().resolve(record, APP_DIR / "services" / "worker.py")

    assert str(exc_info.value) == "line 2: could not resolve import 'app/ghost'"
    assert exc_info.value.specifier == "app/ghost"


def test_resolve__on_missing_relative_module__raises_unresolved_import() -> None:
    record = ImportRecord(path=("does-not-exist",), relative_depth=1)

    with pytest.raises(UnresolvedImportError):
        _js_resolver().resolve(record, SRC_DIR / "lazy.ts")


def test_resolve__on_directory_import__returns_index_file() -> None:
    resolved = _js_resolver().resolve(
        ImportRecord(path=("utils",), relative_depth=1), SRC_DIR / "index.ts"
    )

    assert resolved == ModuleID.from_path(SRC_DIR / "utils" / "index.ts")


def test_resolve__on_js_extension__falls_back_to_typescript_sibling() -> None:
    resolved = _js_resolver().resolve(
        ImportRecord(path=("format.js",), relative_depth=1), SRC_DIR / "index.ts"
    )

    assert resolved == ModuleID.from_path(SRC_DIR / "format.ts")


def test_resolve__on_asset__returns_none() -> None:
    resolved = _js_resolver().resolve(
        ImportRecord(path=("styles.css",), relative_depth=1), SRC_DIR / "index.ts"
    )

    assert resolved is None


def test_resolve__on_path_alias__rewrites_specifier() -> None:
    resolver = _js_resolver(path_aliases={"@/": "src/"})
    record = ImportRecord(path=("@", "components", "Button"))

    resolved = resolver.resolve(record, SRC_DIR / "index.ts")

    assert resolved == ModuleID.from_path(SRC_DIR / "components" / "Button.tsx")


def test_resolve__on_disabled_path_aliases__treats_alias_as_external() -> None:
    resolver = _js_resolver(path_aliases={"@/": "src/"}, follow_path_aliases=False)
    record = ImportRecord(path=("@", "components", "Button"))

    assert resolver.resolve(record, SRC_DIR / "index.ts") is None


def test_resolve__on_alias_without_target__raises_unresolved_import() -> None:
    resolver = _js_resolver(path_aliases={"@/": "src/"})

    with pytest.raises(UnresolvedImportError):
        resolver.resolve(ImportRecord(path=("@", "nothing")), SRC_DIR / "index.ts")


def test_resolve__on_longest_alias__wins() -> None:
    resolver = _js_resolver(path_aliases={"@/": "src/", "@/ui/": "src/components/"})

    resolved = resolver.resolve(ImportRecord(path=("@", "ui", "Button")), SRC_DIR / "index.ts")

    assert resolved == ModuleID.from_path(SRC_DIR / "components" / "Button.tsx")


def test_resolve__on_workspace_package__returns_its_index() -> None:
    resolver = _js_resolver(workspace_roots=[Path("packages/shared-lib")])

    resolved = resolver.resolve(ImportRecord(path=("shared-lib",)), SRC_DIR / "index.ts")

    assert resolved == ModuleID.from_path(JS_PROJECT_ROOT / "packages" / "shared-lib" / "index.ts")


def test_resolve__is_deterministic() -> None:
    resolver = _js_resolver(path_aliases={"@/": "src/"})
    record = ImportRecord(path=("@", "components", "Button"))

    first = resolver.resolve(record, SRC_DIR / "index.ts")
    second = _js_resolver(path_aliases={"@/": "src/"}).resolve(record, SRC_DIR / "index.ts")

    assert first == second == resolver.resolve(record, SRC_DIR / "index.ts")


def test_resolve_targets__on_namespace_package_member__returns_member_module(
    tmp_path: Path,
) -> None:
    (tmp_path / "pkg").mkdir()
    (tmp_path / "pkg" / "mod.py").write_text("")
    record = ImportRecord(path=("pkg",), imported_names=(ImportedName(name="mod"),), line=1)
    resolver = PathResolver(root=tmp_path, language=PythonLanguage())

    targets = resolver.resolve_targets(record, tmp_path / "main.py")

    assert [target for _record, target in targets] == [
        ModuleID.from_path(tmp_path / "pkg" / "mod.py")
    ]
    assert resolver.resolve(record, tmp_path / "main.py") == targets[0][1]


def test_resolve_targets__on_from_dot_import_without_index__returns_every_member(
    tmp_path: Path,
) -> None:
    for name in ("a.py", "b.py", "main.py"):
        (tmp_path / name).write_text("")
    record = ImportRecord(
        relative_depth=1,
        imported_names=(ImportedName(name="a"), ImportedName(name="b")),
    )
    resolver = PathResolver(root=tmp_path, language=PythonLanguage())

    targets = resolver.resolve_targets(record, tmp_path / "main.py")

    assert [(r.imported_names, target) for r, target in targets] == [
        ((ImportedName(name="a"),), ModuleID.from_path(tmp_path / "a.py")),
        ((ImportedName(name="b"),), ModuleID.from_path(tmp_path / "b.py")),
    ]


def test_resolve_targets__on_namespace_package_without_members__raises_unresolved_import(
    tmp_path: Path,
) -> None:
    (tmp_path / "pkg").mkdir()
    (tmp_path / "pkg" / "other.py").write_text("")
    record = ImportRecord(path=("pkg",), imported_names=(ImportedName(name="missing"),))
    resolver = PathResolver(root=tmp_path, language=PythonLanguage())

    with pytest.raises(UnresolvedImportError):
        resolver.resolve_targets(record, tmp_path / "main.py")
