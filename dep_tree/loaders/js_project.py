import json
import logging
import re
from pathlib import Path

from models.config import ModuleSystemConfig

logger = logging.getLogger(__name__)

TSCONFIG_NAMES: tuple[str, ...] = ("tsconfig.json", "jsconfig.json")

_COMMENTS = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)
_TRAILING_COMMAS = re.compile(r'("(?:\\.|[^"\\])*")|,(\s*[}\]])')


def _read_json(path: Path) -> dict | None:
    """Read a JSON file allowing the comments and trailing commas tsconfig accepts."""

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning("Could not read %s: %s", path, e)
        return None
    text = _COMMENTS.sub(lambda m: m.group(1) or "", text)
    text = _TRAILING_COMMAS.sub(lambda m: m.group(1) or m.group(2), text)
    try:
        data = json.loads(text)
    except ValueError as e:
        logger.warning("Ignoring malformed %s: %s", path, e)
        return None
    return data if isinstance(data, dict) else None


def read_tsconfig_paths(root: Path) -> tuple[dict[str, str], Path | None]:
    """Path aliases declared in ``compilerOptions.paths``.

    ``"@/*": ["src/*"]`` becomes the prefix alias ``"@/" -> "src/"``. Targets
    are made relative to the project root through ``baseUrl``. Only the first
    target of each entry is used.

    Returns:
        The aliases and the ``baseUrl`` directory, if one is declared.
    """

    for name in TSCONFIG_NAMES:
        path = root / name
        if path.is_file():
            break
    else:
        return {}, None

    data = _read_json(path)
    if data is None:
        return {}, None
    options = data.get("compilerOptions") or {}
    base_url = options.get("baseUrl")
    base = (root / base_url).resolve() if base_url else root.resolve()

    aliases: dict[str, str] = {}
    for pattern, targets in (options.get("paths") or {}).items():
        if not targets:
            continue
        target = targets[0] if isinstance(targets, list) else targets
        prefix, target = pattern.removesuffix("*"), str(target).removesuffix("*")
        if not prefix:
            logger.debug("Ignoring catch-all tsconfig path %s", pattern)
            continue
        aliases[prefix] = (base / target).as_posix() + ("/" if target.endswith("/") else "")
    logger.debug("Read %d path aliases from %s", len(aliases), path)
    return aliases, base if base_url else None


def read_workspaces(root: Path) -> list[Path]:
    """Directories matched by the ``workspaces`` globs of the root package.json."""

    manifest = root / "package.json"
    if not manifest.is_file():
        return []
    data = _read_json(manifest)
    if data is None:
        return []

    patterns = data.get("workspaces") or []
    if isinstance(patterns, dict):
        patterns = patterns.get("packages") or []

    directories: list[Path] = []
    for pattern in patterns:
        for directory in sorted(root.glob(pattern)):
            if (directory / "package.json").is_file():
                directories.append(directory.resolve())
    return list(dict.fromkeys(directories))


def discover_js_project(root: Path, config: ModuleSystemConfig) -> ModuleSystemConfig:
    """Complete a module system configuration with tsconfig and workspace data.

    Values written in the configuration file win over discovered ones.
    """

    config = config.model_copy(deep=True)
    if config.follow_path_aliases:
        aliases, base_url = read_tsconfig_paths(root)
        config.path_aliases = {**aliases, **config.path_aliases}
        if base_url is not None and base_url not in config.workspace_roots:
            config.workspace_roots.append(base_url)
    if config.follow_workspaces:
        for directory in read_workspaces(root):
            if directory not in config.workspace_roots:
                config.workspace_roots.append(directory)
    return config
