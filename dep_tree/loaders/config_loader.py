import logging
from pathlib import Path
from typing import Any, Final

import yaml
from pydantic import ValidationError

from errors import ConfigError
from models.config import Config
from models.rules import Rule, RuleAction
from utils import globs

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE: Final[str] = ".dep-tree.yml"


def load_config(path: Path | None = None, cwd: Path | None = None) -> Config:
    """Read the YAML configuration file.

    Args:
        path: Explicit config file. It must exist.
        cwd: Directory searched for ``.dep-tree.yml`` when ``path`` is None.

    Returns:
        The validated configuration, defaults when no file was found.

    Raises:
        ConfigError: If the file is missing, is not valid YAML or does not
            match the configuration schema.
    """

    if path is None:
        path = (cwd or Path.cwd()) / DEFAULT_CONFIG_FILE
        if not path.is_file():
            logger.debug("No %s found, using default configuration", path)
            return validate_config(Config())
    elif not path.is_file():
        raise ConfigError(f"config file {path} does not exist")

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"could not read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"config file {path} is not valid YAML: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"config file {path} must contain a mapping at the top level")

    try:
        config = Config.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"invalid config file {path}:\n{e}") from e

    if config.root is not None and not config.root.is_absolute():
        config.root = (path.parent / config.root).resolve()
    logger.info("Loaded configuration from %s", path)
    return validate_config(config)


def validate_config(config: Config) -> Config:
    """Check every glob of the configuration before any work starts."""

    for pattern in config.module_system.exclude:
        try:
            globs.validate_pattern(pattern)
        except ConfigError as e:
            raise ConfigError(f"exclude pattern '{pattern}' is not correctly formatted") from e
    for rule in config.check.rules:
        for pattern in (rule.from_pattern, rule.to_pattern):
            if not pattern.startswith("alias:"):
                globs.validate_pattern(pattern)
    for pattern in config.check.aliases.values():
        globs.validate_pattern(pattern)
    return config


def apply_overrides(config: Config, **overrides: Any) -> Config:
    """Return a copy of ``config`` with the command line values that were given.

    ``None`` means the option was not given and keeps the file value.
    ``exclude`` patterns are appended to the configured ones.
    """

    module_system = config.module_system.model_copy()
    for field in (
        "follow_path_aliases",
        "follow_workspaces",
        "exclude_conditional_imports",
        "unwrap_re_exports",
    ):
        if overrides.get(field) is not None:
            setattr(module_system, field, overrides[field])
    if overrides.get("exclude"):
        module_system.exclude = [*module_system.exclude, *overrides["exclude"]]

    update: dict[str, Any] = {"module_system": module_system}
    if overrides.get("root") is not None:
        update["root"] = Path(overrides["root"]).resolve()
    if overrides.get("workers") is not None:
        update["workers"] = overrides["workers"]
    return validate_config(config.model_copy(update=update))


def sample_config() -> str:
    """A commented example configuration, printed by ``dep-tree config``."""

    config = Config()
    config.module_system.exclude = ["**/tests/**", "**/*.test.ts"]
    config.check.entrypoints = [Path("src/index.ts")]
    config.check.aliases = {"utils": "src/utils/**"}
    config.check.rules = [
        Rule(action=RuleAction.ALLOW, from_pattern="src/**", to_pattern="src/**"),
        Rule(
            action=RuleAction.DENY,
            from_pattern="alias:utils",
            to_pattern="src/features/**",
            reason="utils must not depend on features",
        ),
    ]
    body = yaml.safe_dump(
        config.model_dump(mode="json", by_alias=True, exclude_none=True),
        sort_keys=False,
        default_flow_style=False,
    )
    return f"# {DEFAULT_CONFIG_FILE}: dep-tree configuration\n{body}"
