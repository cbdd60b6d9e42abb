"""Project configuration: parse ``.lengthlint.yml`` and resolve enabled rules."""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

import yaml

from lengthlint.rules import VALID_RULE_SETTINGS, get_rule, rule_names

if TYPE_CHECKING:
    from pathlib import Path

    from lengthlint.rules import Rule

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CONFIG_FILENAME = ".lengthlint.yml"
SUPPORTED_SCHEMA_VERSIONS: frozenset[int] = frozenset({1})
DEFAULT_EXCLUDE: tuple[str, ...] = ("node_modules/**", ".git/**")

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when the configuration file is unreadable or invalid."""


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LintConfig:
    """Resolved configuration.

    ``rules`` maps every registered rule name to ``"off"``, ``"warn"`` or
    ``"error"``.
    """

    rules: dict[str, str] = field(default_factory=dict)
    exclude: tuple[str, ...] = DEFAULT_EXCLUDE
    source: Path | None = None

    def enabled_rules(self) -> list[Rule]:
        """Instantiate every rule that is not switched off."""
        enabled: list[Rule] = []
        for name in rule_names():
            setting = self.rules.get(name)
            if setting == "off":
                continue
            enabled.append(get_rule(name)(setting))
        return enabled

    def is_excluded(self, relative_path: str) -> bool:
        """Return True if *relative_path* matches an exclude glob.

        Patterns are matched against the path and against every suffix that
        starts at a directory boundary, so ``node_modules/**`` also excludes
        ``packages/web/node_modules/x.js``.
        """
        parts = PurePosixPath(relative_path).parts
        for i in range(len(parts)):
            candidate = "/".join(parts[i:])
            if any(fnmatch.fnmatch(candidate, pattern) for pattern in self.exclude):
                return True
        return False


def default_config() -> LintConfig:
    """Configuration used when no config file exists: every rule at its default."""
    return LintConfig(rules={name: get_rule(name).default_severity for name in rule_names()})


# ---------------------------------------------------------------------------
# YAML parsing
# ---------------------------------------------------------------------------


def _parse_rule_setting(name: str, raw: object) -> str:
    if raw is True:
        return get_rule(name).default_severity
    if raw is False:
        return "off"
    setting = str(raw)
    if setting not in VALID_RULE_SETTINGS:
        msg = (
            f"Rule '{name}': invalid setting '{setting}', "
            f"must be one of {sorted(VALID_RULE_SETTINGS)} or a boolean"
        )
        raise ConfigError(msg)
    return setting


def _parse_rules(data: object) -> dict[str, str]:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        msg = "'rules' must be a mapping of rule name to setting"
        raise ConfigError(msg)

    known = set(rule_names())
    for name in data:
        if name not in known:
            msg = f"Unknown rule '{name}', known rules: {sorted(known)}"
            raise ConfigError(msg)

    resolved = default_config().rules
    for name, raw in data.items():
        resolved[str(name)] = _parse_rule_setting(str(name), raw)
    return resolved


def _parse_exclude(data: object) -> tuple[str, ...]:
    if data is None:
        return DEFAULT_EXCLUDE
    if isinstance(data, str):
        return (data,)
    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        msg = "'exclude' must be a string or a list of glob strings"
        raise ConfigError(msg)
    return tuple(data)


def parse_config(data: object, *, source: Path | None = None) -> LintConfig:
    """Validate an already-loaded YAML document and build a :class:`LintConfig`."""
    if data is None:
        return LintConfig(rules=default_config().rules, source=source)
    if not isinstance(data, dict):
        msg = "Configuration must be a mapping"
        raise ConfigError(msg)

    version = data.get("version", 1)
    if isinstance(version, bool) or version not in SUPPORTED_SCHEMA_VERSIONS:
        msg = (
            f"Unsupported config version {version!r}, "
            f"supported: {sorted(SUPPORTED_SCHEMA_VERSIONS)}"
        )
        raise ConfigError(msg)

    unknown_keys = set(data) - {"version", "rules", "exclude"}
    if unknown_keys:
        msg = f"Unknown configuration keys: {sorted(str(k) for k in unknown_keys)}"
        raise ConfigError(msg)

    return LintConfig(
        rules=_parse_rules(data.get("rules")),
        exclude=_parse_exclude(data.get("exclude")),
        source=source,
    )


def load_config(config_path: Path) -> LintConfig:
    """Load and validate a configuration file.

    Raises
    ------
    ConfigError
        When the file cannot be read, is not valid YAML, or fails validation.
    """
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        msg = f"Cannot read {config_path}: {exc}"
        raise ConfigError(msg) from exc
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in {config_path}: {exc}"
        raise ConfigError(msg) from exc

    config = parse_config(data, source=config_path)
    logger.debug("Loaded config from %s", config_path)
    return config


def find_config(project_root: Path) -> LintConfig:
    """Load ``<project_root>/.lengthlint.yml`` or fall back to the defaults."""
    config_path = project_root / CONFIG_FILENAME
    if not config_path.is_file():
        return default_config()
    return load_config(config_path)
