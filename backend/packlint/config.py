"""
Lint configuration.

Settings are read from a YAML file in the pack root. Every key is optional.

Example packlint.yaml:
    strict: false
    required_fields:
      command: [description]
      skill: [name, description]
    min_description_length: 20
    max_description_length:
      skill: 300
    ignore_namespaces: [example]
    ignore_paths:
      - "commands/drafts/*"
    check_registry: true
    check_body_references: true
    skill_sections:
      Overview: required
      Troubleshooting: recommended
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .models import ComponentKind


logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ("packlint.yaml", ".packlint.yaml")

DEFAULT_REQUIRED_FIELDS: Dict[ComponentKind, List[str]] = {
    ComponentKind.COMMAND: ["description"],
    ComponentKind.SKILL: ["name", "description"],
    ComponentKind.AGENT: ["description"],
    ComponentKind.WORKFLOW: ["description"],
    ComponentKind.MODE: ["description"],
}

DEFAULT_MAX_DESCRIPTION_LENGTH: Dict[ComponentKind, int] = {
    ComponentKind.COMMAND: 200,
    ComponentKind.SKILL: 300,
    ComponentKind.AGENT: 200,
    ComponentKind.WORKFLOW: 200,
    ComponentKind.MODE: 200,
}

SECTION_LEVELS = ("required", "recommended", "optional")

_KNOWN_KEYS = {
    "strict",
    "required_fields",
    "min_description_length",
    "max_description_length",
    "ignore_namespaces",
    "ignore_paths",
    "check_registry",
    "check_body_references",
    "skill_sections",
}


class ConfigError(ValueError):
    """Raised when a configuration file or value is invalid."""


def _parse_kind(value: str) -> ComponentKind:
    """Parse a kind name (singular or plural) to ComponentKind."""
    key = str(value).lower().rstrip("s")
    for kind in ComponentKind:
        if kind.value == key:
            return kind
    raise ConfigError(
        f"Invalid component kind: {value}. "
        f"Must be one of {', '.join(k.value for k in ComponentKind)}."
    )


def _parse_str_list(key: str, value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    return list(value)


def _parse_bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' must be true or false")
    return value


def _parse_positive_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"'{key}' must be a non-negative integer")
    return value


@dataclass
class LintConfig:
    """
    Configuration container for a lint run.

    Attributes:
        strict: Fail on warnings as well as errors.
        required_fields: Frontmatter keys that must be present and non-empty, per kind.
        min_description_length: Descriptions shorter than this get a warning.
        max_description_length: Descriptions longer than this get a warning, per kind.
        ignore_namespaces: Command namespaces skipped by body reference checks.
        ignore_paths: Glob patterns (relative to the pack root) of files to skip.
        check_registry: Run the registry sync layer when registry.yaml exists.
        check_body_references: Check /namespace:command links in document bodies.
        skill_sections: Skill section name -> required | recommended | optional,
            merged over the built-in section list.
    """

    strict: bool = False
    required_fields: Dict[ComponentKind, List[str]] = field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_REQUIRED_FIELDS.items()}
    )
    min_description_length: int = 20
    max_description_length: Dict[ComponentKind, int] = field(
        default_factory=lambda: dict(DEFAULT_MAX_DESCRIPTION_LENGTH)
    )
    ignore_namespaces: List[str] = field(default_factory=list)
    ignore_paths: List[str] = field(default_factory=list)
    check_registry: bool = True
    check_body_references: bool = True
    skill_sections: Dict[str, str] = field(default_factory=dict)

    def required_for(self, kind: ComponentKind) -> List[str]:
        return self.required_fields.get(kind, [])

    def max_length_for(self, kind: ComponentKind) -> int:
        return self.max_description_length.get(kind, 200)

    def is_ignored(self, relative_path: str) -> bool:
        """Check whether a pack-relative path matches an ignore pattern."""
        return any(fnmatch(relative_path, pattern) for pattern in self.ignore_paths)


def config_from_dict(data: Dict[str, Any]) -> LintConfig:
    """
    Create a LintConfig from a dictionary.

    Args:
        data: Configuration mapping (typically loaded from YAML).

    Returns:
        LintConfig with defaults for absent keys.

    Raises:
        ConfigError: If a key is unknown or a value is invalid.
    """
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    config = LintConfig()

    if "strict" in data:
        config.strict = _parse_bool("strict", data["strict"])
    if "check_registry" in data:
        config.check_registry = _parse_bool("check_registry", data["check_registry"])
    if "check_body_references" in data:
        config.check_body_references = _parse_bool(
            "check_body_references", data["check_body_references"]
        )

    if "required_fields" in data:
        required = data["required_fields"]
        if not isinstance(required, dict):
            raise ConfigError("'required_fields' must map component kinds to field lists")
        for kind_name, fields in required.items():
            kind = _parse_kind(kind_name)
            config.required_fields[kind] = _parse_str_list(
                f"required_fields.{kind_name}", fields
            )

    if "min_description_length" in data:
        config.min_description_length = _parse_positive_int(
            "min_description_length", data["min_description_length"]
        )

    if "max_description_length" in data:
        limits = data["max_description_length"]
        if isinstance(limits, dict):
            for kind_name, limit in limits.items():
                config.max_description_length[_parse_kind(kind_name)] = _parse_positive_int(
                    f"max_description_length.{kind_name}", limit
                )
        else:
            limit = _parse_positive_int("max_description_length", limits)
            config.max_description_length = {kind: limit for kind in ComponentKind}

    if "ignore_namespaces" in data:
        config.ignore_namespaces = _parse_str_list("ignore_namespaces", data["ignore_namespaces"])
    if "ignore_paths" in data:
        config.ignore_paths = _parse_str_list("ignore_paths", data["ignore_paths"])

    if "skill_sections" in data:
        sections = data["skill_sections"]
        if not isinstance(sections, dict):
            raise ConfigError("'skill_sections' must map section names to requirement levels")
        for name, level in sections.items():
            if not isinstance(name, str) or not name.strip():
                raise ConfigError("'skill_sections' keys must be section names")
            if not isinstance(level, str) or level.lower() not in SECTION_LEVELS:
                raise ConfigError(
                    f"Invalid level for skill_sections.{name}: {level}. "
                    f"Must be one of {', '.join(SECTION_LEVELS)}."
                )
            config.skill_sections[name.strip()] = level.lower()

    return config


def find_config_file(root: Path) -> Optional[Path]:
    """Find a configuration file in the pack root."""
    for name in CONFIG_FILENAMES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def load_config(
    path: Optional[Union[str, Path]] = None,
    root: Optional[Union[str, Path]] = None,
) -> LintConfig:
    """
    Load lint configuration.

    Args:
        path: Explicit config file. Must exist when given.
        root: Pack root searched for packlint.yaml / .packlint.yaml.

    Returns:
        LintConfig (defaults when no file is found).

    Raises:
        ConfigError: If the file is unreadable, not YAML, or has invalid values.
    """
    if path is not None:
        config_path: Optional[Path] = Path(path)
        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
    elif root is not None:
        config_path = find_config_file(Path(root))
    else:
        config_path = None

    if config_path is None:
        logger.debug("No config file found, using defaults")
        return LintConfig()

    logger.debug("Loading config from %s", config_path)
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {config_path}: {e}") from e

    if data is None:
        return LintConfig()

    try:
        return config_from_dict(data)
    except ConfigError as e:
        raise ConfigError(f"{config_path}: {e}") from e
