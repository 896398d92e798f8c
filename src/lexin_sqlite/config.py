"""Configuration loading and startup validation for lexin-sqlite."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from lexin_sqlite.db import DEFAULT_DB_PATH
from lexin_sqlite.exceptions import ConfigError

logger = logging.getLogger(__name__)

# Keys accepted in a YAML config file, mirroring the long CLI flags.
CONFIG_KEYS = frozenset({"file", "db", "target"})


@dataclass(frozen=True)
class Config:
    xml_file: Optional[Path]
    db_path: Path
    target_lang: str


def load_config(
    *,
    file: Optional[str | Path] = None,
    db: Optional[str | Path] = None,
    target: Optional[str] = None,
    config_file: Optional[str | Path] = None,
) -> Config:
    """Build and validate the run configuration.

    Values given explicitly win over those read from *config_file*. The
    store's parent directory is created when missing.

    Raises:
        ConfigError: If the source file or target language is missing, the
            source file does not exist, or the config file is unusable.
    """
    values: Dict[str, Any] = {}
    if config_file is not None:
        values.update(_load_yaml_file(Path(config_file)))
    for key, value in (("file", file), ("db", db), ("target", target)):
        if value is not None:
            values[key] = value

    config = Config(
        xml_file=Path(values["file"]) if values.get("file") else None,
        db_path=Path(values.get("db") or DEFAULT_DB_PATH),
        target_lang=values.get("target") or "",
    )
    if config.xml_file is None:
        raise ConfigError("XML file path is required")
    if not config.target_lang:
        raise ConfigError("target language code is required")
    if not config.xml_file.exists():
        raise ConfigError(f"XML file does not exist: {config.xml_file}")

    db_dir = config.db_path.parent
    if db_dir != Path("."):
        try:
            db_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigError(f"Failed to create database directory: {e}") from e

    return config


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load config values from a YAML mapping."""
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        where = f" (line {mark.line + 1})" if mark else ""
        raise ConfigError(f"Invalid YAML in {path}{where}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("YAML root must be a mapping (dictionary)")

    unknown = sorted(set(data) - CONFIG_KEYS)
    if unknown:
        logger.warning(f"Ignoring unknown config keys: {', '.join(map(str, unknown))}")
    values = {k: v for k, v in data.items() if k in CONFIG_KEYS}
    for key, value in values.items():
        if value is not None and not isinstance(value, str):
            raise ConfigError(f"'{key}' must be a string in {path}")
    return values
