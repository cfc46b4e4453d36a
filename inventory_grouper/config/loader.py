from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from dotenv import load_dotenv
from jsonschema.exceptions import ValidationError

from ..grouping.aggregator import DEFAULT_CATEGORY_COLUMN, DEFAULT_CATEGORY_KEYWORD
from ..grouping.price import DEFAULT_PRICE_FIELDS

"""Config loader.

Responsibilities:
- Load an optional YAML config (category filter, price fields, CORS origin)
- Validate it against the packaged JSON schema
- Apply defaults for every missing key

Resolution order for the config path:
    1. explicit path (CLI ``--config``)
    2. ``INVENTORY_GROUPER_CONFIG`` (``.env`` is loaded first via python-dotenv)
    3. built-in defaults (no file)
"""

__all__ = [
    "ConfigError",
    "GrouperConfig",
    "CONFIG_ENV_VAR",
    "load_config",
    "resolve_config",
]

CONFIG_ENV_VAR = "INVENTORY_GROUPER_CONFIG"
SCHEMA_PATH = Path(__file__).parent / "config_schema.json"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class GrouperConfig:
    category_column: str = DEFAULT_CATEGORY_COLUMN
    category_keyword: str = DEFAULT_CATEGORY_KEYWORD
    price_fields: tuple[str, ...] = field(default=DEFAULT_PRICE_FIELDS)
    allow_origin: str = "*"


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the packaged JSON schema.

    Raises:
        ConfigError: schema file missing / not JSON, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path) -> GrouperConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    defaults = GrouperConfig()
    category = data.get("category_filter", {})
    cors = data.get("cors", {})
    return GrouperConfig(
        category_column=category.get("column", defaults.category_column),
        category_keyword=category.get("keyword", defaults.category_keyword),
        price_fields=tuple(data.get("price_fields", defaults.price_fields)),
        allow_origin=cors.get("allow_origin", defaults.allow_origin),
    )


def resolve_config(path: Path | None = None, env_file: Path | None = Path(".env")) -> GrouperConfig:
    """Pick the config source (explicit path > env var > defaults) and load it."""
    if path is not None:
        return load_config(path)
    if env_file is not None and env_file.exists():
        load_dotenv(dotenv_path=env_file, override=False)
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return load_config(Path(env_path))
    return GrouperConfig()
