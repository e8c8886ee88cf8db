"""Runtime configuration for sqlaudit - centralized configuration management."""

import copy
import json
import os
from pathlib import Path
from typing import Any

from sqlaudit.exceptions import ConfigError
from sqlaudit.scanner.vocabulary import (
    CALL_VERBS,
    IGNORE_VARIABLES,
    NAME_VERBS,
    SQL_KEYWORDS,
    ScanVocabulary,
)
from sqlaudit.utils.constants import CATALOG_FILE, ENV_PREFIX, REPORT_FILE
from sqlaudit.utils.logging import logger

DEFAULTS = {
    "paths": {
        "report": str(REPORT_FILE),
        "catalog": str(CATALOG_FILE),
    },
    "limits": {
        "max_file_size": 2 * 1024 * 1024,
        "snippet_max_chars": 200,
        "context_radius": 40,
        "max_workers": min(8, os.cpu_count() or 4),
    },
    "scan": {
        "extensions": [".pl"],
        "sql_keywords": list(SQL_KEYWORDS),
        "name_verbs": list(NAME_VERBS),
        "call_verbs": list(CALL_VERBS),
        "ignore_variables": list(IGNORE_VARIABLES),
    },
    "catalog": {
        "db": "rep",
        "entity_value": "BR",
    },
}


def _coerce(key: str, raw: str, default_value: Any) -> Any:
    """Convert an environment string to the type of its default."""
    try:
        if isinstance(default_value, bool):
            return raw.strip().lower() in ("1", "true", "yes", "on")
        if isinstance(default_value, int):
            return int(raw)
        if isinstance(default_value, float):
            return float(raw)
        if isinstance(default_value, list):
            return [v.strip() for v in raw.split(",") if v.strip()]
    except ValueError as e:
        raise ConfigError(key, raw, str(e)) from e
    return raw


def load_runtime_config(root: str = ".") -> dict[str, Any]:
    """
    Load runtime configuration from .sqlaudit/config.json and environment variables.

    Config priority (highest to lowest):
    1. Environment variables (SQLAUDIT_<SECTION>_<KEY>)
    2. .sqlaudit/config.json file
    3. Built-in defaults

    Args:
        root: Root directory to look for config file

    Returns:
        Configuration dictionary with merged values
    """
    cfg = copy.deepcopy(DEFAULTS)

    path = Path(root) / ".sqlaudit" / "config.json"
    try:
        if path.exists():
            with open(path, encoding="utf-8") as f:
                user = json.load(f)

            if isinstance(user, dict):
                for section in cfg:
                    if section in user and isinstance(user[section], dict):
                        for key, value in user[section].items():
                            if key in cfg[section] and isinstance(value, type(cfg[section][key])):
                                cfg[section][key] = value
                            else:
                                logger.warning(f"Ignoring config key {section}.{key} in {path}")
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Could not load config file from {path}: {e}")
        logger.info("Continuing with default configuration")

    for section in cfg:
        for key in cfg[section]:
            env_var = f"{ENV_PREFIX}{section.upper()}_{key.upper()}"
            if env_var in os.environ:
                try:
                    cfg[section][key] = _coerce(env_var, os.environ[env_var], cfg[section][key])
                except ConfigError as e:
                    logger.warning(f"{e} - using default value: {cfg[section][key]}")

    return cfg


def _word_list(scan: dict[str, Any], key: str) -> tuple[str, ...]:
    """Non-empty word list from the scan section, else the default."""
    words = tuple(w for w in scan[key] if w)
    if not words:
        logger.warning(f"Empty scan.{key} in config - using default value")
        return tuple(DEFAULTS["scan"][key])
    return words


def build_vocabulary(config: dict[str, Any]) -> ScanVocabulary:
    """Freeze the scan section of a loaded config into a ScanVocabulary.

    Empty keyword or verb lists fall back to the defaults.
    """
    scan = config["scan"]
    limits = config["limits"]
    return ScanVocabulary(
        sql_keywords=_word_list(scan, "sql_keywords"),
        name_verbs=_word_list(scan, "name_verbs"),
        call_verbs=_word_list(scan, "call_verbs"),
        ignore_variables=frozenset(scan["ignore_variables"]),
        snippet_max_chars=limits["snippet_max_chars"],
        context_radius=limits["context_radius"],
    )
