"""
YAML configuration for user-dictionary.

Example::

    database: ~/.user_dictionary.sqlite3
    locale: se
    log_level: INFO
    suggestions:
      speller_limit: 3
      match: prefix
    speller:
      wordlist: ~/words/se.txt
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from user_dictionary.db import MATCH_MODES
from user_dictionary.exceptions import ConfigError
from user_dictionary.merger import DEFAULT_SPELLER_LIMIT

DEFAULT_DB_PATH = Path.home() / ".user_dictionary.sqlite3"
DEFAULT_LOCALE = "en"

_TOP_LEVEL_KEYS = {"database", "locale", "log_level", "suggestions", "speller"}
_SUGGESTION_KEYS = {"speller_limit", "match", "limit"}
_SPELLER_KEYS = {"wordlist", "wordnet"}


@dataclass
class Settings:
    """Resolved configuration values."""
    database: Path = DEFAULT_DB_PATH
    locale: str = DEFAULT_LOCALE
    log_level: str = "WARNING"
    speller_limit: int = DEFAULT_SPELLER_LIMIT
    match: str = "prefix"
    limit: Optional[int] = None
    wordlist: Optional[Path] = None
    wordnet: Optional[str] = None
    source_file: Optional[Path] = None


def load_config(
    source: Union[str, Path, Dict[str, Any], None] = None,
) -> Settings:
    """Load settings from a YAML file, YAML string or dictionary.

    Args:
        source: Path to YAML file, YAML string, parsed dictionary, or
            None for the defaults

    Returns:
        Settings object

    Raises:
        ConfigError: If the content cannot be parsed or is invalid
        FileNotFoundError: If the file does not exist
    """
    source_path: Optional[Path] = None

    if source is None:
        return Settings()
    if isinstance(source, dict):
        data = source
    elif isinstance(source, Path) or _is_file_path(source):
        source_path = Path(source).expanduser()
        if not source_path.exists():
            raise FileNotFoundError(f"File not found: {source_path}")
        data = _load_yaml_file(source_path)
    else:
        data = _load_yaml_string(source)

    return _parse_settings(data, source_path)


def _is_file_path(s: str) -> bool:
    """Check if a string looks like a file path."""
    if "/" in s or "\\" in s:
        return True
    if s.endswith((".yaml", ".yml")):
        return True
    return False


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load YAML from a file."""
    with open(path, "r", encoding="utf-8") as f:
        return _load_yaml_string(f.read(), empty_ok=True)


def _load_yaml_string(s: str, empty_ok: bool = False) -> Dict[str, Any]:
    """Load YAML from a string."""
    try:
        data = yaml.safe_load(s)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line_num = mark.line + 1 if mark else None
        raise ConfigError(f"Invalid YAML: {e}", line=line_num) from e

    if data is None:
        if empty_ok:
            return {}
        raise ConfigError("Empty YAML content")
    if not isinstance(data, dict):
        raise ConfigError("YAML root must be a mapping (dictionary)")

    return data


def _section(data: Dict[str, Any], name: str, allowed: set) -> Dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Field '{name}' must be a mapping")
    unknown = set(section) - allowed
    if unknown:
        raise ConfigError(
            f"Unknown key(s) in '{name}': {', '.join(sorted(unknown))}"
        )
    return section


def _parse_settings(
    data: Dict[str, Any],
    source_path: Optional[Path] = None,
) -> Settings:
    """Parse a dictionary into a Settings object."""
    unknown = set(data) - _TOP_LEVEL_KEYS
    if unknown:
        raise ConfigError(f"Unknown key(s): {', '.join(sorted(unknown))}")

    settings = Settings(source_file=source_path)

    if data.get("database") is not None:
        settings.database = Path(str(data["database"])).expanduser()

    if data.get("locale") is not None:
        if not isinstance(data["locale"], str) or not data["locale"]:
            raise ConfigError("Field 'locale' must be a non-empty string")
        settings.locale = data["locale"]

    if data.get("log_level") is not None:
        level = str(data["log_level"]).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ConfigError(f"Invalid log level: {data['log_level']!r}")
        settings.log_level = level

    suggestions = _section(data, "suggestions", _SUGGESTION_KEYS)
    if "speller_limit" in suggestions:
        settings.speller_limit = _non_negative_int(
            suggestions["speller_limit"], "suggestions.speller_limit"
        )
    if "limit" in suggestions and suggestions["limit"] is not None:
        settings.limit = _non_negative_int(suggestions["limit"], "suggestions.limit")
    if "match" in suggestions:
        if suggestions["match"] not in MATCH_MODES:
            raise ConfigError(
                f"Field 'suggestions.match' must be one of: {', '.join(MATCH_MODES)}"
            )
        settings.match = suggestions["match"]

    speller = _section(data, "speller", _SPELLER_KEYS)
    if speller.get("wordlist"):
        settings.wordlist = Path(str(speller["wordlist"])).expanduser()
    if speller.get("wordnet"):
        settings.wordnet = str(speller["wordnet"])

    return settings


def _non_negative_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"Field '{name}' must be a non-negative integer")
    return value
