"""
YAML settings for the ginkou command line.

Example ``~/.config/ginkou/config.yaml``::

    database: ~/corpora/ginkou.db
    limit: 100
    split: period
    sudachi:
      split_mode: B
      form: dictionary
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .db import DEFAULT_LIMIT
from .exceptions import ConfigError
from .reader import SPLIT_STYLES
from .segmenter import SPLIT_MODES, WORD_FORMS

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "GINKOU_CONFIG"
SEGMENTERS = ("sudachi", "whitespace")

_TOP_LEVEL_KEYS = {"database", "limit", "split", "segmenter", "sudachi"}
_SUDACHI_KEYS = {"split_mode", "config_path", "form"}


def default_db_path() -> Path:
    """``~/.ginkoudb``, or ``./.ginkoudb`` when there is no home directory."""
    try:
        return Path.home() / ".ginkoudb"
    except RuntimeError:
        return Path(".ginkoudb")


def default_config_path() -> Path:
    return Path("~/.config/ginkou/config.yaml").expanduser()


@dataclass(frozen=True)
class Settings:
    """Resolved settings for one command invocation."""
    database: Path
    limit: Optional[int] = DEFAULT_LIMIT
    split: str = "line"
    segmenter: str = "sudachi"
    split_mode: str = "C"
    sudachi_config: Optional[Path] = None
    word_form: str = "normalized"

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)


def load_settings(path: Union[str, Path, None] = None) -> Settings:
    """Load settings from a YAML file.

    Args:
        path: Settings file. When omitted, ``$GINKOU_CONFIG`` and then
            ``~/.config/ginkou/config.yaml`` are tried; a missing default
            file means all defaults.

    Returns:
        Settings object

    Raises:
        ConfigError: If the file cannot be read or holds invalid settings
    """
    explicit = path is not None
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            path, explicit = env_path, True
        else:
            path = default_config_path()

    config_path = Path(path).expanduser()
    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {config_path}")
        return Settings(database=default_db_path())

    logger.debug(f"Loading settings from {config_path}")
    data = _load_yaml_file(config_path)
    return _parse_settings(data)


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load YAML from a file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        line = getattr(e, "problem_mark", None)
        line_num = line.line + 1 if line else None
        raise ConfigError(f"Invalid YAML: {e}", line=line_num) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("YAML root must be a mapping (dictionary)")

    return data


def _parse_settings(data: Dict[str, Any]) -> Settings:
    """Parse a dictionary into a Settings object."""
    unknown = set(data) - _TOP_LEVEL_KEYS
    if unknown:
        raise ConfigError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

    database = data.get("database")
    if database is None:
        db_path = default_db_path()
    elif isinstance(database, str):
        db_path = Path(database).expanduser()
    else:
        raise ConfigError("Field 'database' must be a string")

    limit = data.get("limit", DEFAULT_LIMIT)
    if limit is not None and (
        isinstance(limit, bool) or not isinstance(limit, int) or limit < 0
    ):
        raise ConfigError("Field 'limit' must be a non-negative integer or null")

    split = data.get("split", "line")
    if split not in SPLIT_STYLES:
        raise ConfigError(
            f"Field 'split' must be one of: {', '.join(SPLIT_STYLES)}"
        )

    segmenter = data.get("segmenter", "sudachi")
    if segmenter not in SEGMENTERS:
        raise ConfigError(
            f"Field 'segmenter' must be one of: {', '.join(SEGMENTERS)}"
        )

    sudachi = data.get("sudachi") or {}
    if not isinstance(sudachi, dict):
        raise ConfigError("Field 'sudachi' must be a mapping")
    unknown = set(sudachi) - _SUDACHI_KEYS
    if unknown:
        raise ConfigError(
            f"Unknown sudachi setting(s): {', '.join(sorted(unknown))}"
        )

    split_mode = sudachi.get("split_mode", "C")
    if split_mode not in SPLIT_MODES:
        raise ConfigError(
            f"Field 'sudachi.split_mode' must be one of: {', '.join(SPLIT_MODES)}"
        )

    word_form = sudachi.get("form", "normalized")
    if word_form not in WORD_FORMS:
        raise ConfigError(
            f"Field 'sudachi.form' must be one of: {', '.join(WORD_FORMS)}"
        )

    sudachi_config = sudachi.get("config_path")
    if sudachi_config is not None and not isinstance(sudachi_config, str):
        raise ConfigError("Field 'sudachi.config_path' must be a string")

    return Settings(
        database=db_path,
        limit=limit,
        split=split,
        segmenter=segmenter,
        split_mode=split_mode,
        sudachi_config=Path(sudachi_config).expanduser() if sudachi_config else None,
        word_form=word_form,
    )
