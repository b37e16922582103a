"""Application configuration loader.

Loads centralized configuration from data/config/tagdrill_v1.yaml, merging
it over built-in defaults. A missing or malformed file means defaults.

Usage:
    from tagdrill.config.app_config import load_app_config

    config = load_app_config()
    table = config.table_path(Category.VALVE)
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

from tagdrill.core.categories import Category
from tagdrill.core.proficiency import DEFAULT_NAMESPACE
from tagdrill.core.record_merger import DEFAULT_TABLES
from tagdrill.core.session import DEFAULT_PAUSE_SECONDS, EXAM_RATIO

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/tagdrill_v1.yaml")
DATA_DIR_ENV = "TAGDRILL_DATA_DIR"


@dataclass
class PathsConfig:
    """Where tables and state live."""

    data_dir: str = "data"
    state_dir: str = "data/state"


@dataclass
class QuizConfig:
    """Quiz session defaults."""

    exam_ratio: float = EXAM_RATIO
    pause_seconds: float = DEFAULT_PAUSE_SECONDS
    default_category: str = Category.EQUIPMENT.value


@dataclass
class ProficiencyConfig:
    """Proficiency store settings."""

    namespace: str = DEFAULT_NAMESPACE


@dataclass
class AppConfig:
    """Application-wide configuration."""

    paths: PathsConfig = field(default_factory=PathsConfig)
    tables: dict[Category, str] = field(default_factory=lambda: dict(DEFAULT_TABLES))
    quiz: QuizConfig = field(default_factory=QuizConfig)
    proficiency: ProficiencyConfig = field(default_factory=ProficiencyConfig)

    @property
    def data_dir(self) -> Path:
        return Path(self.paths.data_dir)

    @property
    def state_dir(self) -> Path:
        return Path(self.paths.state_dir)

    def table_path(self, category: Category) -> Path:
        return self.data_dir / self.tables[category]


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "paths": {
            "data_dir": "data",
        },
        "tables": {
            "equipment": "equipment.csv",
            "valve": "valves.csv",
            "performance": "performance.csv",
            "standard": "standard.csv",
        },
        "quiz": {
            "exam_ratio": EXAM_RATIO,
            "pause_seconds": DEFAULT_PAUSE_SECONDS,
            "default_category": Category.EQUIPMENT.value,
        },
        "proficiency": {
            "namespace": DEFAULT_NAMESPACE,
        },
    }


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into a copy of base, recursing into sections."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        elif value is not None:
            result[key] = value
    return result


def _parse_tables(data: dict[str, Any]) -> dict[Category, str]:
    """Map table section keys (`equipment`, ... or display names) to categories."""
    tables = dict(DEFAULT_TABLES)
    for key, filename in data.items():
        category = next(
            (c for c in Category if key in (c.name.lower(), c.value)),
            None,
        )
        if category is None:
            logger.warning("unknown_table_key", key=key)
            continue
        tables[category] = str(filename)
    return tables


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    paths_data = data.get("paths", {})
    data_dir = str(paths_data.get("data_dir", "data"))
    paths = PathsConfig(
        data_dir=data_dir,
        state_dir=str(paths_data.get("state_dir", f"{data_dir}/state")),
    )

    quiz_data = data.get("quiz", {})
    quiz = QuizConfig(
        exam_ratio=float(quiz_data.get("exam_ratio", EXAM_RATIO)),
        pause_seconds=float(quiz_data.get("pause_seconds", DEFAULT_PAUSE_SECONDS)),
        default_category=str(quiz_data.get("default_category", Category.EQUIPMENT.value)),
    )

    prof_data = data.get("proficiency", {})
    proficiency = ProficiencyConfig(
        namespace=str(prof_data.get("namespace", DEFAULT_NAMESPACE)),
    )

    return AppConfig(
        paths=paths,
        tables=_parse_tables(data.get("tables", {})),
        quiz=quiz,
        proficiency=proficiency,
    )


def load_app_config(force_reload: bool = False, config_file: Path | None = None) -> AppConfig:
    """Load application config, merged over defaults.

    The TAGDRILL_DATA_DIR environment variable overrides the data directory
    (and places state beneath it).

    Args:
        force_reload: If True, ignore cached config and reload from file.
        config_file: Alternative YAML file (defaults to CONFIG_FILE).

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload and config_file is None:
        return _cached_config

    source = config_file or CONFIG_FILE
    data = _get_defaults()

    if source.exists():
        logger.debug("loading_app_config", source=str(source))
        try:
            loaded = yaml.safe_load(source.read_text(encoding="utf-8")) or {}
        except (yaml.YAMLError, OSError) as e:
            logger.error("app_config_load_failed", source=str(source), error=str(e))
            loaded = {}
        if isinstance(loaded, dict):
            data = _deep_merge(data, loaded)
        else:
            logger.warning("app_config_invalid", source=str(source))
    else:
        logger.info("using_default_config")

    env_data_dir = os.environ.get(DATA_DIR_ENV)
    if env_data_dir:
        data["paths"]["data_dir"] = env_data_dir
        data["paths"]["state_dir"] = str(Path(env_data_dir) / "state")

    config = _parse_config(data)
    if config_file is None:
        _cached_config = config
    return config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
