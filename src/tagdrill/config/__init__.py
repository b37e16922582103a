"""Configuration package for tagdrill."""

from tagdrill.config.app_config import (
    AppConfig,
    PathsConfig,
    ProficiencyConfig,
    QuizConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "PathsConfig",
    "ProficiencyConfig",
    "QuizConfig",
    "clear_config_cache",
    "load_app_config",
]
