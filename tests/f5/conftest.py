"""Fixtures for F5 tests - CLI and configuration."""

import pytest

from tagdrill.config.app_config import DATA_DIR_ENV, clear_config_cache


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Every test starts with no cached config and no data dir override."""
    monkeypatch.delenv(DATA_DIR_ENV, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def cli_env(sample_data_dir) -> dict[str, str]:
    """Environment pointing the CLI at the sample tables."""
    return {DATA_DIR_ENV: str(sample_data_dir)}
