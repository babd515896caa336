"""Keep tests away from the user's real config and environment."""

from __future__ import annotations

import pytest

from vidnote import config


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    monkeypatch.setattr(config, "CONFIG_DIR", tmp_path / "config")
    monkeypatch.setattr(config, "CONFIG_PATH", tmp_path / "config" / "config.json")
    for env_name in config.ENV_OVERRIDES.values():
        monkeypatch.delenv(env_name, raising=False)
    return tmp_path / "config" / "config.json"
