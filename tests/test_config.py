from __future__ import annotations

import pytest

from atlas.config import load_config


def test_load_config_reads_yaml(tmp_path):
    path = tmp_path / "agent.yaml"
    path.write_text(
        "model:\n  name: gpt-4o\n  temperature: 0.7\nclient:\n  base_url: http://atlas:9000\n  timeout_seconds: 5\n"
    )

    config = load_config(path)
    assert config.model.provider == "openai"
    assert config.model.name == "gpt-4o"
    assert config.model.temperature == 0.7
    assert config.client.base_url == "http://atlas:9000"
    assert config.client.timeout_seconds == 5.0
    assert config.raw["client"]["timeout_seconds"] == 5


def test_load_config_defaults_and_env_path(tmp_path, monkeypatch):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    monkeypatch.setenv("ATLAS_CONFIG", str(path))

    config = load_config()
    assert config.model.name == "gpt-4o-mini"
    assert config.client.timeout_seconds == 60.0


def test_missing_config_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")
