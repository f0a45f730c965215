"""Configuration loading utilities."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import yaml
from dotenv import load_dotenv

DEFAULT_CONFIG_PATH = "agent.yaml"


@dataclass
class ModelSettings:
    provider: str = "openai"
    name: str = "gpt-4o-mini"
    temperature: float = 0.2


@dataclass
class ClientSettings:
    base_url: str = "http://127.0.0.1:8080"
    timeout_seconds: float = 60.0


@dataclass
class AgentConfig:
    model: ModelSettings = field(default_factory=ModelSettings)
    client: ClientSettings = field(default_factory=ClientSettings)
    raw: Dict[str, Any] = field(default_factory=dict)


def config_path() -> Path:
    return Path(os.getenv("ATLAS_CONFIG", DEFAULT_CONFIG_PATH))


def load_config(path: str | Path | None = None) -> AgentConfig:
    load_dotenv(override=False)
    path = Path(path) if path else config_path()
    if not path.exists():
        raise FileNotFoundError(f"Agent config not found at {path}")
    data: Dict[str, Any] = yaml.safe_load(path.read_text()) or {}
    model_cfg = data.get("model", {})
    client_cfg = data.get("client", {})
    model = ModelSettings(
        provider=model_cfg.get("provider", "openai"),
        name=model_cfg.get("name", "gpt-4o-mini"),
        temperature=float(model_cfg.get("temperature", 0.2)),
    )
    client = ClientSettings(
        base_url=str(client_cfg.get("base_url", "http://127.0.0.1:8080")),
        timeout_seconds=float(client_cfg.get("timeout_seconds", 60.0)),
    )
    return AgentConfig(model=model, client=client, raw=data)


__all__ = ["AgentConfig", "ModelSettings", "ClientSettings", "config_path", "load_config"]
