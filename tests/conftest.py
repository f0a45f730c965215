from __future__ import annotations

from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from atlas.config import AgentConfig


@pytest.fixture
def plan_turn():
    return {
        "reply": "Here is a plan",
        "actions": [],
        "sources": [],
        "suggestions": ["Next step A"],
    }


@pytest.fixture
def offline(monkeypatch):
    """Run the default agent without model credentials."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    return AgentConfig()
