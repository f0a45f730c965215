from __future__ import annotations

import asyncio

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from atlas import runner
from atlas.config import AgentConfig
from atlas.conversation import DEFAULT_SUGGESTIONS
from atlas.types import AgentRequest, AgentTurn, ChatMessage


def request_for(*messages):
    return AgentRequest(messages=[ChatMessage(role=role, content=content) for role, content in messages])


def test_offline_turn_matches_playbooks():
    turn = runner.offline_turn("Plan a launch and summarise the kickoff meeting notes")
    titles = [source.title for source in turn.sources]
    assert titles == ["Launch readiness checklist", "Meeting-to-action template"]
    assert len(turn.suggestions) == 4
    assert turn.suggestions[0] == "List the launch risks and owners."
    assert [action.title for action in turn.actions] == ["Clarify outcome", "Break down", "Next action"]


def test_offline_turn_without_playbook_uses_default_suggestions():
    turn = runner.offline_turn("Help me think")
    assert turn.sources == []
    assert turn.suggestions == list(DEFAULT_SUGGESTIONS)
    assert "Help me think" in turn.reply


def test_run_agent_offline(offline):
    turn = asyncio.run(runner.run_agent(request_for(("user", "Draft positioning for our pivot")), offline))
    assert turn.meta.used_openai is False
    assert isinstance(turn.meta.latency_ms, int)
    assert "latencyMs\": " in turn.model_dump_json(by_alias=True)
    assert turn.sources[0].title == "Positioning canvas"


def test_run_agent_requires_user_message(offline):
    with pytest.raises(ValueError, match="at least one user message"):
        asyncio.run(runner.run_agent(request_for(("assistant", "hello"), ("user", "   ")), offline))


def test_run_agent_uses_model_when_configured(monkeypatch):
    seen = {}

    async def fake_model(config, request):
        seen["model"] = config.model.name
        return AgentTurn(reply="From the model", suggestions=["Go"])

    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(runner, "_ainvoke_model", fake_model)

    turn = asyncio.run(runner.run_agent(request_for(("user", "Plan a launch")), AgentConfig()))
    assert turn.reply == "From the model"
    assert turn.meta.used_openai is True
    assert seen["model"] == "gpt-4o-mini"


def test_build_messages_maps_roles():
    messages = runner.build_messages(
        request_for(
            ("assistant", ""),
            ("system", "Be brief"),
            ("user", "Plan a launch"),
            ("assistant", "Here is a plan"),
        )
    )
    assert [type(message) for message in messages] == [SystemMessage, SystemMessage, HumanMessage, AIMessage]
    assert messages[0].content == runner.SYSTEM_PROMPT
    assert messages[-1].content == "Here is a plan"
