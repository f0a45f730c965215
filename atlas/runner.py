"""LangChain agent runner used by the FastAPI server."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, Field

from .config import AgentConfig, load_config
from .conversation import DEFAULT_SUGGESTIONS
from .types import AgentAction, AgentRequest, AgentSource, AgentTurn, ChatMessage, TurnMeta

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are Atlas, an execution-first AI operator. Turn ambiguous goals and messy notes "
    "into crisp execution: clarify the target outcome, surface constraints and blockers, "
    "and finish with concrete next actions. Describe each step you took as an action, "
    "cite any playbooks or references you relied on as sources, and offer up to four "
    "short follow-up prompts the user could send next."
)


class TurnDraft(BaseModel):
    """Structured output requested from the model."""

    reply: str = Field(description="Answer shown to the user")
    actions: List[AgentAction] = Field(default_factory=list, description="Steps taken to produce the reply")
    sources: List[AgentSource] = Field(default_factory=list, description="References relied upon")
    suggestions: List[str] = Field(default_factory=list, description="Follow-up prompts, at most four")


@dataclass(frozen=True)
class Playbook:
    keywords: Sequence[str]
    source: AgentSource
    suggestions: Sequence[str]


PLAYBOOKS: Sequence[Playbook] = (
    Playbook(
        keywords=("launch", "release", "ship", "sprint"),
        source=AgentSource(
            title="Launch readiness checklist",
            excerpt="Lock scope two weeks out, name a single owner per workstream, and rehearse the rollback.",
        ),
        suggestions=(
            "List the launch risks and owners.",
            "Draft the announcement timeline.",
            "Define success metrics for week one.",
        ),
    ),
    Playbook(
        keywords=("meeting", "transcript", "notes", "minutes"),
        source=AgentSource(
            title="Meeting-to-action template",
            excerpt="Capture decisions, owners and due dates; park open questions separately.",
        ),
        suggestions=(
            "Turn these notes into a follow-up email.",
            "Highlight the decisions that still need an owner.",
        ),
    ),
    Playbook(
        keywords=("position", "pivot", "messaging", "brand"),
        source=AgentSource(
            title="Positioning canvas",
            excerpt="Start from the alternative customers use today, then the unique capability and who cares most.",
        ),
        suggestions=(
            "Compare two positioning angles side by side.",
            "Write a one-line pitch for each segment.",
        ),
    ),
    Playbook(
        keywords=("onboard", "activation", "power user", "week one"),
        source=AgentSource(
            title="Activation ladder",
            excerpt="Map the first value moment, remove steps before it, and nudge toward the habit loop.",
        ),
        suggestions=(
            "Sketch the day-one checklist.",
            "Pick the activation metric to track.",
        ),
    ),
)


def last_user_message(messages: Sequence[ChatMessage]) -> str:
    for message in reversed(messages):
        if message.role == "user" and message.content.strip():
            return message.content.strip()
    raise ValueError("Conversation must include at least one user message")


def build_messages(request: AgentRequest) -> List[BaseMessage]:
    history: List[BaseMessage] = [SystemMessage(content=SYSTEM_PROMPT)]
    for message in request.messages:
        if message.role == "user":
            history.append(HumanMessage(content=message.content))
        elif message.role == "assistant":
            if message.content:
                history.append(AIMessage(content=message.content))
        else:
            history.append(SystemMessage(content=message.content))
    return history


def match_playbooks(text: str) -> List[Playbook]:
    lowered = text.lower()
    return [playbook for playbook in PLAYBOOKS if any(word in lowered for word in playbook.keywords)]


def offline_turn(goal: str) -> AgentTurn:
    """Deterministic turn used when no model credentials are configured."""
    playbooks = match_playbooks(goal)
    suggestions: List[str] = []
    for playbook in playbooks:
        suggestions.extend(s for s in playbook.suggestions if s not in suggestions)
    headline = goal.splitlines()[0]
    return AgentTurn(
        reply=(
            f"Here is how I would attack \"{headline}\": pin down the outcome, "
            "split it into owned workstreams, and commit to the first move today."
        ),
        actions=[
            AgentAction(
                title="Clarify outcome",
                description="Restate the goal as a measurable result.",
                outcome=f"Target: {headline}",
            ),
            AgentAction(
                title="Break down",
                description="Split the goal into workstreams with a single owner each.",
                outcome="Scope • Owners • Risks • Timeline",
            ),
            AgentAction(
                title="Next action",
                description="Pick the smallest step that unblocks the rest.",
                outcome="Schedule a 30 minute kickoff and share the draft plan.",
            ),
        ],
        sources=[playbook.source for playbook in playbooks],
        suggestions=suggestions[:4] or list(DEFAULT_SUGGESTIONS),
    )


async def _ainvoke_model(config: AgentConfig, request: AgentRequest) -> AgentTurn:
    llm = ChatOpenAI(model=config.model.name, temperature=config.model.temperature)
    chain = llm.with_structured_output(TurnDraft)
    draft = await chain.ainvoke(build_messages(request))
    return AgentTurn(**draft.model_dump())


async def run_agent(request: AgentRequest, config: Optional[AgentConfig] = None) -> AgentTurn:
    """Produce one assistant turn for the conversation in ``request``."""

    goal = last_user_message(request.messages)
    started = time.perf_counter()
    if os.getenv("OPENAI_API_KEY"):
        config = config or load_config()
        turn = await _ainvoke_model(config, request)
        used_openai = True
    else:
        logger.info("OPENAI_API_KEY is not configured; answering with the offline planner")
        turn = offline_turn(goal)
        used_openai = False
    latency_ms = round((time.perf_counter() - started) * 1000)
    logger.debug("Agent turn ready in %sms (openai=%s)", latency_ms, used_openai)
    return turn.model_copy(update={"meta": TurnMeta(used_openai=used_openai, latency_ms=latency_ms)})


__all__ = ["run_agent", "build_messages", "offline_turn", "last_user_message", "PLAYBOOKS"]
