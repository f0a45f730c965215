"""Chat UI state and the pure transitions that drive it.

Every function here takes the previous :class:`ChatState` and returns the next
one; nothing is mutated in place. Rendering and networking live elsewhere.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from .types import (
    AgentAction,
    AgentRequest,
    AgentTurn,
    ChatMessage,
    ConversationMessage,
    TurnMeta,
)

logger = logging.getLogger(__name__)

DEFAULT_SUGGESTIONS: Tuple[str, ...] = (
    "Design a sprint plan for a new AI feature launch.",
    "Summarise this meeting transcript into action items.",
    "Brainstorm positioning angles for a product pivot.",
    "Draft an onboarding flow for power users in week one.",
)

WELCOME_TEXT = (
    "I'm Atlas, your execution-first AI operator. Drop me a goal or messy notes. "
    "I'll map the path, surface blockers, and keep you moving."
)


def welcome_message() -> ConversationMessage:
    return ConversationMessage(
        id="welcome",
        role="assistant",
        content=WELCOME_TEXT,
        turn=AgentTurn(
            reply="",
            actions=[
                AgentAction(
                    title="Onboarding",
                    description="Set expectations for how I collaborate.",
                    outcome=(
                        "Clarify the target outcome • Gather key constraints • "
                        "Translate into a tight plan • Keep the loop tight with next actions."
                    ),
                )
            ],
            sources=[],
            suggestions=list(DEFAULT_SUGGESTIONS),
            meta=TurnMeta(used_openai=False),
        ),
    )


@dataclass(frozen=True)
class ChatState:
    messages: Tuple[ConversationMessage, ...] = ()
    input: str = ""
    loading: bool = False
    error: Optional[str] = None


def initial_state() -> ChatState:
    return ChatState(messages=(welcome_message(),))


def set_input(state: ChatState, text: str) -> ChatState:
    return replace(state, input=text)


def _new_id() -> str:
    return uuid.uuid4().hex


def to_request(messages: Iterable[ChatMessage]) -> AgentRequest:
    """Strip the conversation down to the role/content pairs the route accepts."""
    return AgentRequest(
        messages=[ChatMessage(role=message.role, content=message.content) for message in messages]
    )


def begin_send(state: ChatState, content: str) -> Tuple[ChatState, Optional[AgentRequest]]:
    """Append the user message and build the outgoing request.

    Returns the unchanged state and ``None`` when the content is blank or a
    send is already in flight.
    """
    text = content.strip()
    if not text or state.loading:
        return state, None
    user_message = ConversationMessage(
        id=_new_id(),
        role="user",
        content=text,
        created_at=datetime.now(timezone.utc),
    )
    messages = state.messages + (user_message,)
    next_state = replace(state, messages=messages, input="", loading=True, error=None)
    return next_state, to_request(messages)


def complete_send(state: ChatState, turn: AgentTurn) -> ChatState:
    assistant_message = ConversationMessage(
        id=_new_id(),
        role="assistant",
        content=turn.reply,
        created_at=datetime.now(timezone.utc),
        turn=turn,
    )
    return replace(state, messages=state.messages + (assistant_message,), loading=False)


def fail_send(state: ChatState, message: Optional[str]) -> ChatState:
    # The user message stays in place so it can be re-submitted.
    return replace(state, loading=False, error=message)


def select_suggestion(state: ChatState, suggestion: str) -> Tuple[ChatState, Optional[AgentRequest]]:
    return begin_send(set_input(state, suggestion), suggestion)


def current_suggestions(messages: Iterable[ConversationMessage]) -> List[str]:
    """Suggestions from the newest turn that offers any, else the defaults."""
    for message in reversed(list(messages)):
        if message.turn is not None and message.turn.suggestions:
            return list(message.turn.suggestions)
    return list(DEFAULT_SUGGESTIONS)


_messages_adapter: TypeAdapter[List[ConversationMessage]] = TypeAdapter(List[ConversationMessage])


def dump_messages(messages: Iterable[ConversationMessage]) -> str:
    return _messages_adapter.dump_json(list(messages), by_alias=True, exclude_none=True).decode()


def restore_state(raw_messages: str, input_text: str = "") -> ChatState:
    """Rebuild the state a rendered page carried back in its form fields."""
    if not raw_messages.strip():
        return set_input(initial_state(), input_text)
    try:
        messages = _messages_adapter.validate_json(raw_messages)
    except ValidationError as exc:
        logger.warning("Discarding unreadable conversation: %s", exc)
        return ChatState(
            messages=(welcome_message(),),
            input=input_text,
            error="The previous conversation could not be restored.",
        )
    return ChatState(messages=tuple(messages), input=input_text)


__all__ = [
    "ChatState",
    "DEFAULT_SUGGESTIONS",
    "welcome_message",
    "initial_state",
    "set_input",
    "to_request",
    "begin_send",
    "complete_send",
    "fail_send",
    "select_suggestion",
    "current_suggestions",
    "dump_messages",
    "restore_state",
]
