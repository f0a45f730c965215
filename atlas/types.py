"""Wire contract shared by the API route and the chat UI."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

ChatRole = Literal["user", "assistant", "system"]


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ChatMessage(_WireModel):
    id: Optional[str] = None
    role: ChatRole
    content: str
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")


class AgentAction(_WireModel):
    title: str
    description: str
    outcome: str


class AgentSource(_WireModel):
    title: str
    url: Optional[str] = None
    excerpt: str


class TurnMeta(_WireModel):
    used_openai: bool = Field(alias="usedOpenAI")
    latency_ms: Optional[int] = Field(default=None, alias="latencyMs")


class AgentTurn(_WireModel):
    reply: str
    actions: List[AgentAction] = Field(default_factory=list)
    sources: List[AgentSource] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    meta: Optional[TurnMeta] = None


class ConversationMessage(ChatMessage):
    """A chat message as held by the UI, optionally carrying the agent turn."""

    turn: Optional[AgentTurn] = None

    @model_validator(mode="after")
    def _only_assistant_has_turn(self) -> "ConversationMessage":
        if self.turn is not None and self.role != "assistant":
            raise ValueError(f"{self.role} messages cannot carry an agent turn")
        return self


class AgentRequest(_WireModel):
    messages: List[ChatMessage] = Field(default_factory=list)


class AgentSuccess(_WireModel):
    status: Literal["ok"] = "ok"
    result: AgentTurn


class AgentFailure(_WireModel):
    status: Literal["error"] = "error"
    error: str


AgentResponse = Annotated[Union[AgentSuccess, AgentFailure], Field(discriminator="status")]


__all__ = [
    "ChatRole",
    "ChatMessage",
    "AgentAction",
    "AgentSource",
    "TurnMeta",
    "AgentTurn",
    "ConversationMessage",
    "AgentRequest",
    "AgentSuccess",
    "AgentFailure",
    "AgentResponse",
]
