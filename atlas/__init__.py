"""Atlas: a chat front end for an execution-first agent."""

from .runner import run_agent
from .types import AgentAction, AgentRequest, AgentSource, AgentTurn, ChatMessage, ConversationMessage

__version__ = "0.1.0"

__all__ = [
    "run_agent",
    "AgentAction",
    "AgentRequest",
    "AgentSource",
    "AgentTurn",
    "ChatMessage",
    "ConversationMessage",
]
