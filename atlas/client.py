"""HTTP chat session that drives the conversation state against the agent route."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

import httpx
from pydantic import TypeAdapter

from .conversation import (
    ChatState,
    begin_send,
    complete_send,
    current_suggestions,
    fail_send,
    initial_state,
    select_suggestion,
    set_input,
)
from .types import AgentFailure, AgentRequest, AgentResponse, AgentTurn

logger = logging.getLogger(__name__)

AGENT_ENDPOINT = "/api/agent"
GENERIC_ERROR = "Something went wrong while running the agent."

_response_adapter: TypeAdapter[AgentResponse] = TypeAdapter(AgentResponse)


class AgentRequestError(Exception):
    """The agent route answered, but not with a usable turn."""


class ChatSession:
    """Owns one conversation and allows a single request in flight at a time."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        state: Optional[ChatState] = None,
        endpoint: str = AGENT_ENDPOINT,
    ) -> None:
        self.client = client
        self.state = state or initial_state()
        self.endpoint = endpoint

    @property
    def suggestions(self) -> List[str]:
        return current_suggestions(self.state.messages)

    def set_input(self, text: str) -> None:
        self.state = set_input(self.state, text)

    async def send(self, content: Optional[str] = None) -> bool:
        """Send ``content`` (or the current input). Returns False when nothing was sent."""
        text = self.state.input if content is None else content
        next_state, request = begin_send(self.state, text)
        return await self._dispatch(next_state, request)

    async def choose_suggestion(self, suggestion: str) -> bool:
        next_state, request = select_suggestion(self.state, suggestion)
        return await self._dispatch(next_state, request)

    async def _dispatch(self, next_state: ChatState, request: Optional[AgentRequest]) -> bool:
        self.state = next_state
        if request is None:
            return False
        try:
            turn = await self._post(request)
        except asyncio.CancelledError:
            self.state = fail_send(self.state, None)
            raise
        except (httpx.HTTPError, AgentRequestError) as exc:
            logger.warning("Agent request failed: %s", exc)
            self.state = fail_send(self.state, str(exc) or GENERIC_ERROR)
            return True
        except Exception as exc:
            logger.exception("Unexpected error while running the agent")
            self.state = fail_send(self.state, str(exc) or GENERIC_ERROR)
            return True
        self.state = complete_send(self.state, turn)
        return True

    async def _post(self, request: AgentRequest) -> AgentTurn:
        response = await self.client.post(self.endpoint, json=request.to_wire())
        try:
            envelope = _response_adapter.validate_python(response.json())
        except ValueError:
            if not response.is_success:
                raise AgentRequestError(f"Request failed ({response.status_code})") from None
            raise AgentRequestError("Agent returned no result") from None
        if isinstance(envelope, AgentFailure):
            raise AgentRequestError(envelope.error or f"Request failed ({response.status_code})")
        if not response.is_success:
            raise AgentRequestError(f"Request failed ({response.status_code})")
        return envelope.result


def open_client(base_url: str, timeout_seconds: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=base_url, timeout=timeout_seconds)


__all__ = ["ChatSession", "AgentRequestError", "open_client", "AGENT_ENDPOINT"]
