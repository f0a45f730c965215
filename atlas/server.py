"""FastAPI server for Atlas."""

from __future__ import annotations

import inspect
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from .client import AGENT_ENDPOINT, ChatSession
from .config import AgentConfig, ClientSettings, load_config
from .conversation import ChatState, current_suggestions, dump_messages, initial_state, restore_state
from .runner import run_agent
from .types import AgentFailure, AgentRequest, AgentSuccess, AgentTurn

logger = logging.getLogger(__name__)

AgentResult = Union[AgentTurn, Dict[str, Any]]
AgentFn = Callable[[AgentRequest], Union[AgentResult, Awaitable[AgentResult]]]


def create_app(agent: Optional[AgentFn] = None, config: Optional[AgentConfig] = None) -> FastAPI:
    templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

    @asynccontextmanager
    async def lifespan(app: FastAPI):  # pragma: no cover - lifecycle wiring
        if app.state.config is None:
            app.state.config = load_config()
        yield

    app = FastAPI(title="Atlas", lifespan=lifespan)
    static_dir = Path(__file__).parent / "static"

    app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    app.state.agent = agent
    app.state.config = config
    app.state.templates = templates

    async def invoke_agent(agent_request: AgentRequest) -> AgentTurn:
        if app.state.agent is None:
            return await run_agent(agent_request, config=app.state.config)
        result = app.state.agent(agent_request)
        if inspect.isawaitable(result):
            result = await result
        return AgentTurn.model_validate(result)

    def render_page(request: Request, state: ChatState) -> HTMLResponse:
        return app.state.templates.TemplateResponse(
            request,
            "index.html",
            {
                "state": state,
                "suggestions": current_suggestions(state.messages),
                "conversation": dump_messages(state.messages),
            },
        )

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post(AGENT_ENDPOINT)
    async def agent_route(request: Request) -> JSONResponse:
        try:
            try:
                body = await request.json()
            except ValueError:
                raise ValueError("Request body must be valid JSON") from None
            try:
                agent_request = AgentRequest.model_validate(body)
            except ValidationError:
                raise ValueError("Request body must contain a conversation") from None
            turn = await invoke_agent(agent_request)
        except Exception as exc:
            logger.exception("Agent error")
            failure = AgentFailure(error=str(exc) or "Unknown error")
            return JSONResponse(failure.to_wire(), status_code=400)
        return JSONResponse(AgentSuccess(result=turn).to_wire())

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request) -> HTMLResponse:
        return render_page(request, initial_state())

    @app.post("/", response_class=HTMLResponse)
    async def submit(request: Request) -> HTMLResponse:
        form = await request.form()
        state = restore_state(str(form.get("conversation") or ""), str(form.get("input") or ""))
        settings = app.state.config.client if app.state.config else ClientSettings()
        transport = httpx.ASGITransport(app=request.app)
        async with httpx.AsyncClient(
            transport=transport,
            base_url="http://atlas",
            timeout=settings.timeout_seconds,
        ) as client:
            session = ChatSession(client, state)
            suggestion = str(form.get("suggestion") or "")
            if suggestion:
                await session.choose_suggestion(suggestion)
            else:
                await session.send()
        return render_page(request, session.state)

    return app


app = create_app()


__all__ = ["app", "create_app"]
