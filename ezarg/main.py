"""FastAPI backend for Ezarg."""

from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Dict, Any, Literal, Optional
import json
import logging

from .config import (
    LOG_LEVEL, credentials_from_env, load_provider_config, parse_providers,
    save_provider_config,
)
from .content import plain_text
from .dispatcher import FanOutDispatcher
from .models import Failure, ProviderId, ProviderOutcome, QueryRequest, Success
from .providers import ProviderAdapter, build_adapters, parse_provider_id, query_provider
from .credentials import supplied_credential
from .render import render_outcome, segments_as_dicts

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Ezarg API")

# Enable CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:5174", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_adapters = build_adapters()


def get_adapters() -> Dict[ProviderId, ProviderAdapter]:
    """Adapter per provider, shared across requests."""
    return _adapters


class ChatTurnModel(BaseModel):
    """One prior turn of the conversation."""
    role: Literal["user", "assistant"]
    content: str


class QueryBody(BaseModel):
    """Request to fan a query out to the configured providers."""
    text: str
    history: Optional[List[ChatTurnModel]] = None
    api_keys: Dict[str, str] = Field(default_factory=dict)
    providers: Optional[List[str]] = None


class ProviderQueryBody(BaseModel):
    """Request to query a single provider."""
    model_config = ConfigDict(populate_by_name=True)

    text: str
    history: Optional[List[ChatTurnModel]] = None
    api_key: Optional[str] = Field(default=None, alias="apiKey")


class UpdateConfigRequest(BaseModel):
    """Request to update the configured providers."""
    providers: List[str]


def _build_request(text: str, history: Optional[List[ChatTurnModel]]) -> QueryRequest:
    try:
        return QueryRequest.build(
            text, [turn.model_dump() for turn in history] if history else None
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _parse_providers(values: List[str]) -> List[ProviderId]:
    try:
        return parse_providers(values)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def serialize_outcome(outcome: ProviderOutcome) -> Dict[str, Any]:
    """JSON form of one provider's slot: status plus rendered segments."""
    data = {
        "status": outcome.status,
        "segments": segments_as_dicts(render_outcome(outcome)),
    }
    if isinstance(outcome, Success):
        # Unformatted answer, for conversation history
        data["text"] = plain_text(outcome.content)
    elif isinstance(outcome, Failure):
        data["error"] = {"kind": outcome.kind, "message": outcome.message, "display": outcome.display}
    return data


def _start_session(body: QueryBody, adapters: Dict[ProviderId, ProviderAdapter]):
    request = _build_request(body.text, body.history)
    providers = _parse_providers(body.providers) if body.providers else load_provider_config()
    try:
        credentials = {parse_provider_id(name): key for name, key in body.api_keys.items()}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    dispatcher = FanOutDispatcher(adapters, providers)
    return dispatcher.dispatch(request, credentials)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Ezarg API"}


@app.get("/api/health")
async def health_check():
    """
    Doctor endpoint - reports which providers have a default API key.
    """
    api_keys = {
        provider.value: {
            "configured": bool(key),
            "key_preview": f"{key[:8]}..." if key else None
        }
        for provider, key in credentials_from_env().items()
    }
    providers = load_provider_config()
    all_ready = all(api_keys[p.value]["configured"] for p in providers)

    return {
        "status": "healthy" if all_ready else "degraded",
        "api_keys": api_keys,
        "providers": [p.value for p in providers],
        "all_ready": all_ready
    }


@app.get("/api/config")
async def get_config():
    """Get the configured providers."""
    return {"providers": [p.value for p in load_provider_config()]}


@app.post("/api/config")
async def update_config(request: UpdateConfigRequest):
    """Update the configured providers."""
    try:
        providers = save_provider_config(request.providers)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "ok", "providers": [p.value for p in providers]}


@app.post("/api/query")
async def query(body: QueryBody, adapters: Dict[ProviderId, ProviderAdapter] = Depends(get_adapters)):
    """
    Send a query to every configured provider.
    Returns once every provider has answered or failed.
    """
    session = _start_session(body, adapters)
    outcomes = await session.wait()
    return {
        "session_id": session.session_id,
        "outcomes": {provider.value: serialize_outcome(outcome) for provider, outcome in outcomes.items()}
    }


@app.post("/api/query/stream")
async def query_stream(body: QueryBody, adapters: Dict[ProviderId, ProviderAdapter] = Depends(get_adapters)):
    """
    Send a query to every configured provider and stream each answer.
    Returns Server-Sent Events as each provider settles.
    """
    session = _start_session(body, adapters)

    async def event_generator():
        start = {
            'type': 'session_start',
            'session_id': session.session_id,
            'providers': [p.value for p in session.providers]
        }
        yield f"data: {json.dumps(start)}\n\n"

        async for update in session.updates():
            event = {
                'type': 'provider_update',
                'session_id': update.session_id,
                'provider': update.provider.value,
                'data': serialize_outcome(update.outcome)
            }
            yield f"data: {json.dumps(event)}\n\n"

        yield f"data: {json.dumps({'type': 'complete', 'session_id': session.session_id})}\n\n"

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        }
    )


@app.post("/api/providers/{provider_id}/query")
async def query_single_provider(
    provider_id: str,
    body: ProviderQueryBody,
    authorization: Optional[str] = Header(default=None),
    adapters: Dict[ProviderId, ProviderAdapter] = Depends(get_adapters)
):
    """
    Query one provider.
    The key comes from the Authorization header, else the body's apiKey,
    else the server default.
    """
    try:
        provider = parse_provider_id(provider_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    request = _build_request(body.text, body.history)
    outcome = await query_provider(
        provider,
        request,
        supplied_credential(authorization, body.api_key),
        adapter=adapters[provider]
    )
    return {"provider": provider.value, **serialize_outcome(outcome)}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
