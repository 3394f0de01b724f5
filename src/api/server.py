"""FastAPI application for the dashboard front end.

Endpoints:
- GET  /health       Heartbeat
- POST /api/parse    Message -> payment intent object (or `{"error": ...}`)
- POST /api/agent    Message -> `{message, action}`
- POST /api/quote    Cross-chain deposit quote into the vault
- GET  /api/chains   Chains supported by the bridge router

Request validation (a required `message`) lives here, never in the translators.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.app import App
from src.bridge.lifi import BridgeError, QuoteRequest
from src.intent.schema import ParseError

logger = logging.getLogger(__name__)

SERVICE_NAME = "paypilot-backend"
MESSAGE_REQUIRED = "A message is required"
QUOTE_FAILED = "Failed to get cross-chain quote"


class MessageRequest(BaseModel):
    message: str | None = None


def get_app(request: Request) -> App:
    return request.app.state.paypilot


def _require_message(body: MessageRequest | None) -> str | None:
    if body is None or body.message is None or not body.message.strip():
        return None
    return body.message


def _message_required() -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": MESSAGE_REQUIRED})


router = APIRouter()


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "service": SERVICE_NAME}


@router.post("/api/parse")
def parse_message(body: MessageRequest | None = None, app: App = Depends(get_app)) -> JSONResponse:
    message = _require_message(body)
    if message is None:
        return _message_required()

    logger.info("parse request chars=%d", len(message))
    result = app.parser.parse(message)
    if isinstance(result, ParseError):
        logger.info("parse failed kind=%s", result.kind)
        return JSONResponse(content=result.as_payload())
    return JSONResponse(content=result)


@router.post("/api/agent")
def agent_message(body: MessageRequest | None = None, app: App = Depends(get_app)) -> JSONResponse:
    message = _require_message(body)
    if message is None:
        return _message_required()

    response = app.agent.converse(message)
    logger.info(
        "agent reply action=%s",
        response.action.type if response.action is not None else None,
    )
    return JSONResponse(content=response.as_payload())


@router.post("/api/quote")
def cross_chain_quote(body: QuoteRequest, app: App = Depends(get_app)) -> JSONResponse:
    try:
        quote = app.bridge.get_quote(body)
    except BridgeError as exc:
        logger.warning("quote failed reason=%s", exc)
        return JSONResponse(status_code=502, content={"error": QUOTE_FAILED})
    return JSONResponse(content=quote)


@router.get("/api/chains")
def supported_chains(app: App = Depends(get_app)) -> list[dict[str, Any]]:
    try:
        return app.bridge.list_chains()
    except BridgeError as exc:
        logger.warning("chains lookup failed reason=%s", exc)
        return []


def create_api(app: App) -> FastAPI:
    """Build the FastAPI application around an already-wired `App` container."""

    api = FastAPI(title="PayPilot API", version="1.0")
    api.state.paypilot = app
    api.add_middleware(
        CORSMiddleware,
        allow_origins=app.settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    api.include_router(router)
    return api
