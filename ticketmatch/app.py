from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Query, Request
from starlette.middleware.sessions import SessionMiddleware

from .chat.assistant import Assistant
from .chat.models import ChatRequest, ChatResponse, ConversationState
from .recommendations.engine import RankingEngine
from .recommendations.keyword_search import search_by_keywords
from .recommendations.models import (
    EngineStatus,
    KeywordSearchResponse,
    PreferenceRecommendationRequest,
    QueryRecommendationRequest,
    RecommendationResponse,
)
from .recommendations.service import build_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Catalog vectors are built once here; the index finishes in the background
    engine = build_engine()
    app.state.engine = engine
    app.state.assistant = Assistant(engine)
    logger.info("Ranking engine ready: %s", engine.status().model_dump())
    yield


app = FastAPI(title="Ticket Package Recommendation API", version="1.0.0", lifespan=lifespan)
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "ticketmatch-secret-change-in-production"),
)


def get_engine(request: Request) -> RankingEngine:
    return request.app.state.engine


def get_assistant(request: Request) -> Assistant:
    return request.app.state.assistant


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/status", response_model=EngineStatus)
def status(engine: RankingEngine = Depends(get_engine)) -> EngineStatus:
    return engine.status()


# ── Recommendation endpoints ─────────────────────────────────────────────


@app.post("/recommendations", response_model=RecommendationResponse)
def recommendations(
    body: QueryRecommendationRequest,
    engine: RankingEngine = Depends(get_engine),
) -> RecommendationResponse:
    ranked = engine.rank_query_detailed(body.query, body.limit)
    return RecommendationResponse(recommendations=ranked.recommendations, strategy=ranked.strategy)


@app.post("/recommendations/match", response_model=RecommendationResponse)
def match(
    body: PreferenceRecommendationRequest,
    engine: RankingEngine = Depends(get_engine),
) -> RecommendationResponse:
    ranked = engine.rank_preferences_detailed(body.preferences, body.limit)
    return RecommendationResponse(recommendations=ranked.recommendations, strategy=ranked.strategy)


@app.get("/search", response_model=KeywordSearchResponse)
def search(
    q: str = Query(..., min_length=1, max_length=200),
    engine: RankingEngine = Depends(get_engine),
) -> KeywordSearchResponse:
    packages = search_by_keywords(q, engine.vectors.packages)
    return KeywordSearchResponse(packages=packages, total=len(packages))


# ── Chat endpoint ────────────────────────────────────────────────────────


@app.post("/chat", response_model=ChatResponse)
def chat(
    body: ChatRequest,
    request: Request,
    assistant: Assistant = Depends(get_assistant),
) -> ChatResponse:
    # 1. Load conversation state from session
    try:
        raw_state = request.session.get("chat_state")
        state = ConversationState(**raw_state) if raw_state else ConversationState()
    except Exception:
        logger.warning("Discarding unreadable chat state from session", exc_info=True)
        state = ConversationState()

    # 2. Answer and accumulate preferences
    response, new_state = assistant.respond(body.message, state)

    # 3. Save updated conversation state
    request.session["chat_state"] = new_state.model_dump()
    return response
