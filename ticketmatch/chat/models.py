from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from ..catalog.models import RecommendationScore, TicketPackage, UserPreferences


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=1000)


class ChatResponseType(str, Enum):
    results = "results"
    popular = "popular"
    message = "message"


class ChatResponse(BaseModel):
    type: ChatResponseType
    message: str
    recommendations: list[RecommendationScore] = Field(default_factory=list)
    suggested_packages: list[TicketPackage] = Field(default_factory=list)
    preferences: UserPreferences = Field(default_factory=UserPreferences)


class ConversationTurn(BaseModel):
    role: str
    content: str


class ConversationState(BaseModel):
    turns: list[ConversationTurn] = Field(default_factory=list)
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    last_results_ids: list[str] = Field(default_factory=list)
