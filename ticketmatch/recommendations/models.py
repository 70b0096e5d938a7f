from __future__ import annotations

from pydantic import BaseModel, Field

from ..catalog.models import RecommendationScore, TicketPackage, UserPreferences


class QueryRecommendationRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=1000, description="Free-text ticket request")
    limit: int = Field(default=5, ge=1, le=50)


class PreferenceRecommendationRequest(BaseModel):
    preferences: UserPreferences
    limit: int = Field(default=5, ge=1, le=50)


class RecommendationResponse(BaseModel):
    recommendations: list[RecommendationScore]
    strategy: str


class KeywordSearchResponse(BaseModel):
    packages: list[TicketPackage]
    total: int


class EngineStatus(BaseModel):
    index_active: bool
    index_type: str
    catalog_size: int
    dimension: int
    last_strategy: str | None = None
    fallback_encodings: int = 0
