from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

HOSPITALITY_LEVELS = ["Bronze", "Silver", "Gold", "Platinum"]


class TicketPackage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    price: float = Field(..., ge=0, allow_inf_nan=False)
    venue: str = ""
    date: str = Field(default="", description="Event date as YYYY-MM-DD")
    sport_type: str = ""
    seating_category: str = ""
    hospitality_type: str = ""
    hospitality_venue: str = ""
    hospitality_level: str = Field(default="", description="Bronze, Silver, Gold or Platinum")
    location: str = ""
    available_tickets: int = Field(default=0, ge=0)
    description: str = ""


class BudgetRange(BaseModel):
    min: float = Field(default=0.0, ge=0)
    max: float = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> "BudgetRange":
        if self.min > self.max:
            raise ValueError("budget min must not exceed budget max")
        return self


class UserPreferences(BaseModel):
    location: str | None = None
    sport: str | None = None
    hospitality_type: str | None = None
    date: str | None = Field(default=None, description="Preferred event date as YYYY-MM-DD")
    people_count: int | None = Field(default=None, ge=1)
    budget: BudgetRange | None = None

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


class RecommendationScore(BaseModel):
    package: TicketPackage
    score: int = Field(..., ge=0, le=100)
    reasons: list[str] = Field(default_factory=list)
