from __future__ import annotations

from pydantic import BaseModel, Field


class RecommendationQuery(BaseModel):
    # Optional at the schema level: missing fields are reported as a 400
    # InvalidQuery by the pipeline, not as a 422.
    query: str | None = Field(default=None, description="Natural-language request, e.g. 'I want food'")
    lat: float | None = None
    lng: float | None = None


class Recommendation(BaseModel):
    id: str | None = None
    name: str = Field(..., min_length=1)
    category: str = "General"
    reason: str = ""


class RecommendationResponse(BaseModel):
    recommendations: list[Recommendation]
