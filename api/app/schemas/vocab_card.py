"""
Vocabulary card schemas.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List
from datetime import datetime

from app.schemas.utils import clamp_proficiency, ensure_utc


class VocabCard(BaseModel):
    """A vocabulary flashcard as read from the card store."""
    id: str = Field(..., description="Stable card identifier, unique across the store")
    english: str = Field("", description="English prompt (front side)")
    cantonese: str = Field("", description="Cantonese characters (back side)")
    jyutping: str = Field("", description="Jyutping romanization (back side)")
    proficiency_level: int = Field(..., description="Self-reported recall strength, 1 (hardest) to 5 (easiest)")
    next_review_time: datetime = Field(..., description="Instant at which the card becomes due again (UTC)")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "id": "42",
                "english": "thank you",
                "cantonese": "唔該",
                "jyutping": "m4 goi1",
                "proficiency_level": 3,
                "next_review_time": "2024-01-01T10:00:00Z"
            }
        }

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        # Sheet rows may carry numeric IDs
        return str(v)

    @field_validator("english", "cantonese", "jyutping", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return "" if v is None else str(v)

    @field_validator("proficiency_level")
    @classmethod
    def clamp_level(cls, v: int) -> int:
        return clamp_proficiency(v)

    @field_validator("next_review_time")
    @classmethod
    def normalize_next_review_time(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class DueCardsResponse(BaseModel):
    """Response for the due-queue endpoint."""
    count: int
    cards: List[VocabCard]
