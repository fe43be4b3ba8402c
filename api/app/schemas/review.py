"""
Review schemas.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from app.schemas.utils import clamp_proficiency, ensure_utc
from app.schemas.vocab_card import VocabCard


class ReviewResult(BaseModel):
    """New review state computed for a card; persisted by the caller."""
    card_id: str = Field(..., description="Reviewed card ID")
    proficiency_level: int = Field(..., description="Proficiency level after the review (1-5)")
    next_review_time: datetime = Field(..., description="Next instant the card becomes due (UTC)")
    reviewed_at: datetime = Field(..., description="Instant the review was submitted (UTC)")

    class Config:
        frozen = True

    @field_validator("proficiency_level")
    @classmethod
    def clamp_level(cls, v: int) -> int:
        return clamp_proficiency(v)

    @field_validator("next_review_time", "reviewed_at")
    @classmethod
    def normalize_instant(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class ReviewRequest(BaseModel):
    """Request to review a single card."""
    delta: int = Field(..., description="Proficiency change: -1 difficult, 0 same, +1 easy (any integer accepted)")
    now: Optional[datetime] = Field(None, description="Review instant; defaults to the server's current time")

    class Config:
        json_schema_extra = {
            "example": {
                "delta": 1
            }
        }


class ReviewResponse(BaseModel):
    """Response for a review submission."""
    result: ReviewResult
    saved: bool = Field(..., description="Whether the new state was persisted")
    detail: Optional[str] = Field(None, description="Reason the review was not saved, if any")
    due_count: Optional[int] = Field(None, description="Number of cards due after the refresh")
    due_cards: Optional[List[VocabCard]] = Field(None, description="Refreshed due queue, omitted when not saved")
