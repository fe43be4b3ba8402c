"""
Helper functions for review endpoints.
"""
from fastapi import Depends
from sqlmodel import Session
from typing import Optional

from app.core.database import get_session
from app.schemas.review import ReviewResponse
from app.services.card_repository import CardRepository, build_card_repository
from app.services.review_session import Empty, Error, Ready, ReviewOutcome


def get_card_repository(session: Session = Depends(get_session)) -> CardRepository:
    """Dependency for getting the configured card repository."""
    return build_card_repository(session)


def build_review_response(outcome: ReviewOutcome) -> ReviewResponse:
    """
    Convert a review outcome into the API response.

    The refreshed due queue is only included when the review was saved and the
    follow-up fetch succeeded.
    """
    state = outcome.state
    detail: Optional[str] = outcome.detail
    due_cards = None

    if outcome.saved:
        if isinstance(state, Ready):
            due_cards = list(state.queue)
        elif isinstance(state, Empty):
            due_cards = []
        elif isinstance(state, Error):
            detail = state.reason

    return ReviewResponse(
        result=outcome.result,
        saved=outcome.saved,
        detail=detail,
        due_count=len(due_cards) if due_cards is not None else None,
        due_cards=due_cards,
    )
