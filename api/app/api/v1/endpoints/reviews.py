"""
Review endpoints: due queue and review submission.
"""
from fastapi import APIRouter, Depends, status
from datetime import datetime
from typing import Optional
import logging

from app.core.exceptions import NotFoundError, ValidationError
from app.schemas.review import ReviewRequest, ReviewResponse, ReviewResult
from app.schemas.vocab_card import DueCardsResponse
from app.services.card_repository import CardRepository
from app.services.review_session import ReviewSession
from app.services.srs_service import apply_review, get_review_interval, select_due_cards
from app.api.v1.endpoints.review_helpers import build_review_response, get_card_repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.get("/due", response_model=DueCardsResponse)
async def get_due_cards(
    now: Optional[datetime] = None,
    repository: CardRepository = Depends(get_card_repository)
):
    """
    Get the cards due for review, earliest-due first.

    Args:
        now: Optional reference instant (defaults to the server's current time)

    Returns:
        Due cards and their count. An empty list means nothing is due.
    """
    cards = repository.fetch_all()
    due_cards = select_due_cards(cards, now)
    return DueCardsResponse(count=len(due_cards), cards=due_cards)


@router.post("/{card_id}", response_model=ReviewResponse, status_code=status.HTTP_200_OK)
async def review_card(
    card_id: str,
    request: ReviewRequest,
    repository: CardRepository = Depends(get_card_repository)
):
    """
    Review a card and reschedule it.

    This endpoint:
    - Reads a fresh snapshot and finds the card
    - Computes the new proficiency level and next review time
    - Saves the new state
    - Re-reads the snapshot and returns the refreshed due queue

    When saving fails the computed result is returned with saved=false so the
    client can resubmit it to /reviews/{card_id}/persist.
    """
    cards = repository.fetch_all()
    card = next((c for c in cards if c.id == card_id), None)
    if card is None:
        raise NotFoundError(f"Card with id {card_id} not found")

    result = apply_review(card, request.delta, now=request.now, interval=get_review_interval())
    logger.info(
        f"Reviewed card {card_id}: level {card.proficiency_level} -> {result.proficiency_level}, "
        f"next review at {result.next_review_time.isoformat()}"
    )

    session = ReviewSession(repository)
    outcome = session.save_result(result, now=request.now)
    return build_review_response(outcome)


@router.post("/{card_id}/persist", response_model=ReviewResponse, status_code=status.HTTP_200_OK)
async def persist_review(
    card_id: str,
    result: ReviewResult,
    repository: CardRepository = Depends(get_card_repository)
):
    """
    Save a previously computed review result without recomputing it.
    """
    if result.card_id != card_id:
        raise ValidationError(
            f"Result is for card {result.card_id}, not {card_id}"
        )

    session = ReviewSession(repository)
    outcome = session.retry(result)
    return build_review_response(outcome)
