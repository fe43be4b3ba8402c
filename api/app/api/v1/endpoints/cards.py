"""
Card read endpoints.
"""
from fastapi import APIRouter, Depends
from typing import List
import logging

from app.core.exceptions import NotFoundError
from app.schemas.vocab_card import VocabCard
from app.services.card_repository import CardRepository
from app.api.v1.endpoints.review_helpers import get_card_repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cards", tags=["cards"])


@router.get("", response_model=List[VocabCard])
async def get_cards(repository: CardRepository = Depends(get_card_repository)):
    """
    Get the full card snapshot, in store order.
    """
    return repository.fetch_all()


@router.get("/{card_id}", response_model=VocabCard)
async def get_card(
    card_id: str,
    repository: CardRepository = Depends(get_card_repository)
):
    """
    Get a single card by ID.
    """
    for card in repository.fetch_all():
        if card.id == card_id:
            return card
    raise NotFoundError(f"Card with id {card_id} not found")
