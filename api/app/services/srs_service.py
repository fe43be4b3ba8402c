"""
SRS (Spaced Repetition System) service implementing fixed-interval review scheduling.

This service selects the cards that are due for review and computes a card's
new proficiency level and next review time after a review. It performs no I/O:
callers pass in an already-fetched snapshot and persist the returned values.
"""
import logging
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import Iterable, List, Optional

from app.core.config import settings
from app.schemas.review import ReviewResult
from app.schemas.utils import (
    MIN_PROFICIENCY_LEVEL,
    MAX_PROFICIENCY_LEVEL,
    clamp_proficiency,
    ensure_utc,
)
from app.schemas.vocab_card import VocabCard

logger = logging.getLogger(__name__)


# Cards come back for review this long after they were reviewed,
# whatever their resulting proficiency level
DEFAULT_REVIEW_INTERVAL = timedelta(minutes=90)


class ReviewAction(IntEnum):
    """Proficiency deltas offered by the review buttons."""
    DIFFICULT = -1
    SAME = 0
    EASY = 1


def utc_now() -> datetime:
    """Current instant as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def get_review_interval() -> timedelta:
    """Review interval from settings (REVIEW_INTERVAL_MINUTES)."""
    return timedelta(minutes=settings.review_interval_minutes)


def is_due(card: VocabCard, now: Optional[datetime] = None) -> bool:
    """
    Check whether a card is due for review.

    A card due at exactly `now` counts as due.

    Args:
        card: Card to check
        now: Reference instant (defaults to now)

    Returns:
        True if card.next_review_time <= now
    """
    now = utc_now() if now is None else ensure_utc(now)
    return card.next_review_time <= now


def select_due_cards(cards: Iterable[VocabCard], now: Optional[datetime] = None) -> List[VocabCard]:
    """
    Select the cards due for review, earliest-due first.

    Args:
        cards: Snapshot of all cards (any iterable, may be empty)
        now: Reference instant (defaults to now)

    Returns:
        Due cards sorted ascending by next_review_time. Cards with equal
        next_review_time keep their snapshot order. Empty list when nothing is due.
    """
    now = utc_now() if now is None else ensure_utc(now)
    due = [card for card in cards if is_due(card, now)]
    # list.sort is stable, so ties keep snapshot order
    due.sort(key=lambda card: card.next_review_time)
    return due


def calculate_next_review_time(
    base_time: Optional[datetime] = None,
    interval: Optional[timedelta] = None
) -> datetime:
    """
    Calculate the next review time.

    Args:
        base_time: Instant the review was submitted (defaults to now)
        interval: Review interval (defaults to the configured review interval)

    Returns:
        base_time + interval, in UTC
    """
    base_time = utc_now() if base_time is None else ensure_utc(base_time)
    if interval is None:
        interval = get_review_interval()
    return base_time + interval


def apply_review(
    card: VocabCard,
    delta: int,
    now: Optional[datetime] = None,
    interval: Optional[timedelta] = None
) -> ReviewResult:
    """
    Compute a card's new state after a review.

    The proficiency level moves by `delta` and saturates at 1 and 5. The next
    review time is `now + interval` regardless of the resulting level. The card
    itself is left untouched.

    Args:
        card: Reviewed card
        delta: Proficiency change (ReviewAction value or any integer)
        now: Instant the review was submitted (defaults to now)
        interval: Review interval (defaults to the configured review interval)

    Returns:
        ReviewResult with the new proficiency level and next review time
    """
    now = utc_now() if now is None else ensure_utc(now)
    new_level = clamp_proficiency(card.proficiency_level + int(delta))
    next_review_time = calculate_next_review_time(now, interval)

    logger.debug(
        f"Review card {card.id}: level {card.proficiency_level} -> {new_level} "
        f"(delta={int(delta):+d}), next review at {next_review_time.isoformat()}"
    )

    return ReviewResult(
        card_id=card.id,
        proficiency_level=new_level,
        next_review_time=next_review_time,
        reviewed_at=now,
    )
