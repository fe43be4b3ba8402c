"""
Review session state machine.

The presentation loop moves through four states:
- Loading: a snapshot is being fetched
- Ready(queue, index): the due queue is shown, queue[index] is the current card
- Empty: nothing is due for review
- Error(reason): the snapshot could not be fetched or a review was not saved

Transitions are plain functions returning a new state. ReviewSession wires them
to a card repository: every review is persisted and then followed by a fresh
fetch, so the queue always reflects the latest stored state.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional, Tuple, Union
import logging

from app.core.exceptions import InvalidSessionStateError, PersistError, SnapshotUnavailableError
from app.schemas.review import ReviewResult
from app.schemas.vocab_card import VocabCard
from app.services.card_repository import CardRepository
from app.services.srs_service import apply_review, select_due_cards

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Ready:
    queue: Tuple[VocabCard, ...]
    index: int = 0

    @property
    def current_card(self) -> VocabCard:
        return self.queue[self.index]


@dataclass(frozen=True)
class Empty:
    pass


@dataclass(frozen=True)
class Error:
    reason: str


ReviewState = Union[Loading, Ready, Empty, Error]


def start_loading() -> ReviewState:
    return Loading()


def snapshot_loaded(cards: Iterable[VocabCard], now: Optional[datetime] = None) -> ReviewState:
    """Derive the next state from a freshly fetched snapshot."""
    queue = tuple(select_due_cards(cards, now))
    if not queue:
        return Empty()
    return Ready(queue=queue, index=0)


def snapshot_failed(reason: str) -> ReviewState:
    return Error(reason=reason)


def review_not_saved(reason: str) -> ReviewState:
    return Error(reason=f"Failed to update card: {reason}")


@dataclass(frozen=True)
class ReviewOutcome:
    """Result of a review submission."""
    result: ReviewResult
    saved: bool
    state: ReviewState
    detail: Optional[str] = None


class ReviewSession:
    """Drives one user's review loop against a card repository."""

    def __init__(self, repository: CardRepository, interval: Optional[timedelta] = None):
        self.repository = repository
        self.interval = interval
        self.state: ReviewState = start_loading()

    @property
    def current_card(self) -> Optional[VocabCard]:
        if isinstance(self.state, Ready):
            return self.state.current_card
        return None

    @property
    def due_count(self) -> int:
        if isinstance(self.state, Ready):
            return len(self.state.queue)
        return 0

    def refresh(self, now: Optional[datetime] = None) -> ReviewState:
        """Fetch a fresh snapshot and re-derive the due queue."""
        self.state = start_loading()
        try:
            cards = self.repository.fetch_all()
        except SnapshotUnavailableError as e:
            logger.error(f"Fetch error: {str(e)}")
            self.state = snapshot_failed(str(e))
            return self.state

        self.state = snapshot_loaded(cards, now)
        return self.state

    def submit(self, delta: int, now: Optional[datetime] = None) -> ReviewOutcome:
        """
        Review the current card and refresh the queue.

        Args:
            delta: Proficiency change for the current card
            now: Review instant (defaults to now)

        Returns:
            ReviewOutcome; when saving failed, the computed result is still
            returned so it can be passed to retry()

        Raises:
            InvalidSessionStateError: If no card is currently shown
        """
        card = self.current_card
        if card is None:
            raise InvalidSessionStateError(
                f"No card to review in state {type(self.state).__name__}"
            )

        result = apply_review(card, delta, now=now, interval=self.interval)
        return self.save_result(result, now)

    def retry(self, result: ReviewResult, now: Optional[datetime] = None) -> ReviewOutcome:
        """Persist a previously computed result again, without recomputing it."""
        return self.save_result(result, now)

    def save_result(self, result: ReviewResult, now: Optional[datetime] = None) -> ReviewOutcome:
        """Persist a computed result, then refresh the queue from a fresh snapshot."""
        try:
            self.repository.persist_result(result)
        except PersistError as e:
            logger.error(f"Update error for card {result.card_id}: {e.reason}")
            self.state = review_not_saved(e.reason)
            return ReviewOutcome(result=result, saved=False, state=self.state, detail=e.reason)

        self.refresh(now)
        return ReviewOutcome(result=result, saved=True, state=self.state)
