"""
Tests for the review session state machine.

Tests cover:
- Pure transitions (Loading, Ready, Empty, Error)
- Refresh after every saved review
- Fetch failures reported as errors, never as "nothing due"
- Persist failures keeping the computed result for retry
"""

from datetime import timedelta

import pytest

from app.core.exceptions import InvalidSessionStateError
from app.models.vocab_card import VocabCardRecord
from app.services.review_session import (
    Empty,
    Error,
    Loading,
    Ready,
    ReviewSession,
    review_not_saved,
    snapshot_failed,
    snapshot_loaded,
    start_loading,
)
from app.services.srs_service import ReviewAction
from conftest import T, InMemoryCardRepository, make_card


class TestTransitions:

    def test_start_loading(self):
        assert start_loading() == Loading()

    def test_snapshot_with_due_cards_is_ready_at_first_card(self):
        cards = [make_card("B", T - timedelta(minutes=1)), make_card("A", T - timedelta(hours=1))]

        state = snapshot_loaded(cards, now=T)

        assert isinstance(state, Ready)
        assert state.index == 0
        assert [card.id for card in state.queue] == ["A", "B"]
        assert state.current_card.id == "A"

    def test_snapshot_without_due_cards_is_empty(self):
        assert snapshot_loaded([make_card("A", T + timedelta(hours=1))], now=T) == Empty()
        assert snapshot_loaded([], now=T) == Empty()

    def test_failures_are_errors(self):
        assert snapshot_failed("boom") == Error(reason="boom")
        assert review_not_saved("boom") == Error(reason="Failed to update card: boom")


class TestReviewSession:

    def test_new_session_is_loading(self):
        session = ReviewSession(InMemoryCardRepository())

        assert session.state == Loading()
        assert session.current_card is None
        assert session.due_count == 0

    def test_refresh_selects_due_queue(self):
        repository = InMemoryCardRepository([
            make_card("A", T - timedelta(hours=1)),
            make_card("B", T + timedelta(hours=1)),
        ])
        session = ReviewSession(repository)

        state = session.refresh(now=T)

        assert isinstance(state, Ready)
        assert session.current_card.id == "A"
        assert session.due_count == 1

    def test_fetch_failure_is_error_not_empty(self):
        repository = InMemoryCardRepository([make_card("A", T - timedelta(hours=1))])
        repository.fetch_error = "Failed to fetch vocabulary: HTTP error! status: 500"
        session = ReviewSession(repository)

        state = session.refresh(now=T)

        assert state == Error(reason="Failed to fetch vocabulary: HTTP error! status: 500")
        assert session.current_card is None

    def test_submit_persists_and_refetches(self):
        repository = InMemoryCardRepository([
            make_card("A", T - timedelta(hours=2), proficiency_level=2),
            make_card("B", T - timedelta(hours=1)),
        ])
        session = ReviewSession(repository)
        session.refresh(now=T)
        fetches_before = repository.fetch_count

        outcome = session.submit(ReviewAction.EASY, now=T)

        assert outcome.saved
        assert outcome.detail is None
        assert outcome.result.card_id == "A"
        assert outcome.result.proficiency_level == 3
        assert repository.persisted == [("A", 3, T + timedelta(minutes=90))]
        assert repository.fetch_count == fetches_before + 1
        # A moved 90 minutes ahead, so B is next
        assert session.current_card.id == "B"
        assert outcome.state is session.state

    def test_reviewing_every_card_ends_empty(self):
        repository = InMemoryCardRepository([
            make_card("A", T - timedelta(hours=2)),
            make_card("B", T - timedelta(hours=1)),
        ])
        session = ReviewSession(repository)
        session.refresh(now=T)

        session.submit(ReviewAction.SAME, now=T)
        outcome = session.submit(ReviewAction.DIFFICULT, now=T)

        assert outcome.state == Empty()
        assert session.current_card is None

    def test_submit_uses_session_interval(self):
        repository = InMemoryCardRepository([make_card("A", T)])
        session = ReviewSession(repository, interval=timedelta(minutes=5))
        session.refresh(now=T)

        outcome = session.submit(0, now=T)

        assert outcome.result.next_review_time == T + timedelta(minutes=5)

    def test_persist_failure_keeps_result_for_retry(self):
        repository = InMemoryCardRepository([make_card("A", T - timedelta(hours=1), proficiency_level=4)])
        session = ReviewSession(repository)
        session.refresh(now=T)
        repository.persist_error = "HTTP error! status: 500"

        outcome = session.submit(ReviewAction.EASY, now=T)

        assert not outcome.saved
        assert outcome.detail == "HTTP error! status: 500"
        assert outcome.result.proficiency_level == 5
        assert outcome.result.next_review_time == T + timedelta(minutes=90)
        assert session.state == Error(reason="Failed to update card: HTTP error! status: 500")
        assert repository.persisted == []

        repository.persist_error = None
        retried = session.retry(outcome.result, now=T + timedelta(minutes=1))

        assert retried.saved
        assert retried.result == outcome.result
        assert repository.persisted == [("A", 5, T + timedelta(minutes=90))]
        assert retried.state == Empty()

    def test_card_deleted_before_save_is_not_saved(self, sql_repository, db_session):
        sql_repository.upsert_cards([make_card("A", T - timedelta(hours=1), proficiency_level=4)])
        session = ReviewSession(sql_repository)
        session.refresh(now=T)
        db_session.delete(db_session.get(VocabCardRecord, "A"))
        db_session.commit()

        outcome = session.submit(ReviewAction.EASY, now=T)

        assert not outcome.saved
        assert outcome.detail == "Card with id A not found"
        assert outcome.result.card_id == "A"
        assert outcome.result.proficiency_level == 5
        assert session.state == Error(reason="Failed to update card: Card with id A not found")
        assert session.current_card is None

    def test_submit_without_current_card_raises(self):
        session = ReviewSession(InMemoryCardRepository())
        session.refresh(now=T)

        assert session.state == Empty()
        with pytest.raises(InvalidSessionStateError):
            session.submit(ReviewAction.EASY, now=T)

    def test_submit_while_loading_raises(self):
        session = ReviewSession(InMemoryCardRepository([make_card("A", T)]))

        with pytest.raises(InvalidSessionStateError):
            session.submit(ReviewAction.EASY, now=T)
