import os
import sys
from datetime import datetime, timezone

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Settings are read at import time
os.environ["CARD_STORE_BACKEND"] = "database"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("REVIEW_INTERVAL_MINUTES", "90")

from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from app import models  # noqa: F401
from app.core.exceptions import PersistError, SnapshotUnavailableError
from app.schemas.vocab_card import VocabCard
from app.services.card_repository import CardRepository, SqlCardRepository


T = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_card(card_id, next_review_time, proficiency_level=3, english=None):
    return VocabCard(
        id=card_id,
        english=english or f"word {card_id}",
        cantonese=f"字{card_id}",
        jyutping=f"zi6 {card_id}",
        proficiency_level=proficiency_level,
        next_review_time=next_review_time,
    )


class InMemoryCardRepository(CardRepository):
    """Card repository keeping cards in a dict, with switchable failures."""

    def __init__(self, cards=()):
        self.cards = {card.id: card for card in cards}
        self.fetch_error = None
        self.persist_error = None
        self.fetch_count = 0
        self.persisted = []

    def fetch_all(self):
        self.fetch_count += 1
        if self.fetch_error:
            raise SnapshotUnavailableError(self.fetch_error)
        return list(self.cards.values())

    def persist(self, card_id, proficiency_level, next_review_time):
        if self.persist_error:
            raise PersistError(self.persist_error, card_id=card_id)
        if card_id not in self.cards:
            raise PersistError(f"Card with id {card_id} not found", card_id=card_id)
        self.cards[card_id] = self.cards[card_id].model_copy(
            update={"proficiency_level": proficiency_level, "next_review_time": next_review_time}
        )
        self.persisted.append((card_id, proficiency_level, next_review_time))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def db_session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def sql_repository(db_session):
    return SqlCardRepository(db_session)
