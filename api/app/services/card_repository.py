"""
Card repository backends.

A card repository supplies the full card snapshot and saves a single card's new
review state. Two backends are available:
- SheetCardRepository: the remote sheet web app (Google Apps Script) over HTTP
- SqlCardRepository: the vocab_card table through a SQLModel session
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional
import logging

import requests
from sqlmodel import Session, select
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.exceptions import PersistError, SnapshotUnavailableError
from app.models.vocab_card import VocabCardRecord
from app.schemas.review import ReviewResult
from app.schemas.utils import clamp_proficiency, ensure_utc, format_iso_utc
from app.schemas.vocab_card import VocabCard

logger = logging.getLogger(__name__)


class CardRepository(ABC):
    """Source of card snapshots and sink for review results."""

    @abstractmethod
    def fetch_all(self) -> List[VocabCard]:
        """
        Fetch every card in the store.

        Raises:
            SnapshotUnavailableError: If the store cannot be read
        """

    @abstractmethod
    def persist(self, card_id: str, proficiency_level: int, next_review_time: datetime) -> None:
        """
        Save a card's new proficiency level and next review time.

        Raises:
            PersistError: If the new state could not be saved
        """

    def persist_result(self, result: ReviewResult) -> None:
        """Save a computed review result."""
        self.persist(result.card_id, result.proficiency_level, result.next_review_time)


class SheetCardRepository(CardRepository):
    """Card store backed by the sheet web app."""

    # Column names used by the sheet
    FIELD_MAPPING = {
        'ID': 'id',
        'English': 'english',
        'Cantonese': 'cantonese',
        'Jyutping': 'jyutping',
        'ProficiencyLevel': 'proficiency_level',
        'NextReviewTime': 'next_review_time',
    }

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = base_url or settings.sheet_web_app_url
        self.timeout = timeout if timeout is not None else settings.sheet_request_timeout
        if not self.base_url:
            raise ValueError("Sheet web app URL not configured")

    def _parse_row(self, row: dict) -> VocabCard:
        values = {field: row[column] for column, field in self.FIELD_MAPPING.items()}
        return VocabCard(**values)

    def fetch_all(self) -> List[VocabCard]:
        try:
            response = requests.get(
                self.base_url,
                params={'action': 'getVocabs'},
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to fetch vocabulary from sheet: {str(e)}")
            raise SnapshotUnavailableError(f"Failed to fetch vocabulary: {str(e)}") from e
        except ValueError as e:
            logger.error(f"Sheet returned invalid JSON: {str(e)}")
            raise SnapshotUnavailableError("Failed to fetch vocabulary: invalid JSON response") from e

        if not isinstance(data, list):
            raise SnapshotUnavailableError(f"Failed to fetch vocabulary: unexpected response format: {data}")

        cards = []
        for index, row in enumerate(data):
            try:
                cards.append(self._parse_row(row))
            except (KeyError, TypeError, ValueError) as e:
                # Rows without a parseable review time can never become due
                logger.warning(f"Skipping sheet row {index}: {str(e)}")

        logger.info(f"Fetched {len(cards)} card(s) from sheet")
        return cards

    def persist(self, card_id: str, proficiency_level: int, next_review_time: datetime) -> None:
        params = {
            'action': 'updateVocab',
            'id': card_id,
            'proficiencyLevel': clamp_proficiency(proficiency_level),
            'nextReviewTime': format_iso_utc(next_review_time),
        }

        try:
            response = requests.get(self.base_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to update card {card_id}: {str(e)}")
            raise PersistError(str(e), card_id=card_id) from e
        except ValueError as e:
            logger.error(f"Sheet returned invalid JSON for card {card_id}: {str(e)}")
            raise PersistError("Invalid JSON response", card_id=card_id) from e

        if not isinstance(result, dict) or not result.get('success'):
            message = result.get('message') if isinstance(result, dict) else None
            logger.warning(f"Sheet rejected update for card {card_id}: {message}")
            raise PersistError(message or 'Failed to update card.', card_id=card_id)

        logger.info(f"Card {card_id} updated successfully.")


class SqlCardRepository(CardRepository):
    """Card store backed by the vocab_card table."""

    def __init__(self, session: Session):
        self.session = session

    def fetch_all(self) -> List[VocabCard]:
        try:
            records = self.session.exec(select(VocabCardRecord)).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch vocabulary from database: {str(e)}")
            raise SnapshotUnavailableError(f"Failed to fetch vocabulary: {str(e)}") from e
        return [record.to_card() for record in records]

    def persist(self, card_id: str, proficiency_level: int, next_review_time: datetime) -> None:
        try:
            record = self.session.get(VocabCardRecord, card_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load card {card_id}: {str(e)}")
            raise PersistError(str(e), card_id=card_id) from e

        if not record:
            logger.error(f"Failed to update card {card_id}: card not found")
            raise PersistError(f"Card with id {card_id} not found", card_id=card_id)

        record.proficiency_level = clamp_proficiency(proficiency_level)
        record.next_review_time = ensure_utc(next_review_time)

        try:
            self.session.add(record)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to update card {card_id}: {str(e)}")
            raise PersistError(str(e), card_id=card_id) from e

        logger.info(f"Card {card_id} updated successfully.")

    def upsert_cards(self, cards: Iterable[VocabCard]) -> int:
        """
        Insert new cards and overwrite existing ones with the same ID.

        Args:
            cards: Cards to write

        Returns:
            Number of cards written
        """
        count = 0
        try:
            for card in cards:
                record = self.session.get(VocabCardRecord, card.id)
                if record is None:
                    record = VocabCardRecord(id=card.id, next_review_time=card.next_review_time)
                record.english = card.english
                record.cantonese = card.cantonese
                record.jyutping = card.jyutping
                record.proficiency_level = card.proficiency_level
                record.next_review_time = card.next_review_time
                self.session.add(record)
                count += 1
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to write cards: {str(e)}")
            raise
        return count


def build_card_repository(session: Optional[Session] = None) -> CardRepository:
    """
    Build the card repository selected by CARD_STORE_BACKEND.

    Args:
        session: Database session, required for the database backend

    Returns:
        CardRepository instance
    """
    backend = settings.card_store_backend.lower()
    if backend == 'sheet':
        return SheetCardRepository()
    if session is None:
        raise ValueError("A database session is required for the database backend")
    return SqlCardRepository(session)
