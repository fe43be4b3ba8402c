"""
Script to import vocabulary cards from a CSV export of the review sheet.

Expected columns: ID, English, Cantonese, Jyutping, ProficiencyLevel, NextReviewTime.
Rows are upserted into the vocab_card table by ID. Missing ProficiencyLevel
defaults to 1 and missing NextReviewTime defaults to now (immediately due).
"""
import csv
import sys
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List
from sqlmodel import Session
from app.core.database import engine, init_db
from app.schemas.vocab_card import VocabCard
from app.services.card_repository import SqlCardRepository

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def parse_card_row(row: dict, now: datetime) -> VocabCard:
    """
    Parse a CSV row into a VocabCard.

    Examples:
    - {"ID": "1", "English": "thank you", "Cantonese": "唔該", "Jyutping": "m4 goi1",
       "ProficiencyLevel": "3", "NextReviewTime": "2024-01-01T10:00:00.000Z"}
    - {"ID": "2", "English": "hello", ..., "ProficiencyLevel": "", "NextReviewTime": ""}
      -> proficiency 1, due now
    """
    card_id = (row.get('ID') or '').strip()
    if not card_id:
        raise ValueError("Missing ID")

    level = (row.get('ProficiencyLevel') or '').strip()
    next_review = (row.get('NextReviewTime') or '').strip()

    return VocabCard(
        id=card_id,
        english=(row.get('English') or '').strip(),
        cantonese=(row.get('Cantonese') or '').strip(),
        jyutping=(row.get('Jyutping') or '').strip(),
        proficiency_level=int(level) if level else 1,
        next_review_time=next_review if next_review else now,
    )


def read_cards(csv_path: Path) -> List[VocabCard]:
    """Read and parse all rows of a CSV file, skipping malformed rows."""
    now = datetime.now(timezone.utc)
    cards = []
    with open(csv_path, newline='', encoding='utf-8-sig') as f:
        reader = csv.DictReader(f)
        for line_number, row in enumerate(reader, start=2):
            try:
                cards.append(parse_card_row(row, now))
            except ValueError as e:
                logger.warning("Skipping line %d: %s", line_number, e)
    return cards


def import_cards(csv_path: Path) -> int:
    """Upsert the cards from csv_path into the vocab_card table."""
    cards = read_cards(csv_path)
    logger.info(f"Parsed {len(cards)} card(s) from {csv_path}")

    init_db()
    with Session(engine) as session:
        repository = SqlCardRepository(session)
        written = repository.upsert_cards(cards)

    logger.info(f"Imported {written} card(s)")
    return written


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python import_cards.py <cards.csv>")
        sys.exit(2)

    logger.info("Starting card import...")
    try:
        import_cards(Path(sys.argv[1]))
        logger.info("Successfully completed!")
    except Exception as e:
        logger.error("Error during card import: %s", e, exc_info=True)
        sys.exit(1)
