"""
VocabCard model.
"""
from sqlmodel import SQLModel, Field
from datetime import datetime
from sqlalchemy import Column, DateTime

from app.schemas.vocab_card import VocabCard


class VocabCardRecord(SQLModel, table=True):
    """VocabCard table - one row per flashcard with its review schedule."""
    __tablename__ = "vocab_card"

    id: str = Field(primary_key=True)
    english: str = Field(default="")
    cantonese: str = Field(default="")
    jyutping: str = Field(default="")
    proficiency_level: int = Field(default=1)  # 1 (hardest) to 5 (easiest)
    next_review_time: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )

    def to_card(self) -> VocabCard:
        """Snapshot this row as an immutable VocabCard."""
        return VocabCard(
            id=self.id,
            english=self.english,
            cantonese=self.cantonese,
            jyutping=self.jyutping,
            proficiency_level=self.proficiency_level,
            next_review_time=self.next_review_time,
        )
