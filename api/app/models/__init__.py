"""
Models package - imports all table models so SQLModel registers them.
"""
from app.models.vocab_card import VocabCardRecord

__all__ = [
    'VocabCardRecord',
]
