"""Create vocab_card table

Revision ID: 001_create_vocab_card_table
Revises:
Create Date: 2025-06-14 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_create_vocab_card_table'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'vocab_card',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('english', sa.String(), nullable=False, server_default=''),
        sa.Column('cantonese', sa.String(), nullable=False, server_default=''),
        sa.Column('jyutping', sa.String(), nullable=False, server_default=''),
        sa.Column('proficiency_level', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('next_review_time', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('proficiency_level BETWEEN 1 AND 5', name='ck_vocab_card_proficiency_level'),
    )
    # Due-queue selection filters and sorts on next_review_time
    op.create_index('ix_vocab_card_next_review_time', 'vocab_card', ['next_review_time'])


def downgrade() -> None:
    op.drop_index('ix_vocab_card_next_review_time', table_name='vocab_card')
    op.drop_table('vocab_card')
