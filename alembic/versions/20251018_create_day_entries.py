"""create day entries table

Revision ID: 20251018_create_day_entries
Revises:
Create Date: 2025-10-18
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20251018_create_day_entries"
down_revision = None
branch_labels = None
depends_on = None

mood_rating = sa.Enum("GOOD", "AVERAGE", "BAD", name="mood_rating")


def upgrade() -> None:
    op.create_table(
        'day_entries',
        sa.Column('date', sa.Date(), primary_key=True, index=True),
        sa.Column('morning_rating', mood_rating, nullable=True),
        sa.Column('afternoon_rating', mood_rating, nullable=True),
        sa.Column('evening_rating', mood_rating, nullable=True),
        sa.Column('happy_note', sa.String(2000), nullable=True),
        sa.Column('sad_note', sa.String(2000), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table('day_entries')
    mood_rating.drop(op.get_bind(), checkfirst=True)
