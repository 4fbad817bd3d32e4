"""create_cart_storage

Revision ID: 5b2e8f41a7c3
Revises:
Create Date: 2026-10-19 10:12:41.318205

"""
from alembic import op
import sqlalchemy as sa


revision = '5b2e8f41a7c3'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'cart_storage',
        sa.Column('key', sa.String(length=255), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('key')
    )


def downgrade() -> None:
    op.drop_table('cart_storage')
