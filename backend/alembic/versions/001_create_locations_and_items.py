"""Create locations, items and locations_items; seed items

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Initial schema for the collection point directory plus the fixed
       item catalogue.

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SEED_ITEMS = [
    "Lâmpadas",
    "Pilhas e Baterias",
    "Papéis e Papelão",
    "Resíduos Eletrônicos",
    "Resíduos Orgânicos",
    "Óleo de Cozinha",
]


def upgrade() -> None:
    items = op.create_table(
        "items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "locations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("image", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("whatsapp", sa.String(50), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("city", sa.String(255), nullable=False),
        sa.Column("uf", sa.String(2), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "locations_items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("location_id", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"]),
        sa.ForeignKeyConstraint(["item_id"], ["items.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_locations_items_location_id",
        "locations_items",
        ["location_id"],
    )

    op.bulk_insert(items, [{"title": title} for title in SEED_ITEMS])


def downgrade() -> None:
    op.drop_index("ix_locations_items_location_id", table_name="locations_items")
    op.drop_table("locations_items")
    op.drop_table("locations")
    op.drop_table("items")
