"""initial schema: users, categories, sweets, restocks, purchases

Revision ID: 0001
Revises:
Create Date: 2026-10-18 00:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.Enum("CUSTOMER", "ADMIN", name="userrole"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.Column("deleted_at", sa.TIMESTAMP(timezone=True), nullable=True),
    )

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False, unique=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.TIMESTAMP(timezone=True), nullable=True),
    )

    op.create_table(
        "sweets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column(
            "category_id", sa.Integer(),
            sa.ForeignKey("categories.id", onupdate="CASCADE", ondelete="RESTRICT"), nullable=False,
        ),
        sa.Column("price", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.Column("deleted_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.CheckConstraint("quantity >= 0", name="ck_sweets_quantity_non_negative"),
        sa.CheckConstraint("price > 0", name="ck_sweets_price_positive"),
    )
    op.create_index(
        "uq_sweets_name_active", "sweets", ["name"], unique=True,
        postgresql_where=sa.text("deleted_at IS NULL"),
        sqlite_where=sa.text("deleted_at IS NULL"),
    )

    op.create_table(
        "restocks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "sweet_id", sa.Integer(),
            sa.ForeignKey("sweets.id", onupdate="CASCADE", ondelete="RESTRICT"), nullable=False,
        ),
        sa.Column(
            "admin_id", sa.Integer(),
            sa.ForeignKey("users.id", onupdate="CASCADE", ondelete="RESTRICT"), nullable=False,
        ),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("restocked_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("quantity > 0", name="ck_restocks_quantity_positive"),
    )

    op.create_table(
        "purchases",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id", sa.Integer(),
            sa.ForeignKey("users.id", onupdate="CASCADE", ondelete="RESTRICT"), nullable=False,
        ),
        sa.Column(
            "sweet_id", sa.Integer(),
            sa.ForeignKey("sweets.id", onupdate="CASCADE", ondelete="RESTRICT"), nullable=False,
        ),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("purchased_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("quantity > 0", name="ck_purchases_quantity_positive"),
    )
    op.create_index("ix_purchases_user_purchased_at", "purchases", ["user_id", "purchased_at"])
    op.create_index("ix_purchases_sweet_id", "purchases", ["sweet_id"])


def downgrade() -> None:
    op.drop_index("ix_purchases_sweet_id", table_name="purchases")
    op.drop_index("ix_purchases_user_purchased_at", table_name="purchases")
    op.drop_table("purchases")
    op.drop_table("restocks")
    op.drop_index("uq_sweets_name_active", table_name="sweets")
    op.drop_table("sweets")
    op.drop_table("categories")
    op.drop_table("users")
    sa.Enum(name="userrole").drop(op.get_bind(), checkfirst=True)
