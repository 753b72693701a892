"""create identities and transactions tables

Revision ID: 5f3c9a1e7b20
Revises: 
Create Date: 2026-10-18 09:30:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "5f3c9a1e7b20"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "identities",
        sa.Column("wallet_key", sa.String(length=64), primary_key=True),
        sa.Column("current_nonce", sa.String(length=64)),
        sa.Column("username", sa.String(length=50)),
        sa.Column("email", sa.String(length=255)),
        sa.Column("bio", sa.String(length=500)),
        sa.Column("avatar", sa.String(length=500)),
        sa.Column("preferences", sa.Text()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_authenticated_at", sa.DateTime(timezone=True)),
        sa.Column("transaction_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_volume", sa.Float(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )

    op.create_table(
        "transactions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("signature", sa.String(length=128), nullable=False),
        sa.Column("wallet_key", sa.String(length=64), sa.ForeignKey("identities.wallet_key"), nullable=False),
        sa.Column("category", sa.String(length=20), nullable=False, server_default="other"),
        sa.Column("amount", sa.Float(), nullable=False, server_default="0"),
        sa.Column("fee", sa.Float(), nullable=False, server_default="0"),
        sa.Column("token_mint", sa.String(length=64)),
        sa.Column("block_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("slot", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="confirmed"),
        sa.Column("meta", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_transactions_signature", "transactions", ["signature"], unique=True)
    op.create_index("ix_transactions_wallet_key", "transactions", ["wallet_key"])
    op.create_index("ix_transactions_wallet_block_time", "transactions", ["wallet_key", "block_time"])
    op.create_index("ix_transactions_category_created_at", "transactions", ["category", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_transactions_category_created_at", table_name="transactions")
    op.drop_index("ix_transactions_wallet_block_time", table_name="transactions")
    op.drop_index("ix_transactions_wallet_key", table_name="transactions")
    op.drop_index("ix_transactions_signature", table_name="transactions")
    op.drop_table("transactions")
    op.drop_table("identities")
