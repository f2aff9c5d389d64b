"""create_inventory_ledger_tables

Revision ID: 5b1e0c9d2a41
Revises:
Create Date: 2026-10-19 09:12:44.210518
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1e0c9d2a41'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    # USERS
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint(
            "role IN ('admin', 'stock_operator', 'user')",
            name="ck_users_role_valid",
        ),
    )
    op.create_index("ix_users_id", "users", ["id"], unique=False)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # INVENTORY
    op.create_table(
        "inventory",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("comp_code", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("barcode", sa.String(), nullable=True),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("unit_type", sa.String(), nullable=True),
        sa.Column("weight", sa.String(), nullable=True),
        sa.Column("pack_size", sa.Integer(), nullable=False),
        sa.Column("image", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
        sa.CheckConstraint("price >= 0", name="ck_inventory_price_non_negative"),
        sa.CheckConstraint("pack_size > 0", name="ck_inventory_pack_size_positive"),
    )
    op.create_index("ix_inventory_id", "inventory", ["id"], unique=False)
    op.create_index("ix_inventory_comp_code", "inventory", ["comp_code"], unique=True)
    op.create_index("ix_inventory_barcode", "inventory", ["barcode"], unique=True)

    # TRANSACTIONS (LEDGER)
    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("item_code", sa.String(), sa.ForeignKey("inventory.comp_code"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("transaction_type", sa.String(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("transaction_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_by", sa.String(), nullable=True),
        sa.Column("bill_id", sa.String(), nullable=True),
        sa.CheckConstraint("quantity > 0", name="ck_transactions_quantity_positive"),
        sa.CheckConstraint("price >= 0", name="ck_transactions_price_non_negative"),
        sa.CheckConstraint(
            "transaction_type IN ('issued', 'received')",
            name="ck_transactions_type_valid",
        ),
    )
    op.create_index("ix_transactions_id", "transactions", ["id"], unique=False)
    op.create_index("ix_transactions_item_code", "transactions", ["item_code"], unique=False)
    op.create_index("ix_transactions_transaction_date", "transactions", ["transaction_date"], unique=False)
    op.create_index("ix_transactions_bill_id", "transactions", ["bill_id"], unique=False)
    op.create_index(
        "ix_transactions_item_date",
        "transactions",
        ["item_code", "transaction_date"],
        unique=False,
    )

    # BILLS
    op.create_table(
        "bills",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("bill_id", sa.String(), nullable=False),
        sa.Column("mobile", sa.String(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_bills_id", "bills", ["id"], unique=False)
    op.create_index("ix_bills_bill_id", "bills", ["bill_id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_index("ix_bills_bill_id", table_name="bills")
    op.drop_index("ix_bills_id", table_name="bills")
    op.drop_table("bills")

    op.drop_index("ix_transactions_item_date", table_name="transactions")
    op.drop_index("ix_transactions_bill_id", table_name="transactions")
    op.drop_index("ix_transactions_transaction_date", table_name="transactions")
    op.drop_index("ix_transactions_item_code", table_name="transactions")
    op.drop_index("ix_transactions_id", table_name="transactions")
    op.drop_table("transactions")

    op.drop_index("ix_inventory_barcode", table_name="inventory")
    op.drop_index("ix_inventory_comp_code", table_name="inventory")
    op.drop_index("ix_inventory_id", table_name="inventory")
    op.drop_table("inventory")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")
