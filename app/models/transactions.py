# models/transactions.py

from sqlalchemy import CheckConstraint, Column, Index, Integer, String, DateTime, ForeignKey, Numeric
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.database import Base

ISSUED = "issued"
RECEIVED = "received"

MOVEMENT_TYPES = (ISSUED, RECEIVED)


class LedgerEntry(Base):
    """One stock movement. Rows are only ever inserted."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)

    item_code = Column(
        String,
        ForeignKey("inventory.comp_code"),
        nullable=False,
        index=True,
    )

    quantity = Column(Integer, nullable=False)
    transaction_type = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    transaction_date = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    updated_by = Column(String, nullable=True)
    bill_id = Column(String, nullable=True, index=True)

    item = relationship("InventoryItem", back_populates="ledger_entries")

    __table_args__ = (
        Index("ix_transactions_item_date", "item_code", "transaction_date"),
        CheckConstraint("quantity > 0", name="ck_transactions_quantity_positive"),
        CheckConstraint("price >= 0", name="ck_transactions_price_non_negative"),
        CheckConstraint(
            "transaction_type IN ('issued', 'received')",
            name="ck_transactions_type_valid",
        ),
    )
