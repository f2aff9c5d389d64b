# app/models/inventory.py

from sqlalchemy import CheckConstraint, Column, Integer, String, Numeric, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.database import Base


class InventoryItem(Base):
    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True, index=True)
    comp_code = Column(String, unique=True, index=True, nullable=False)
    description = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(10, 2), nullable=False, default=0)

    barcode = Column(String, unique=True, index=True, nullable=True)
    category = Column(String, nullable=True)
    unit_type = Column(String, nullable=True)
    weight = Column(String, nullable=True)
    pack_size = Column(Integer, nullable=False, default=1)
    image = Column(String, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    ledger_entries = relationship("LedgerEntry", back_populates="item")

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
        CheckConstraint("price >= 0", name="ck_inventory_price_non_negative"),
        CheckConstraint("pack_size > 0", name="ck_inventory_pack_size_positive"),
    )
