# schemas/transaction.py

from pydantic import BaseModel
from datetime import datetime
from typing import Any, List
from decimal import Decimal

# Line fields stay loose on purpose: the checkout engine owns validation
# and answers with a 400 naming the offending item.

class CheckoutItem(BaseModel):
    item_code: Any = None
    quantity: Any = None
    transaction_type: Any = None
    price: Any = None

class CheckoutRequest(BaseModel):
    items: List[CheckoutItem] | None = None

class CheckoutResponse(BaseModel):
    message: str
    bill_id: str
    total_amount: float

class LedgerEntryResponse(BaseModel):
    id: int
    item_code: str
    quantity: int
    transaction_type: str
    price: Decimal
    updated_by: str | None
    bill_id: str | None
    transaction_date: datetime
    remaining_quantity: int | None = None

class BillLogCreate(BaseModel):
    bill_id: str | None = None
    mobile: str | None = None
    timestamp: str | None = None
