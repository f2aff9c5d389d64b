# schemas/report.py

from pydantic import BaseModel
from datetime import datetime
from decimal import Decimal
from typing import List



class TransactionReportRow(BaseModel):
    id: int
    item_code: str
    description: str | None
    quantity: int
    transaction_type: str
    transaction_date: datetime


class MonthlyUsage(BaseModel):
    year: int
    month: int
    total_issued: int


class UsageForecastResponse(BaseModel):
    item_code: str
    current_stock: int
    average_monthly_usage: int
    estimated_months_left: int | None
    monthly_usage: List[MonthlyUsage]


class SalesTrendRequest(BaseModel):
    items: List[str] | None = None


class InventorySummaryResponse(BaseModel):
    total_items: int
    total_units: int
    stock_value: Decimal
    low_stock_items: int
    total_issued: int
    total_received: int
