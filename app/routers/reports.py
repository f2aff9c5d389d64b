# =========================================================
# REPORTS ROUTER
#
# Read-only projections over the ledger and inventory:
# - transaction report (ledger + item description)
# - usage forecast per item
# - issued-quantity trend for the last three months
# - dashboard summary cards
# =========================================================

from datetime import datetime, timezone
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import case, func
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.auth import get_any_role
from app.core.config import settings
from app.models.inventory import InventoryItem
from app.models.transactions import LedgerEntry, ISSUED, RECEIVED
from app.schemas.report import (
    InventorySummaryResponse,
    SalesTrendRequest,
    TransactionReportRow,
    UsageForecastResponse,
)
from app.services.forecast import sales_trend, usage_forecast

router = APIRouter(prefix="/reports", tags=["Reports"])


# =========================================================
# TRANSACTION REPORT
# =========================================================
@router.get("/transactions", response_model=list[TransactionReportRow])
def transaction_report(
    db: Session = Depends(get_db),
    current_user=Depends(get_any_role),
):
    rows = (
        db.query(
            LedgerEntry.id,
            LedgerEntry.item_code,
            InventoryItem.description,
            LedgerEntry.quantity,
            LedgerEntry.transaction_type,
            LedgerEntry.transaction_date,
        )
        .outerjoin(InventoryItem, LedgerEntry.item_code == InventoryItem.comp_code)
        .order_by(LedgerEntry.transaction_date.desc(), LedgerEntry.id.desc())
        .all()
    )

    return [TransactionReportRow(**row._mapping) for row in rows]


# =========================================================
# USAGE FORECAST
# =========================================================
@router.get("/usage/{item_code}", response_model=UsageForecastResponse)
def item_usage(
    item_code: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_any_role),
):
    return usage_forecast(db, item_code)


# =========================================================
# SALES TREND (LAST 3 MONTHS)
# =========================================================
@router.post("/sales-trend")
def item_sales_trend(
    payload: SalesTrendRequest,
    db: Session = Depends(get_db),
    current_user=Depends(get_any_role),
):
    if not payload.items:
        raise HTTPException(status_code=400, detail="No products selected")

    today = datetime.now(timezone.utc).date()

    return sales_trend(db, payload.items, today)


# =========================================================
# DASHBOARD SUMMARY
# =========================================================
@router.get("/summary", response_model=InventorySummaryResponse)
def inventory_summary(
    db: Session = Depends(get_db),
    current_user=Depends(get_any_role),
):
    total_items, total_units, stock_value = db.query(
        func.count(InventoryItem.id),
        func.coalesce(func.sum(InventoryItem.quantity), 0),
        func.coalesce(func.sum(InventoryItem.price * InventoryItem.quantity), 0),
    ).one()

    low_stock_items = (
        db.query(func.count(InventoryItem.id))
        .filter(InventoryItem.quantity < settings.LOW_STOCK_THRESHOLD)
        .scalar()
    )

    total_issued, total_received = db.query(
        func.coalesce(
            func.sum(case((LedgerEntry.transaction_type == ISSUED, LedgerEntry.quantity), else_=0)),
            0,
        ),
        func.coalesce(
            func.sum(case((LedgerEntry.transaction_type == RECEIVED, LedgerEntry.quantity), else_=0)),
            0,
        ),
    ).one()

    return {
        "total_items": total_items,
        "total_units": total_units,
        "stock_value": Decimal(stock_value or 0).quantize(Decimal("0.01")),
        "low_stock_items": low_stock_items,
        "total_issued": total_issued,
        "total_received": total_received,
    }
