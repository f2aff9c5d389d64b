# =========================================================
# TRANSACTIONS ROUTER
#
# Every stock movement goes through the checkout engine:
# - scan checkout: many lines, one bill
# - single movement: one line (issue or receive)
#
# Engine errors are answered as { "error": message }
# =========================================================

import logging
from io import BytesIO

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse
from openpyxl import Workbook
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.auth import get_any_role, get_stock_staff
from app.core.rate_limiter import limiter
from app.models.inventory import InventoryItem
from app.models.transactions import LedgerEntry
from app.models.users import User
from app.schemas.transaction import (
    CheckoutItem,
    CheckoutRequest,
    CheckoutResponse,
    LedgerEntryResponse,
)
from app.services.checkout import CheckoutEngine, CheckoutLine, get_checkout_engine
from app.services.errors import CheckoutError

logger = logging.getLogger("app")

router = APIRouter(tags=["Transactions"])


def _to_line(item: CheckoutItem) -> CheckoutLine:
    return CheckoutLine(
        item_code=item.item_code,
        quantity=item.quantity,
        movement_type=item.transaction_type,
        unit_price=item.price,
    )


def _run_checkout(engine: CheckoutEngine, lines: list, actor: str, message: str):
    try:
        bill = engine.checkout(lines, actor=actor)

    except CheckoutError as exc:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    except Exception:
        logger.exception("Unexpected checkout failure")
        return JSONResponse(status_code=500, content={"error": "Unable to complete transaction"})

    return {
        "message": message,
        "bill_id": bill.bill_id,
        "total_amount": float(bill.total_amount),
    }


# =========================================================
# SCAN CHECKOUT (MULTI-ITEM)
# =========================================================
def _scan_checkout(payload: CheckoutRequest, engine: CheckoutEngine, current_user: User):
    lines = [_to_line(item) for item in payload.items or []]

    return _run_checkout(
        engine,
        lines,
        actor=current_user.email,
        message="Purchase completed successfully.",
    )


@router.post("/inventory/transaction-scan", response_model=CheckoutResponse)
@limiter.limit("30/minute")
def transaction_scan(
    request: Request,
    payload: CheckoutRequest,
    engine: CheckoutEngine = Depends(get_checkout_engine),
    current_user: User = Depends(get_stock_staff),
):
    return _scan_checkout(payload, engine, current_user)


@router.post("/user/inventory/transaction-scan", response_model=CheckoutResponse)
@limiter.limit("30/minute")
def user_transaction_scan(
    request: Request,
    payload: CheckoutRequest,
    engine: CheckoutEngine = Depends(get_checkout_engine),
    current_user: User = Depends(get_any_role),
):
    return _scan_checkout(payload, engine, current_user)


# =========================================================
# SINGLE MOVEMENT (ISSUE / RECEIVE)
# =========================================================
@router.post("/inventory/transaction", response_model=CheckoutResponse)
@limiter.limit("60/minute")
def record_transaction(
    request: Request,
    item: CheckoutItem,
    engine: CheckoutEngine = Depends(get_checkout_engine),
    current_user: User = Depends(get_stock_staff),
):
    return _run_checkout(
        engine,
        [_to_line(item)],
        actor=current_user.email,
        message="Transaction recorded successfully.",
    )


# =========================================================
# LEDGER LOG
# =========================================================
def _ledger_rows(db: Session):
    return (
        db.query(LedgerEntry, InventoryItem.quantity.label("remaining_quantity"))
        .outerjoin(InventoryItem, LedgerEntry.item_code == InventoryItem.comp_code)
        .order_by(LedgerEntry.id.desc())
        .all()
    )


@router.get("/inventory/transactions", response_model=list[LedgerEntryResponse])
def list_transactions(
    db: Session = Depends(get_db),
    current_user=Depends(get_any_role),
):
    return [
        LedgerEntryResponse(
            id=entry.id,
            item_code=entry.item_code,
            quantity=entry.quantity,
            transaction_type=entry.transaction_type,
            price=entry.price,
            updated_by=entry.updated_by,
            bill_id=entry.bill_id,
            transaction_date=entry.transaction_date,
            remaining_quantity=remaining_quantity,
        )
        for entry, remaining_quantity in _ledger_rows(db)
    ]


@router.get("/inventory/transactions/export")
@limiter.limit("10/minute")
def export_transactions(
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_stock_staff),
):
    workbook = Workbook()

    sheet = workbook.active
    sheet.title = "Transactions"

    sheet.append([
        "Date",
        "Item Code",
        "Type",
        "Quantity",
        "Unit Price",
        "Line Total",
        "Remaining Stock",
        "Updated By",
        "Bill ID",
    ])

    for entry, remaining_quantity in _ledger_rows(db):
        sheet.append([
            entry.transaction_date.strftime("%Y-%m-%d %H:%M:%S"),
            entry.item_code,
            entry.transaction_type,
            entry.quantity,
            float(entry.price),
            float(entry.price * entry.quantity),
            remaining_quantity,
            entry.updated_by,
            entry.bill_id,
        ])

    output = BytesIO()
    workbook.save(output)
    output.seek(0)

    return StreamingResponse(
        output,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": 'attachment; filename="transactions.xlsx"'},
    )
