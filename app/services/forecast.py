# =========================================================
# USAGE FORECAST
#
# Monthly usage is the issued quantity per calendar month,
# counted over every month the item saw any movement.
# =========================================================

from collections import OrderedDict
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import case, select
from sqlalchemy.orm import Session

from app.models.inventory import InventoryItem
from app.models.transactions import LedgerEntry, ISSUED


def monthly_issued_totals(entries) -> "OrderedDict[tuple[int, int], int]":
    """Group (transaction_date, transaction_type, quantity) rows by month, newest first."""
    totals: dict[tuple[int, int], int] = {}

    for transaction_date, transaction_type, quantity in entries:
        key = (transaction_date.year, transaction_date.month)
        totals.setdefault(key, 0)

        if transaction_type == ISSUED:
            totals[key] += quantity

    return OrderedDict(sorted(totals.items(), reverse=True))


def average_monthly_usage(monthly_totals) -> int:
    if not monthly_totals:
        return 0

    average = Decimal(sum(monthly_totals)) / Decimal(len(monthly_totals))
    return int(average.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def estimated_months_left(current_stock: int, average_usage: int) -> int | None:
    # None means "never runs out" at the current rate
    if average_usage > 0:
        return current_stock // average_usage

    return None if current_stock > 0 else 0


def usage_forecast(db: Session, item_code: str) -> dict:
    entries = db.execute(
        select(
            LedgerEntry.transaction_date,
            LedgerEntry.transaction_type,
            LedgerEntry.quantity,
        ).where(LedgerEntry.item_code == item_code)
    ).all()

    monthly = monthly_issued_totals(entries)
    average = average_monthly_usage(list(monthly.values()))

    current_stock = db.scalar(
        select(InventoryItem.quantity).where(InventoryItem.comp_code == item_code)
    ) or 0

    return {
        "item_code": item_code,
        "current_stock": current_stock,
        "average_monthly_usage": average,
        "estimated_months_left": estimated_months_left(current_stock, average),
        "monthly_usage": [
            {"year": year, "month": month, "total_issued": total}
            for (year, month), total in monthly.items()
        ],
    }


def trend_start_date(today: date) -> date:
    """First day of the month two months before today's month."""
    month = today.month - 2
    year = today.year

    if month < 1:
        month += 12
        year -= 1

    return date(year, month, 1)


def sales_trend(db: Session, item_codes: list[str], today: date) -> list[dict]:
    start = trend_start_date(today)
    start_dt = datetime.combine(start, datetime.min.time())

    rows = db.execute(
        select(
            LedgerEntry.item_code,
            LedgerEntry.transaction_date,
            # received movements keep their month on the chart with 0 issued
            case(
                (LedgerEntry.transaction_type == ISSUED, LedgerEntry.quantity),
                else_=0,
            ),
        ).where(
            LedgerEntry.item_code.in_(item_codes),
            LedgerEntry.transaction_date >= start_dt,
        )
    ).all()

    chart: dict[str, dict] = {}

    for item_code, transaction_date, issued in rows:
        month = transaction_date.strftime("%Y-%m")
        bucket = chart.setdefault(month, {"month": month})
        bucket[item_code] = bucket.get(item_code, 0) + issued

    return [chart[month] for month in sorted(chart)]
