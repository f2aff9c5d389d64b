# app/routers/bills.py

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.database import get_db
from app.core.auth import get_any_role
from app.models.bills import BillLog
from app.schemas.transaction import BillLogCreate

router = APIRouter(prefix="/bills", tags=["Bills"])


def _parse_timestamp(value: str) -> datetime:
    # Browsers send ISO strings ending in "Z"
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed


@router.post("")
def log_bill(
    bill_data: BillLogCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_any_role),
):
    if not bill_data.bill_id or not bill_data.mobile or not bill_data.timestamp:
        raise HTTPException(status_code=400, detail="Missing required fields")

    try:
        timestamp = _parse_timestamp(bill_data.timestamp)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid timestamp format")

    try:
        db.add(
            BillLog(
                bill_id=bill_data.bill_id,
                mobile=bill_data.mobile,
                timestamp=timestamp,
            )
        )
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to save bill log")

    return {"message": "Bill log saved"}
