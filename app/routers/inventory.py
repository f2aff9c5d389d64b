# app/routers/inventory.py

import logging
import re
import time
from pathlib import Path

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.database import get_db
from app.core.auth import get_admin_user, get_any_role
from app.core.config import settings
from app.models.inventory import InventoryItem
from app.models.transactions import LedgerEntry
from app.schemas.inventory import (
    InventoryCreate,
    InventoryUpdate,
    InventoryResponse,
    ProductSummary,
)

logger = logging.getLogger("app")

router = APIRouter(
    prefix="/inventory",
    tags=["Inventory"],
)

SINGLE_UNIT = "Single Unit"


@router.get("", response_model=list[InventoryResponse])
def list_inventory(
    db: Session = Depends(get_db),
    current_user=Depends(get_any_role),
):
    return (
        db.query(InventoryItem)
        .order_by(InventoryItem.created_at.desc(), InventoryItem.id.desc())
        .all()
    )


@router.post("", response_model=InventoryResponse, status_code=status.HTTP_201_CREATED)
def add_inventory(
    inventory_data: InventoryCreate,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    existing = (
        db.query(InventoryItem)
        .filter(InventoryItem.comp_code == inventory_data.comp_code)
        .first()
    )

    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Item with this code already exists",
        )

    if inventory_data.barcode:
        barcode_taken = (
            db.query(InventoryItem)
            .filter(InventoryItem.barcode == inventory_data.barcode)
            .first()
        )
        if barcode_taken:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Barcode is already assigned to another item",
            )

    # Single units always come in packs of one
    if inventory_data.unit_type == SINGLE_UNIT:
        pack_size = 1
    else:
        pack_size = inventory_data.pack_size or 1

    item = InventoryItem(
        comp_code=inventory_data.comp_code,
        description=inventory_data.description,
        quantity=inventory_data.quantity,
        price=inventory_data.price,
        barcode=inventory_data.barcode or None,
        category=inventory_data.category,
        unit_type=inventory_data.unit_type,
        weight=inventory_data.weight,
        pack_size=pack_size,
    )

    try:
        db.add(item)
        db.commit()
        db.refresh(item)
    except SQLAlchemyError:
        db.rollback()
        raise HTTPException(status_code=500, detail="Unable to add item")

    return item


@router.get("/low-stock", response_model=list[InventoryResponse])
def low_stock(
    db: Session = Depends(get_db),
    current_user=Depends(get_any_role),
):
    return (
        db.query(InventoryItem)
        .filter(InventoryItem.quantity < settings.LOW_STOCK_THRESHOLD)
        .order_by(InventoryItem.quantity.asc())
        .all()
    )


@router.get("/all-products", response_model=list[ProductSummary])
def all_products(
    db: Session = Depends(get_db),
    current_user=Depends(get_any_role),
):
    return db.query(InventoryItem).order_by(InventoryItem.comp_code).all()


@router.get("/barcode/{barcode}", response_model=InventoryResponse)
def get_by_barcode(
    barcode: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_any_role),
):
    item = db.query(InventoryItem).filter(InventoryItem.barcode == barcode).first()

    if not item:
        raise HTTPException(status_code=404, detail="Product not found")

    return item


@router.put("/{item_id}", response_model=InventoryResponse)
def update_inventory(
    item_id: int,
    inventory_data: InventoryUpdate,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    item = db.query(InventoryItem).filter(InventoryItem.id == item_id).first()

    if not item:
        raise HTTPException(status_code=404, detail="Item not found")

    changes = inventory_data.model_dump(exclude_unset=True)

    if changes.get("barcode"):
        barcode_taken = (
            db.query(InventoryItem)
            .filter(
                InventoryItem.barcode == changes["barcode"],
                InventoryItem.id != item.id,
            )
            .first()
        )
        if barcode_taken:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Barcode is already assigned to another item",
            )

    for field, value in changes.items():
        if value is not None:
            setattr(item, field, value)

    if item.unit_type == SINGLE_UNIT:
        item.pack_size = 1

    try:
        db.commit()
        db.refresh(item)
    except SQLAlchemyError:
        db.rollback()
        raise HTTPException(status_code=500, detail="Unable to update item")

    return item


# =========================================================
# PRODUCT IMAGE
# =========================================================
def _image_filename(original: str | None) -> str:
    # Keep the client's name readable but never let it leave the upload dir
    name = re.sub(r"[^A-Za-z0-9._-]", "_", Path(original or "").name).lstrip(".")
    return f"{time.time_ns() // 1_000_000}-{name or 'image'}"


@router.post("/{item_id}/image", response_model=InventoryResponse)
def upload_image(
    item_id: int,
    image: UploadFile = File(...),
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    item = db.query(InventoryItem).filter(InventoryItem.id == item_id).first()

    if not item:
        raise HTTPException(status_code=404, detail="Item not found")

    if not (image.content_type or "").startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image files can be uploaded")

    content = image.file.read(settings.MAX_IMAGE_BYTES + 1)

    if len(content) > settings.MAX_IMAGE_BYTES:
        raise HTTPException(status_code=413, detail="Image is too large")

    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)

    filename = _image_filename(image.filename)
    path = upload_dir / filename
    path.write_bytes(content)

    previous = item.image
    item.image = filename

    try:
        db.commit()
        db.refresh(item)
    except SQLAlchemyError:
        db.rollback()
        path.unlink(missing_ok=True)
        raise HTTPException(status_code=500, detail="Image update failed")

    if previous:
        (upload_dir / previous).unlink(missing_ok=True)

    logger.info(f"Image {filename} saved for item {item.comp_code}")

    return item


@router.delete("/{item_id}")
def delete_inventory(
    item_id: int,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_user),
):
    item = db.query(InventoryItem).filter(InventoryItem.id == item_id).first()

    if not item:
        raise HTTPException(status_code=404, detail="Item not found")

    # Ledger rows keep referencing the item code forever
    has_history = (
        db.query(LedgerEntry.id)
        .filter(LedgerEntry.item_code == item.comp_code)
        .first()
    )

    if has_history:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Item has recorded transactions and cannot be deleted",
        )

    db.delete(item)
    db.commit()

    return {"message": "Item deleted successfully"}
