from decimal import Decimal
from pydantic import BaseModel, Field
from datetime import datetime


class InventoryCreate(BaseModel):
    comp_code: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    quantity: int = Field(0, ge=0)
    price: Decimal = Field(
        ...,
        ge=0,
        lt=100_000_000,
        description="Unit price must be below 100 million"
    )
    barcode: str | None = None
    category: str | None = None
    unit_type: str | None = None
    weight: str | None = None
    pack_size: int | None = Field(None, gt=0)

class InventoryUpdate(BaseModel):
    description: str | None = None
    price: Decimal | None = Field(None, ge=0, lt=100_000_000)
    barcode: str | None = None
    category: str | None = None
    unit_type: str | None = None
    weight: str | None = None
    pack_size: int | None = Field(None, gt=0)

class InventoryResponse(BaseModel):
    id: int
    comp_code: str
    description: str
    quantity: int
    price: Decimal
    barcode: str | None
    category: str | None
    unit_type: str | None
    weight: str | None
    pack_size: int
    image: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True

class ProductSummary(BaseModel):
    comp_code: str
    description: str

    class Config:
        from_attributes = True
