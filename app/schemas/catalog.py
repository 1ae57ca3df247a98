from datetime import date, datetime
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, Field


class ContentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=160)


class ContentUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=160)


class ContentOut(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class MedicineCreate(BaseModel):
    name: str = Field(min_length=1, max_length=160)
    hsn: str | None = Field(default=None, max_length=50)
    contents: list[int] = Field(default_factory=list)


class MedicineUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=160)
    hsn: str | None = Field(default=None, max_length=50)
    contents: list[int] | None = None


class MedicineOut(BaseModel):
    id: int
    name: str
    hsn: str | None
    contents: list[ContentOut]

    model_config = {"from_attributes": True}


class MedicineContentLink(BaseModel):
    content_id: int = Field(validation_alias=AliasChoices("content_id", "contentId"))


class BatchCreate(BaseModel):
    """Direct batch intake; missing required fields are reported by the service."""

    medicine_id: int | None = Field(default=None, validation_alias=AliasChoices("medicine_id", "medicineId"))
    batch_number: str | None = Field(
        default=None,
        max_length=100,
        validation_alias=AliasChoices("batch_number", "batchNumber", "batch"),
    )
    incoming_date: date | None = Field(default=None, validation_alias=AliasChoices("incoming_date", "incomingDate"))
    expiry_date: date | None = Field(
        default=None,
        validation_alias=AliasChoices("expiry_date", "expiryDate", "expiry"),
    )
    quantity: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("quantity_available", "quantityAvailable", "quantity"),
    )
    price: Decimal = Field(default=Decimal("0.00"), ge=0)
    units_per_pack: int | None = Field(
        default=None,
        gt=0,
        validation_alias=AliasChoices("units_per_pack", "unitsPerPack"),
    )


class BatchUpdate(BaseModel):
    batch_number: str | None = Field(
        default=None,
        max_length=100,
        validation_alias=AliasChoices("batch_number", "batchNumber"),
    )
    incoming_date: date | None = Field(default=None, validation_alias=AliasChoices("incoming_date", "incomingDate"))
    expiry_date: date | None = Field(default=None, validation_alias=AliasChoices("expiry_date", "expiryDate"))
    quantity_available: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("quantity_available", "quantityAvailable"),
    )
    price: Decimal | None = Field(default=None, ge=0)
    units_per_pack: int | None = Field(
        default=None,
        gt=0,
        validation_alias=AliasChoices("units_per_pack", "unitsPerPack"),
    )


class BatchOut(BaseModel):
    id: int
    account_id: int
    medicine_id: int
    batch_number: str
    incoming_date: date
    expiry_date: date
    units_per_pack: int | None
    quantity_available: int
    price: Decimal
    updated_at: datetime

    model_config = {"from_attributes": True}


class BatchSearchOut(BaseModel):
    id: int
    medicine_id: int
    medicine_name: str
    batch_number: str
    incoming_date: date
    expiry_date: date
    units_per_pack: int | None
    quantity_available: int
    price: Decimal


class StockSummaryOut(BaseModel):
    low_stock_count: int
    expiring_soon_count: int
