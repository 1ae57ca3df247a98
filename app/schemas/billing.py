from datetime import date, datetime
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.models.billing import PaymentStatus
from app.schemas.catalog import BatchOut
from app.schemas.parties import PatientOut


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class PurchaseBillHeader(BaseModel):
    provider_id: int = Field(validation_alias=_alias("provider_id", "providerId"))
    invoice_number: str = Field(min_length=1, max_length=100, validation_alias=_alias("invoice_number", "invoiceNumber"))
    invoice_date: date = Field(validation_alias=_alias("invoice_date", "invoiceDate"))
    payment_status: PaymentStatus = Field(
        default=PaymentStatus.REMAINING,
        validation_alias=_alias("payment_status", "paymentStatus"),
    )
    discount_total: Decimal = Field(default=Decimal("0"), ge=0, validation_alias=_alias("discount_total", "discountTotal"))
    sgst_total: Decimal = Field(default=Decimal("0"), ge=0, validation_alias=_alias("sgst_total", "sgstTotal"))
    cgst_total: Decimal = Field(default=Decimal("0"), ge=0, validation_alias=_alias("cgst_total", "cgstTotal"))
    total_amount: Decimal = Field(default=Decimal("0"), ge=0, validation_alias=_alias("total_amount", "totalAmount"))


class PurchaseEntry(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    medicine_id: int | None = Field(default=None, validation_alias=_alias("medicine_id", "medicineId"))
    name: str | None = Field(default=None, max_length=160)
    hsn: str | None = Field(default=None, max_length=50)
    batch_number: str = Field(min_length=1, max_length=100, validation_alias=_alias("batch_number", "batchNumber"))
    incoming_date: date = Field(validation_alias=_alias("incoming_date", "incomingDate"))
    expiry_date: date = Field(validation_alias=_alias("expiry_date", "expiryDate"))
    quantity: int = Field(gt=0, validation_alias=_alias("quantity", "quantity_received", "quantityReceived"))
    unit_cost: Decimal = Field(ge=0, validation_alias=_alias("unit_cost", "unitCost"))
    discount_line: Decimal = Field(default=Decimal("0"), ge=0, validation_alias=_alias("discount_line", "discountLine"))
    free_quantity: int = Field(default=0, ge=0, validation_alias=_alias("free_quantity", "freeQuantity"))
    units_per_pack: int | None = Field(default=None, gt=0, validation_alias=_alias("units_per_pack", "unitsPerPack"))


class PurchaseCreateRequest(BaseModel):
    bill: PurchaseBillHeader | None = None
    entries: list[PurchaseEntry] | None = None


class IncomingBillUpdate(BaseModel):
    provider_id: int | None = Field(default=None, validation_alias=_alias("provider_id", "providerId"))
    invoice_number: str | None = Field(
        default=None,
        min_length=1,
        max_length=100,
        validation_alias=_alias("invoice_number", "invoiceNumber"),
    )
    invoice_date: date | None = Field(default=None, validation_alias=_alias("invoice_date", "invoiceDate"))
    payment_status: PaymentStatus | None = Field(default=None, validation_alias=_alias("payment_status", "paymentStatus"))
    discount_total: Decimal | None = Field(default=None, ge=0, validation_alias=_alias("discount_total", "discountTotal"))
    sgst_total: Decimal | None = Field(default=None, ge=0, validation_alias=_alias("sgst_total", "sgstTotal"))
    cgst_total: Decimal | None = Field(default=None, ge=0, validation_alias=_alias("cgst_total", "cgstTotal"))
    total_amount: Decimal | None = Field(default=None, ge=0, validation_alias=_alias("total_amount", "totalAmount"))


class IncomingBillOut(BaseModel):
    id: int
    account_id: int
    provider_id: int
    invoice_number: str
    invoice_date: date
    payment_status: PaymentStatus
    discount_total: Decimal
    sgst_total: Decimal
    cgst_total: Decimal
    total_amount: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}


class IncomingBillListOut(BaseModel):
    incomingBills: list[IncomingBillOut]


class IncomingStockCreate(BaseModel):
    """Standalone intake line; required fields are checked by the service."""

    incoming_bill_id: int | None = Field(default=None, validation_alias=_alias("incoming_bill_id", "incomingBillId"))
    medicine_id: int | None = Field(default=None, validation_alias=_alias("medicine_id", "medicineId"))
    batch_number: str | None = Field(default=None, max_length=100, validation_alias=_alias("batch_number", "batchNumber"))
    incoming_date: date | None = Field(default=None, validation_alias=_alias("incoming_date", "incomingDate"))
    expiry_date: date | None = Field(default=None, validation_alias=_alias("expiry_date", "expiryDate"))
    quantity_received: int | None = Field(
        default=None,
        gt=0,
        validation_alias=_alias("quantity_received", "quantityReceived"),
    )
    unit_cost: Decimal = Field(default=Decimal("0"), ge=0, validation_alias=_alias("unit_cost", "unitCost"))
    discount_line: Decimal = Field(default=Decimal("0"), ge=0, validation_alias=_alias("discount_line", "discountLine"))
    free_quantity: int = Field(default=0, ge=0, validation_alias=_alias("free_quantity", "freeQuantity"))
    units_per_pack: int | None = Field(default=None, gt=0, validation_alias=_alias("units_per_pack", "unitsPerPack"))


class IncomingStockOut(BaseModel):
    id: int
    account_id: int
    incoming_bill_id: int
    medicine_id: int
    batch_number: str
    incoming_date: date
    quantity_received: int
    unit_cost: Decimal
    discount_line: Decimal
    free_quantity: int
    expiry_date: date

    model_config = {"from_attributes": True}


class StockIntakeOut(BaseModel):
    stock: BatchOut
    log: IncomingStockOut
    merged: bool


class PurchaseResultOut(BaseModel):
    bill: IncomingBillOut
    stocks: list[BatchOut]
    logs: list[IncomingStockOut]


class PatientRef(BaseModel):
    name: str = Field(min_length=1, max_length=160)
    phone: str | None = Field(default=None, max_length=32)


class SaleBillHeader(BaseModel):
    patient_id: int | None = Field(default=None, validation_alias=_alias("patient_id", "patientId"))
    patient: PatientRef | None = None
    doctor_name: str | None = Field(default=None, max_length=255, validation_alias=_alias("doctor_name", "doctorName"))
    bill_date: date = Field(default_factory=date.today, validation_alias=_alias("bill_date", "billDate"))
    discount_total: Decimal = Field(default=Decimal("0"), ge=0, validation_alias=_alias("discount_total", "discountTotal"))
    sgst_total: Decimal = Field(default=Decimal("0"), ge=0, validation_alias=_alias("sgst_total", "sgstTotal"))
    cgst_total: Decimal = Field(default=Decimal("0"), ge=0, validation_alias=_alias("cgst_total", "cgstTotal"))
    total_amount: Decimal = Field(default=Decimal("0"), ge=0, validation_alias=_alias("total_amount", "totalAmount"))


class SaleEntry(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    medicine_id: int = Field(validation_alias=_alias("medicine_id", "medicineId"))
    batch_number: str = Field(min_length=1, max_length=100, validation_alias=_alias("batch_number", "batchNumber"))
    batch_id: int | None = Field(default=None, validation_alias=_alias("batch_id", "batchId", "medicineStockId"))
    quantity: int = Field(gt=0, validation_alias=_alias("quantity", "quantity_sold", "quantitySold"))
    price: Decimal = Field(
        ge=0,
        validation_alias=_alias("price", "unit_price_inclusive_gst", "unitPriceInclusiveGst"),
    )
    discount_line: Decimal = Field(default=Decimal("0"), ge=0, validation_alias=_alias("discount_line", "discountLine"))


class SaleCreateRequest(BaseModel):
    bill: SaleBillHeader | None = None
    entries: list[SaleEntry] | None = None


class BillUpdate(BaseModel):
    patient_id: int | None = Field(default=None, validation_alias=_alias("patient_id", "patientId"))
    doctor_name: str | None = Field(default=None, max_length=255, validation_alias=_alias("doctor_name", "doctorName"))
    bill_date: date | None = Field(default=None, validation_alias=_alias("bill_date", "billDate"))
    discount_total: Decimal | None = Field(default=None, ge=0, validation_alias=_alias("discount_total", "discountTotal"))
    sgst_total: Decimal | None = Field(default=None, ge=0, validation_alias=_alias("sgst_total", "sgstTotal"))
    cgst_total: Decimal | None = Field(default=None, ge=0, validation_alias=_alias("cgst_total", "cgstTotal"))
    total_amount: Decimal | None = Field(default=None, ge=0, validation_alias=_alias("total_amount", "totalAmount"))


class BillOut(BaseModel):
    id: int
    account_id: int
    patient_id: int
    doctor_name: str | None
    bill_date: date
    discount_total: Decimal
    sgst_total: Decimal
    cgst_total: Decimal
    total_amount: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}


class BillDetailOut(BillOut):
    patient: PatientOut


class SellingLogCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    bill_id: int = Field(validation_alias=_alias("bill_id", "billId"))
    medicine_id: int = Field(validation_alias=_alias("medicine_id", "medicineId"))
    batch_number: str = Field(min_length=1, max_length=100, validation_alias=_alias("batch_number", "batchNumber"))
    batch_id: int | None = Field(default=None, validation_alias=_alias("batch_id", "batchId", "medicineStockId"))
    quantity_sold: int = Field(gt=0, validation_alias=_alias("quantity_sold", "quantitySold", "quantity"))
    unit_price_inclusive_gst: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        validation_alias=_alias("unit_price_inclusive_gst", "unitPriceInclusiveGst", "price"),
    )
    discount_line: Decimal = Field(default=Decimal("0"), ge=0, validation_alias=_alias("discount_line", "discountLine"))


class SellingLogUpdate(BaseModel):
    quantity_sold: int | None = Field(
        default=None,
        gt=0,
        validation_alias=_alias("quantity_sold", "quantitySold", "quantity"),
    )
    unit_price_inclusive_gst: Decimal | None = Field(
        default=None,
        ge=0,
        validation_alias=_alias("unit_price_inclusive_gst", "unitPriceInclusiveGst", "price"),
    )
    discount_line: Decimal | None = Field(default=None, ge=0, validation_alias=_alias("discount_line", "discountLine"))


class SellingLogOut(BaseModel):
    id: int
    account_id: int
    bill_id: int
    medicine_id: int
    batch_number: str
    quantity_sold: int
    discount_line: Decimal
    unit_price_inclusive_gst: Decimal
    hsn_code: str
    expiry_date: date

    model_config = {"from_attributes": True}


class SaleResultOut(BaseModel):
    bill: BillOut
    stocks: list[BatchOut]
    logs: list[SellingLogOut]
