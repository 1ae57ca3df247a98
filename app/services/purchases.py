"""Purchase intake: incoming bills, their audit lines and the batches they create."""

import logging
from dataclasses import dataclass, field

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.db.database import unit_of_work
from app.models.billing import IncomingBill, IncomingStock, Provider
from app.models.catalog import Medicine
from app.models.inventory import Batch
from app.schemas.billing import IncomingBillUpdate, IncomingStockCreate, PurchaseBillHeader, PurchaseEntry
from app.services.catalog import find_or_create_medicine, get_medicine
from app.services.stock import quantize_price, merge_or_create_batch, require_fields

logger = logging.getLogger(__name__)


@dataclass
class PurchaseResult:
    bill: IncomingBill
    stocks: list[Batch] = field(default_factory=list)
    logs: list[IncomingStock] = field(default_factory=list)


@dataclass
class StockIntake:
    stock: Batch
    log: IncomingStock
    merged: bool


def _get_provider(db: Session, provider_id: int, account_id: int) -> Provider:
    provider = db.scalar(select(Provider).where(Provider.id == provider_id, Provider.account_id == account_id))
    if not provider:
        raise NotFoundError(f"Provider {provider_id} not found")
    return provider


def _resolve_medicine(db: Session, entry: PurchaseEntry) -> Medicine:
    if entry.medicine_id is not None:
        return get_medicine(db, entry.medicine_id)
    if entry.name:
        return find_or_create_medicine(db, entry.name, entry.hsn)
    raise ValidationError("Each entry needs a medicineId or a medicine name")


def create_purchase(
    db: Session,
    bill: PurchaseBillHeader | None,
    entries: list[PurchaseEntry] | None,
    account_id: int,
) -> PurchaseResult:
    """Record an incoming bill with all of its lines as one transaction.

    Every entry gets its own new batch row, even when an identical batch
    already exists; merging by key only happens on the standalone intake path
    (:func:`add_or_update_stock`).
    """
    if bill is None:
        raise ValidationError("Payload must have { bill, entries } structure")
    if not entries:
        raise ValidationError("entries must be a non-empty array")

    with unit_of_work(db):
        provider = _get_provider(db, bill.provider_id, account_id)
        incoming_bill = IncomingBill(
            account_id=account_id,
            provider_id=provider.id,
            invoice_number=bill.invoice_number.strip(),
            invoice_date=bill.invoice_date,
            payment_status=bill.payment_status,
            discount_total=quantize_price(bill.discount_total),
            sgst_total=quantize_price(bill.sgst_total),
            cgst_total=quantize_price(bill.cgst_total),
            total_amount=quantize_price(bill.total_amount),
        )
        db.add(incoming_bill)
        db.flush()

        result = PurchaseResult(bill=incoming_bill)
        for entry in entries:
            medicine = _resolve_medicine(db, entry)
            batch = Batch(
                account_id=account_id,
                medicine_id=medicine.id,
                batch_number=entry.batch_number.strip(),
                incoming_date=entry.incoming_date,
                expiry_date=entry.expiry_date,
                units_per_pack=entry.units_per_pack,
                quantity_available=entry.quantity,
                price=quantize_price(entry.unit_cost),
            )
            db.add(batch)
            log = IncomingStock(
                account_id=account_id,
                incoming_bill_id=incoming_bill.id,
                medicine_id=medicine.id,
                batch_number=batch.batch_number,
                incoming_date=entry.incoming_date,
                quantity_received=entry.quantity,
                unit_cost=quantize_price(entry.unit_cost),
                discount_line=quantize_price(entry.discount_line),
                free_quantity=entry.free_quantity,
                expiry_date=entry.expiry_date,
            )
            db.add(log)
            db.flush()
            result.stocks.append(batch)
            result.logs.append(log)

    logger.info(
        "Recorded incoming bill %s for account %s with %d entries",
        incoming_bill.id,
        account_id,
        len(result.logs),
    )
    return result


def add_or_update_stock(db: Session, data: IncomingStockCreate, account_id: int) -> StockIntake:
    """Receive one purchase line, merging into an existing batch with the same key."""
    require_fields(
        {
            "medicineId": data.medicine_id,
            "batchNumber": data.batch_number,
            "incomingDate": data.incoming_date,
            "expiryDate": data.expiry_date,
            "quantityReceived": data.quantity_received,
            "incomingBillId": data.incoming_bill_id,
        }
    )

    with unit_of_work(db):
        get_incoming_bill(db, data.incoming_bill_id, account_id)
        get_medicine(db, data.medicine_id)
        batch_number = data.batch_number.strip()
        batch, merged = merge_or_create_batch(
            db,
            account_id=account_id,
            medicine_id=data.medicine_id,
            batch_number=batch_number,
            incoming_date=data.incoming_date,
            expiry_date=data.expiry_date,
            quantity=data.quantity_received,
            price=data.unit_cost,
            units_per_pack=data.units_per_pack,
        )
        log = IncomingStock(
            account_id=account_id,
            incoming_bill_id=data.incoming_bill_id,
            medicine_id=data.medicine_id,
            batch_number=batch_number,
            incoming_date=data.incoming_date,
            quantity_received=data.quantity_received,
            unit_cost=quantize_price(data.unit_cost),
            discount_line=quantize_price(data.discount_line),
            free_quantity=data.free_quantity,
            expiry_date=data.expiry_date,
        )
        db.add(log)
        db.flush()

    logger.info("Incoming stock for batch %s (%s) merged=%s", batch.id, batch_number, merged)
    return StockIntake(stock=batch, log=log, merged=merged)


def list_incoming_stocks(db: Session, account_id: int, incoming_bill_id: int | None = None) -> list[IncomingStock]:
    query = select(IncomingStock).where(IncomingStock.account_id == account_id).order_by(IncomingStock.id.asc())
    if incoming_bill_id is not None:
        query = query.where(IncomingStock.incoming_bill_id == incoming_bill_id)
    return list(db.scalars(query).all())


def get_incoming_bill(db: Session, bill_id: int, account_id: int) -> IncomingBill:
    bill = db.scalar(select(IncomingBill).where(IncomingBill.id == bill_id, IncomingBill.account_id == account_id))
    if not bill:
        raise NotFoundError("Incoming bill not found")
    return bill


def list_incoming_bills(db: Session, account_id: int) -> list[IncomingBill]:
    return list(
        db.scalars(
            select(IncomingBill)
            .where(IncomingBill.account_id == account_id)
            .order_by(IncomingBill.invoice_date.desc(), IncomingBill.id.desc())
        ).all()
    )


def search_incoming_bills(db: Session, q: str, account_id: int) -> list[IncomingBill]:
    query = (
        select(IncomingBill)
        .where(IncomingBill.account_id == account_id)
        .order_by(IncomingBill.invoice_date.desc(), IncomingBill.id.desc())
    )
    if q:
        query = query.where(func.lower(IncomingBill.invoice_number).like(f"{q.strip().lower()}%"))
    return list(db.scalars(query).all())


def update_incoming_bill(db: Session, bill_id: int, data: IncomingBillUpdate, account_id: int) -> IncomingBill:
    """Update header fields only; received batches are left as they are."""
    bill = get_incoming_bill(db, bill_id, account_id)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "provider_id" in changes:
        _get_provider(db, changes["provider_id"], account_id)
    if "invoice_number" in changes:
        changes["invoice_number"] = changes["invoice_number"].strip()
    for name in ("discount_total", "sgst_total", "cgst_total", "total_amount"):
        if name in changes:
            changes[name] = quantize_price(changes[name])
    for name, value in changes.items():
        setattr(bill, name, value)
    db.commit()
    db.refresh(bill)
    return bill


def delete_incoming_bill(db: Session, bill_id: int, account_id: int) -> None:
    """Delete the header and its audit lines.

    Batch quantities received through this bill are not reversed.
    """
    with unit_of_work(db):
        bill = get_incoming_bill(db, bill_id, account_id)
        db.execute(delete(IncomingStock).where(IncomingStock.incoming_bill_id == bill.id))
        db.delete(bill)
    logger.info("Deleted incoming bill %s for account %s", bill_id, account_id)
