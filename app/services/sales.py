"""Sales: bills, selling logs and the batch decrements they carry.

Every function that touches a batch re-reads it ``FOR UPDATE`` inside the
caller's transaction, so two sales racing on one batch cannot both pass the
availability check.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.db.database import unit_of_work
from app.models.billing import Bill, Patient, SellingLog
from app.models.catalog import Medicine
from app.models.inventory import Batch
from app.schemas.billing import BillUpdate, SaleBillHeader, SaleEntry, SellingLogCreate, SellingLogUpdate
from app.services.catalog import get_medicine
from app.services.stock import decrement_batch, increment_batch, locate_sale_batch, quantize_price

logger = logging.getLogger(__name__)


@dataclass
class SaleResult:
    bill: Bill
    stocks: list[Batch] = field(default_factory=list)
    logs: list[SellingLog] = field(default_factory=list)


def _get_patient(db: Session, patient_id: int, account_id: int) -> Patient:
    patient = db.scalar(select(Patient).where(Patient.id == patient_id, Patient.account_id == account_id))
    if not patient:
        raise NotFoundError(f"Patient {patient_id} not found")
    return patient


def resolve_patient(db: Session, bill: SaleBillHeader, account_id: int) -> Patient:
    """Patient by id, else by exact name within the account, else a new one."""
    if bill.patient_id is not None:
        return _get_patient(db, bill.patient_id, account_id)
    if bill.patient is None or not bill.patient.name.strip():
        raise ValidationError("Patient information is required")

    name = bill.patient.name.strip()
    patient = db.scalar(
        select(Patient)
        .where(Patient.account_id == account_id, Patient.name == name)
        .order_by(Patient.id.asc())
        .limit(1)
    )
    if patient:
        return patient
    patient = Patient(account_id=account_id, name=name, phone=bill.patient.phone)
    db.add(patient)
    db.flush()
    logger.info("Created patient %s (%s) for account %s", patient.id, name, account_id)
    return patient


def _sell_from_batch(
    db: Session,
    *,
    bill_id: int,
    medicine: Medicine,
    batch: Batch,
    quantity: int,
    unit_price,
    discount_line,
    account_id: int,
) -> SellingLog:
    decrement_batch(batch, quantity)
    log = SellingLog(
        account_id=account_id,
        bill_id=bill_id,
        medicine_id=medicine.id,
        batch_number=batch.batch_number,
        quantity_sold=quantity,
        discount_line=quantize_price(discount_line),
        unit_price_inclusive_gst=quantize_price(unit_price),
        hsn_code=medicine.hsn or "",
        expiry_date=batch.expiry_date,
    )
    db.add(log)
    db.flush()
    return log


def create_sale(
    db: Session,
    bill: SaleBillHeader | None,
    entries: list[SaleEntry] | None,
    account_id: int,
) -> SaleResult:
    """Create a sale bill and decrement stock for each entry, in input order."""
    if bill is None:
        raise ValidationError("Payload must have { bill, entries } structure")
    if not entries:
        raise ValidationError("entries must be a non-empty array")

    with unit_of_work(db):
        patient = resolve_patient(db, bill, account_id)
        sale_bill = Bill(
            account_id=account_id,
            patient_id=patient.id,
            doctor_name=bill.doctor_name.strip() if bill.doctor_name else None,
            bill_date=bill.bill_date,
            discount_total=quantize_price(bill.discount_total),
            sgst_total=quantize_price(bill.sgst_total),
            cgst_total=quantize_price(bill.cgst_total),
            total_amount=quantize_price(bill.total_amount),
        )
        db.add(sale_bill)
        db.flush()

        result = SaleResult(bill=sale_bill)
        for entry in entries:
            medicine = get_medicine(db, entry.medicine_id)
            batch = locate_sale_batch(
                db,
                account_id=account_id,
                medicine_id=medicine.id,
                batch_number=entry.batch_number.strip(),
                batch_id=entry.batch_id,
            )
            log = _sell_from_batch(
                db,
                bill_id=sale_bill.id,
                medicine=medicine,
                batch=batch,
                quantity=entry.quantity,
                unit_price=entry.price,
                discount_line=entry.discount_line,
                account_id=account_id,
            )
            result.stocks.append(batch)
            result.logs.append(log)

    logger.info("Recorded bill %s for account %s with %d entries", sale_bill.id, account_id, len(result.logs))
    return result


def create_selling_log(db: Session, data: SellingLogCreate, account_id: int) -> SellingLog:
    """Sell one line against an existing bill."""
    with unit_of_work(db):
        bill = get_bill(db, data.bill_id, account_id)
        medicine = get_medicine(db, data.medicine_id)
        batch = locate_sale_batch(
            db,
            account_id=account_id,
            medicine_id=medicine.id,
            batch_number=data.batch_number.strip(),
            batch_id=data.batch_id,
        )
        log = _sell_from_batch(
            db,
            bill_id=bill.id,
            medicine=medicine,
            batch=batch,
            quantity=data.quantity_sold,
            unit_price=data.unit_price_inclusive_gst,
            discount_line=data.discount_line,
            account_id=account_id,
        )
    return log


def get_selling_log(db: Session, log_id: int, account_id: int) -> SellingLog:
    log = db.scalar(select(SellingLog).where(SellingLog.id == log_id, SellingLog.account_id == account_id))
    if not log:
        raise NotFoundError("Selling log not found")
    return log


def list_selling_logs(db: Session, account_id: int, bill_id: int | None = None) -> list[SellingLog]:
    query = select(SellingLog).where(SellingLog.account_id == account_id).order_by(SellingLog.id.asc())
    if bill_id is not None:
        query = query.where(SellingLog.bill_id == bill_id)
    return list(db.scalars(query).all())


def _batch_for_log(db: Session, log: SellingLog) -> Batch:
    return locate_sale_batch(
        db,
        account_id=log.account_id,
        medicine_id=log.medicine_id,
        batch_number=log.batch_number,
        expiry_date=log.expiry_date,
    )


def update_selling_log(db: Session, log_id: int, data: SellingLogUpdate, account_id: int) -> SellingLog:
    """Change a sold line, moving the quantity difference into or out of its batch."""
    with unit_of_work(db):
        log = get_selling_log(db, log_id, account_id)
        batch = _batch_for_log(db, log)

        if data.quantity_sold is not None:
            delta = data.quantity_sold - log.quantity_sold
            if delta > 0:
                decrement_batch(batch, delta)
            elif delta < 0:
                increment_batch(batch, -delta)
            log.quantity_sold = data.quantity_sold
            if delta:
                logger.info("Selling log %s quantity changed by %+d on batch %s", log.id, delta, batch.id)

        if data.unit_price_inclusive_gst is not None:
            log.unit_price_inclusive_gst = quantize_price(data.unit_price_inclusive_gst)
        if data.discount_line is not None:
            log.discount_line = quantize_price(data.discount_line)
        db.flush()
    return log


def delete_selling_log(db: Session, log_id: int, account_id: int) -> None:
    """Remove a sold line and return its quantity to the batch."""
    with unit_of_work(db):
        log = get_selling_log(db, log_id, account_id)
        batch = _batch_for_log(db, log)
        restored = log.quantity_sold
        increment_batch(batch, restored)
        db.delete(log)
    logger.info("Deleted selling log %s, restored %s units", log_id, restored)


def get_bill(db: Session, bill_id: int, account_id: int) -> Bill:
    bill = db.scalar(select(Bill).where(Bill.id == bill_id, Bill.account_id == account_id))
    if not bill:
        raise NotFoundError("Bill not found")
    return bill


def list_bills(db: Session, account_id: int) -> list[Bill]:
    return list(
        db.scalars(select(Bill).where(Bill.account_id == account_id).order_by(Bill.bill_date.desc(), Bill.id.desc())).all()
    )


def update_bill(db: Session, bill_id: int, data: BillUpdate, account_id: int) -> Bill:
    bill = get_bill(db, bill_id, account_id)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "patient_id" in changes:
        _get_patient(db, changes["patient_id"], account_id)
    for name in ("discount_total", "sgst_total", "cgst_total", "total_amount"):
        if name in changes:
            changes[name] = quantize_price(changes[name])
    for name, value in changes.items():
        setattr(bill, name, value)
    db.commit()
    db.refresh(bill)
    return bill


def delete_bill(db: Session, bill_id: int, account_id: int) -> None:
    bill = get_bill(db, bill_id, account_id)
    line_count = db.scalar(select(func.count(SellingLog.id)).where(SellingLog.bill_id == bill.id)) or 0
    if line_count:
        raise ConflictError("Bill still has selling logs; delete them first to restore stock")
    db.delete(bill)
    db.commit()
