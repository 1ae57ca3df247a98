import logging
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.errors import InsufficientStockError, NotFoundError, ValidationError
from app.models.account import Account
from app.models.catalog import Medicine
from app.models.inventory import Batch
from app.schemas.catalog import BatchCreate, BatchSearchOut, BatchUpdate
from app.services.catalog import get_medicine

logger = logging.getLogger(__name__)

DEFAULT_LOW_STOCK_THRESHOLD = 10


def quantize_price(value: Decimal) -> Decimal:
    return Decimal(value).quantize(Decimal("0.01"))


def require_fields(fields: dict[str, object]) -> None:
    missing = [
        name
        for name, value in fields.items()
        if value is None or (isinstance(value, str) and not value.strip())
    ]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")


def lock_medicine(db: Session, medicine_id: int) -> None:
    locked = db.scalar(select(Medicine.id).where(Medicine.id == medicine_id).with_for_update())
    if locked is None:
        raise NotFoundError(f"Medicine {medicine_id} not found")


def find_batch_by_merge_key(
    db: Session,
    *,
    account_id: int,
    medicine_id: int,
    batch_number: str,
    incoming_date: date,
    expiry_date: date,
) -> Batch | None:
    return db.scalar(
        select(Batch)
        .where(
            Batch.account_id == account_id,
            Batch.medicine_id == medicine_id,
            Batch.batch_number == batch_number,
            Batch.incoming_date == incoming_date,
            Batch.expiry_date == expiry_date,
        )
        .order_by(Batch.id.asc())
        .with_for_update()
    )


def merge_or_create_batch(
    db: Session,
    *,
    account_id: int,
    medicine_id: int,
    batch_number: str,
    incoming_date: date,
    expiry_date: date,
    quantity: int,
    price: Decimal,
    units_per_pack: int | None = None,
) -> tuple[Batch, bool]:
    """Add quantity to the batch with the same merge key, or insert a new one.

    Returns the batch and whether an existing row was merged into.
    Does not commit.
    """
    # A FOR UPDATE lookup locks nothing while the batch row does not exist yet;
    # the medicine row lock serializes concurrent intakes for the same key.
    lock_medicine(db, medicine_id)
    existing = find_batch_by_merge_key(
        db,
        account_id=account_id,
        medicine_id=medicine_id,
        batch_number=batch_number,
        incoming_date=incoming_date,
        expiry_date=expiry_date,
    )
    if existing:
        existing.quantity_available += quantity
        existing.price = quantize_price(price)
        existing.incoming_date = incoming_date
        existing.expiry_date = expiry_date
        if units_per_pack is not None:
            existing.units_per_pack = units_per_pack
        db.flush()
        logger.debug("Merged %s units into batch %s", quantity, existing.id)
        return existing, True

    batch = Batch(
        account_id=account_id,
        medicine_id=medicine_id,
        batch_number=batch_number,
        incoming_date=incoming_date,
        expiry_date=expiry_date,
        units_per_pack=units_per_pack,
        quantity_available=quantity,
        price=quantize_price(price),
    )
    db.add(batch)
    db.flush()
    return batch, False


def locate_sale_batch(
    db: Session,
    *,
    account_id: int,
    medicine_id: int,
    batch_number: str,
    batch_id: int | None = None,
    expiry_date: date | None = None,
) -> Batch:
    """Lock and return the batch a sale line draws from.

    Several purchase entries can share a batch number; the earliest expiry
    wins unless an explicit batch id is supplied. A known expiry date (from a
    selling log) is preferred over the earliest one when it still matches.
    """
    query = select(Batch).where(
        Batch.account_id == account_id,
        Batch.medicine_id == medicine_id,
        Batch.batch_number == batch_number,
    )
    if batch_id is not None:
        query = query.where(Batch.id == batch_id)
    query = query.order_by(Batch.expiry_date.asc(), Batch.id.asc()).limit(1).with_for_update()
    batch = None
    if expiry_date is not None:
        batch = db.scalar(query.where(Batch.expiry_date == expiry_date))
    if batch is None:
        batch = db.scalar(query)
    if not batch:
        raise NotFoundError(f"Batch {batch_number} not found for medicine {medicine_id}")
    return batch


def decrement_batch(batch: Batch, quantity: int) -> None:
    if quantity > batch.quantity_available:
        raise InsufficientStockError(quantity, batch.quantity_available, batch.batch_number)
    batch.quantity_available -= quantity


def increment_batch(batch: Batch, quantity: int) -> None:
    batch.quantity_available += quantity


def get_batch(db: Session, batch_id: int, account_id: int) -> Batch:
    batch = db.scalar(select(Batch).where(Batch.id == batch_id, Batch.account_id == account_id))
    if not batch:
        raise NotFoundError("Medicine stock not found")
    return batch


def list_batches(db: Session, account_id: int, medicine_id: int | None = None) -> list[Batch]:
    query = select(Batch).where(Batch.account_id == account_id).order_by(Batch.expiry_date.asc(), Batch.id.asc())
    if medicine_id is not None:
        query = query.where(Batch.medicine_id == medicine_id)
    return list(db.scalars(query).all())


def create_batch(db: Session, payload: BatchCreate, account_id: int) -> Batch:
    require_fields(
        {
            "medicineId": payload.medicine_id,
            "batchNumber": payload.batch_number,
            "incomingDate": payload.incoming_date,
            "expiryDate": payload.expiry_date,
            "quantityAvailable": payload.quantity,
        }
    )
    get_medicine(db, payload.medicine_id)
    batch, _ = merge_or_create_batch(
        db,
        account_id=account_id,
        medicine_id=payload.medicine_id,
        batch_number=payload.batch_number.strip(),
        incoming_date=payload.incoming_date,
        expiry_date=payload.expiry_date,
        quantity=payload.quantity,
        price=payload.price,
        units_per_pack=payload.units_per_pack,
    )
    db.commit()
    db.refresh(batch)
    return batch


def update_batch(db: Session, batch_id: int, payload: BatchUpdate, account_id: int) -> Batch:
    batch = get_batch(db, batch_id, account_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "price" in changes:
        changes["price"] = quantize_price(changes["price"])
    for field, value in changes.items():
        setattr(batch, field, value)
    db.commit()
    db.refresh(batch)
    return batch


def delete_batch(db: Session, batch_id: int, account_id: int) -> None:
    batch = get_batch(db, batch_id, account_id)
    db.delete(batch)
    db.commit()


def search_batches(db: Session, prefix: str, account_id: int, limit: int | None = None) -> list[BatchSearchOut]:
    """In-stock batches whose medicine name starts with ``prefix``, soonest expiry first."""
    query = (
        select(Batch, Medicine.name)
        .join(Medicine, Medicine.id == Batch.medicine_id)
        .where(
            Batch.account_id == account_id,
            Batch.quantity_available > 0,
            func.lower(Medicine.name).like(f"{prefix.lower()}%"),
        )
        .order_by(Batch.expiry_date.asc(), Batch.id.asc())
    )
    if limit:
        query = query.limit(limit)
    return [
        BatchSearchOut(
            id=batch.id,
            medicine_id=batch.medicine_id,
            medicine_name=name,
            batch_number=batch.batch_number,
            incoming_date=batch.incoming_date,
            expiry_date=batch.expiry_date,
            units_per_pack=batch.units_per_pack,
            quantity_available=batch.quantity_available,
            price=batch.price,
        )
        for batch, name in db.execute(query).all()
    ]


def count_low_stock_batches(db: Session, account_id: int) -> int:
    account = db.get(Account, account_id)
    threshold = (account.low_stock_threshold if account else 0) or DEFAULT_LOW_STOCK_THRESHOLD
    return int(
        db.scalar(
            select(func.count(Batch.id)).where(
                Batch.account_id == account_id,
                Batch.quantity_available <= threshold,
            )
        )
        or 0
    )


def count_expiring_soon(db: Session, account_id: int, today: date | None = None) -> int:
    account = db.get(Account, account_id)
    lead_days = (account.expiry_alert_lead_time if account else 0) or 30
    cutoff = (today or date.today()) + timedelta(days=lead_days)
    return int(
        db.scalar(
            select(func.count(Batch.id)).where(
                Batch.account_id == account_id,
                Batch.expiry_date <= cutoff,
                Batch.quantity_available > 0,
            )
        )
        or 0
    )
