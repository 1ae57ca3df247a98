"""Daily stock sweeps: expired batch removal and low-stock notification.

A failed email for one account is logged and the sweep moves on to the next
account.
"""

import logging
from collections import defaultdict
from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.models.account import Account
from app.models.catalog import Medicine
from app.models.inventory import Batch
from app.services import email_service

logger = logging.getLogger(__name__)


def remove_expired_batches(db: Session, today: date | None = None) -> dict[int, list[str]]:
    """Delete batches that expired before ``today`` and email each owning account.

    Returns the removed medicine names keyed by account id.
    """
    today = today or date.today()
    rows = db.execute(
        select(Batch.account_id, Medicine.name)
        .join(Medicine, Medicine.id == Batch.medicine_id)
        .where(Batch.expiry_date < today)
        .order_by(Batch.account_id.asc(), Medicine.name.asc())
    ).all()
    removed: dict[int, list[str]] = defaultdict(list)
    for account_id, name in rows:
        if name not in removed[account_id]:
            removed[account_id].append(name)

    if not removed:
        return {}

    db.execute(delete(Batch).where(Batch.expiry_date < today))
    db.commit()

    for account_id, names in removed.items():
        account = db.get(Account, account_id)
        if not account:
            continue
        message = email_service.build_expiry_removal_message(names)
        try:
            email_service.send_email(account.contact_email, message)
        except email_service.EmailDeliveryError:
            logger.exception("Failed to send expiry removal email for account %s", account_id)
    logger.info("Removed expired batches for %d account(s)", len(removed))
    return dict(removed)


def low_stock_items(db: Session, account: Account) -> list[tuple[str, int]]:
    """Medicines whose quantity summed over all the account's batches is under its threshold."""
    threshold = account.low_stock_threshold
    rows = db.execute(
        select(Medicine.name, Batch.quantity_available)
        .join(Medicine, Medicine.id == Batch.medicine_id)
        .where(Batch.account_id == account.id)
    ).all()
    sums: dict[str, int] = {}
    for name, quantity in rows:
        sums[name] = sums.get(name, 0) + int(quantity)
    return sorted((name, qty) for name, qty in sums.items() if qty < threshold)


def check_low_stock_threshold(db: Session) -> dict[int, list[tuple[str, int]]]:
    alerted: dict[int, list[tuple[str, int]]] = {}
    accounts = db.scalars(select(Account).where(Account.low_stock_threshold > 0).order_by(Account.id.asc())).all()
    for account in accounts:
        items = low_stock_items(db, account)
        if not items:
            continue
        alerted[account.id] = items
        message = email_service.build_low_stock_message(account.low_stock_threshold, items)
        try:
            email_service.send_email(account.contact_email, message)
        except email_service.EmailDeliveryError:
            logger.exception("Failed to send low-stock email for account %s", account.id)
    return alerted


def run_alert_scan(db: Session, today: date | None = None) -> None:
    removed = remove_expired_batches(db, today)
    alerted = check_low_stock_threshold(db)
    logger.info(
        "Alert scan finished: %d account(s) had expired stock, %d account(s) low on stock",
        len(removed),
        len(alerted),
    )
