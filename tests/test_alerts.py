import asyncio
import threading
import time
from contextlib import suppress
from dataclasses import replace
from datetime import date, timedelta

import pytest
from sqlalchemy import select

from app.core.config import settings
from app.models import Batch, Medicine
from app.services import alerts, email_service
from tests.conftest import make_account, make_batch


class Outbox:
    def __init__(self, failing=()):
        self.sent = []
        self.failing = set(failing)

    def __call__(self, to_email, message):
        if to_email in self.failing:
            raise email_service.EmailDeliveryError(f"Mailbox unavailable: {to_email}")
        self.sent.append((to_email, message.subject, message.text))


def test_expired_batch_is_removed_and_reported(db, monkeypatch, account, medicine):
    outbox = Outbox()
    monkeypatch.setattr(email_service, "send_email", outbox)
    expired = make_batch(db, account, medicine, batch_number="OLD", expiry_date=date.today() - timedelta(days=1))
    fresh = make_batch(db, account, medicine, batch_number="NEW")
    expired_id, fresh_id = expired.id, fresh.id

    removed = alerts.remove_expired_batches(db)

    assert removed == {account.id: ["Paracetamol 500mg"]}
    assert db.get(Batch, expired_id) is None
    assert db.get(Batch, fresh_id) is not None
    assert len(outbox.sent) == 1
    to_email, subject, text = outbox.sent[0]
    assert to_email == account.contact_email
    assert subject == "Expired Medicines Removed"
    assert "1. Paracetamol 500mg" in text


def test_nothing_expired_sends_nothing(db, monkeypatch, account, medicine, batch):
    outbox = Outbox()
    monkeypatch.setattr(email_service, "send_email", outbox)

    assert alerts.remove_expired_batches(db) == {}
    assert outbox.sent == []


def test_batch_expiring_today_is_kept(db, monkeypatch, account, medicine):
    monkeypatch.setattr(email_service, "send_email", Outbox())
    make_batch(db, account, medicine, expiry_date=date.today())

    alerts.remove_expired_batches(db)

    assert db.scalar(select(Batch.id)) is not None


def test_low_stock_sums_batches_per_medicine(db, monkeypatch, medicine):
    outbox = Outbox()
    monkeypatch.setattr(email_service, "send_email", outbox)
    account = make_account(db, low_stock_threshold=10)
    other = Medicine(name="Zincovit", hsn="2106")
    db.add(other)
    db.commit()
    make_batch(db, account, medicine, batch_number="A", quantity=4)
    make_batch(db, account, medicine, batch_number="B", quantity=5)
    make_batch(db, account, other, batch_number="C", quantity=40)

    alerted = alerts.check_low_stock_threshold(db)

    assert alerted == {account.id: [("Paracetamol 500mg", 9)]}
    assert outbox.sent[0][1] == "Low-Stock Alert"
    assert "1. Paracetamol 500mg: 9" in outbox.sent[0][2]


def test_accounts_without_threshold_are_skipped(db, monkeypatch, account, medicine):
    outbox = Outbox()
    monkeypatch.setattr(email_service, "send_email", outbox)
    make_batch(db, account, medicine, quantity=1)

    assert alerts.check_low_stock_threshold(db) == {}
    assert outbox.sent == []


def test_email_failure_does_not_stop_other_accounts(db, monkeypatch, medicine):
    first = make_account(db, name="First", email="first@pharmacy.test", low_stock_threshold=5)
    second = make_account(db, name="Second", email="second@pharmacy.test", low_stock_threshold=5)
    outbox = Outbox(failing={"first@pharmacy.test"})
    monkeypatch.setattr(email_service, "send_email", outbox)
    make_batch(db, first, medicine, quantity=1)
    make_batch(db, second, medicine, quantity=2)

    alerted = alerts.check_low_stock_threshold(db)

    assert set(alerted) == {first.id, second.id}
    assert [to for to, _, _ in outbox.sent] == ["second@pharmacy.test"]


def test_full_scan_runs_both_sweeps(db, monkeypatch, medicine):
    outbox = Outbox()
    monkeypatch.setattr(email_service, "send_email", outbox)
    account = make_account(db, low_stock_threshold=20)
    make_batch(db, account, medicine, batch_number="OLD", quantity=30, expiry_date=date.today() - timedelta(days=3))
    make_batch(db, account, medicine, batch_number="NEW", quantity=6)

    alerts.run_alert_scan(db)

    assert [subject for _, subject, _ in outbox.sent] == ["Expired Medicines Removed", "Low-Stock Alert"]


def test_alert_email_renders_numbered_lines():
    message = email_service.build_low_stock_message(10, [("Dolo 650", 2), ("Zincovit", 7)])

    assert message.text.endswith("1. Dolo 650: 2\n2. Zincovit: 7\n")
    assert "<li>Dolo 650: 2</li>" in message.html


def test_unknown_provider_is_a_delivery_error(monkeypatch):
    monkeypatch.setattr(email_service, "settings", replace(settings, email_provider="pigeon"))

    with pytest.raises(email_service.EmailDeliveryError):
        email_service.send_email("x@pharmacy.test", email_service.build_expiry_removal_message(["Dolo 650"]))


def test_alert_worker_keeps_the_event_loop_free(monkeypatch, session_factory):
    from app import main as app_main

    started = threading.Event()

    def slow_scan(db):
        started.set()
        time.sleep(0.5)

    monkeypatch.setattr(app_main, "run_alert_scan", slow_scan)
    monkeypatch.setattr(app_main, "SessionLocal", session_factory)

    async def measure_sleep_during_scan():
        worker = asyncio.create_task(app_main._alert_worker())
        await asyncio.to_thread(started.wait, 2)
        loop = asyncio.get_running_loop()
        begin = loop.time()
        await asyncio.sleep(0.05)
        elapsed = loop.time() - begin
        worker.cancel()
        with suppress(asyncio.CancelledError):
            await worker
        return elapsed

    assert asyncio.run(measure_sleep_during_scan()) < 0.3


def test_alert_worker_survives_a_failing_scan(monkeypatch, session_factory):
    from app import main as app_main

    def broken_scan(db):
        raise RuntimeError("database went away")

    monkeypatch.setattr(app_main, "run_alert_scan", broken_scan)
    monkeypatch.setattr(app_main, "SessionLocal", session_factory)

    app_main._run_scan_once()
