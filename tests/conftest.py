"""
Pytest configuration and shared fixtures for the pharmacy API tests.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ALERTS_ENABLED"] = "false"
os.environ["EMAIL_PROVIDER"] = "console"
os.environ["SECRET_KEY"] = "test-secret-key-for-the-pharmacy-suite-0123456789"

from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.security import create_access_token
from app.db.database import Base, get_db
from app.main import app as fastapi_app
from app.models import Account, Batch, Medicine, Patient, Provider, UserRole


@pytest.fixture
def engine():
    """A fresh in-memory database for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    with TestClient(fastapi_app) as test_client:
        yield test_client
    fastapi_app.dependency_overrides.clear()


def make_account(db, name="Green Cross Pharmacy", email="owner@greencross.test", low_stock_threshold=0):
    account = Account(
        name=name,
        drug_license_number="DL-20-1001",
        address="12 Market Road",
        contact_email=email,
        contact_phone="9800000001",
        low_stock_threshold=low_stock_threshold,
    )
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


def make_batch(db, account, medicine, batch_number="B1", quantity=10, expiry_date=None, incoming_date=None):
    batch = Batch(
        account_id=account.id,
        medicine_id=medicine.id,
        batch_number=batch_number,
        incoming_date=incoming_date or date(2026, 1, 1),
        expiry_date=expiry_date or date.today() + timedelta(days=365),
        quantity_available=quantity,
        price=Decimal("12.50"),
    )
    db.add(batch)
    db.commit()
    db.refresh(batch)
    return batch


def auth_headers(account_id, role=UserRole.APP_ADMIN, user_id=1):
    token = create_access_token(user_id, account_id, role.value, "tester")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def account(db):
    return make_account(db)


@pytest.fixture
def provider(db, account):
    provider = Provider(account_id=account.id, name="Sun Distributors")
    db.add(provider)
    db.commit()
    db.refresh(provider)
    return provider


@pytest.fixture
def patient(db, account):
    patient = Patient(account_id=account.id, name="Asha Rao", phone="9811111111")
    db.add(patient)
    db.commit()
    db.refresh(patient)
    return patient


@pytest.fixture
def medicine(db):
    medicine = Medicine(name="Paracetamol 500mg", hsn="3004")
    db.add(medicine)
    db.commit()
    db.refresh(medicine)
    return medicine


@pytest.fixture
def batch(db, account, medicine):
    return make_batch(db, account, medicine)


@pytest.fixture
def headers(account):
    return auth_headers(account.id)


@pytest.fixture
def admin_headers(account):
    return auth_headers(account.id, role=UserRole.ACCOUNT_ADMIN)
