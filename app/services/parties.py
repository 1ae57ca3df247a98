"""Providers, patients and customers: single-row CRUD without stock effects."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError
from app.models.billing import Customer, Patient, Provider
from app.schemas.parties import (
    CustomerCreate,
    CustomerUpdate,
    PatientCreate,
    PatientUpdate,
    ProviderCreate,
    ProviderUpdate,
)


def _apply(entity, changes: dict) -> None:
    for name, value in changes.items():
        setattr(entity, name, value.strip() if isinstance(value, str) else value)


def list_providers(db: Session, account_id: int) -> list[Provider]:
    return list(db.scalars(select(Provider).where(Provider.account_id == account_id).order_by(Provider.name)).all())


def get_provider(db: Session, provider_id: int, account_id: int) -> Provider:
    provider = db.scalar(select(Provider).where(Provider.id == provider_id, Provider.account_id == account_id))
    if not provider:
        raise NotFoundError("Provider not found")
    return provider


def create_provider(db: Session, payload: ProviderCreate, account_id: int) -> Provider:
    provider = Provider(account_id=account_id)
    _apply(provider, payload.model_dump())
    db.add(provider)
    db.commit()
    db.refresh(provider)
    return provider


def update_provider(db: Session, provider_id: int, payload: ProviderUpdate, account_id: int) -> Provider:
    provider = get_provider(db, provider_id, account_id)
    _apply(provider, payload.model_dump(exclude_unset=True, exclude_none=True))
    db.commit()
    db.refresh(provider)
    return provider


def delete_provider(db: Session, provider_id: int, account_id: int) -> None:
    db.delete(get_provider(db, provider_id, account_id))
    db.commit()


def list_patients(db: Session, account_id: int) -> list[Patient]:
    return list(db.scalars(select(Patient).where(Patient.account_id == account_id).order_by(Patient.name)).all())


def get_patient(db: Session, patient_id: int, account_id: int) -> Patient:
    patient = db.scalar(select(Patient).where(Patient.id == patient_id, Patient.account_id == account_id))
    if not patient:
        raise NotFoundError("Patient not found")
    return patient


def create_patient(db: Session, payload: PatientCreate, account_id: int) -> Patient:
    patient = Patient(account_id=account_id)
    _apply(patient, payload.model_dump())
    db.add(patient)
    db.commit()
    db.refresh(patient)
    return patient


def update_patient(db: Session, patient_id: int, payload: PatientUpdate, account_id: int) -> Patient:
    patient = get_patient(db, patient_id, account_id)
    _apply(patient, payload.model_dump(exclude_unset=True, exclude_none=True))
    db.commit()
    db.refresh(patient)
    return patient


def delete_patient(db: Session, patient_id: int, account_id: int) -> None:
    db.delete(get_patient(db, patient_id, account_id))
    db.commit()


def list_customers(db: Session) -> list[Customer]:
    return list(db.scalars(select(Customer).order_by(Customer.name)).all())


def get_customer(db: Session, customer_id: int) -> Customer:
    customer = db.get(Customer, customer_id)
    if not customer:
        raise NotFoundError("Customer not found")
    return customer


def _ensure_customer_name_free(db: Session, name: str, exclude_id: int | None = None) -> None:
    query = select(Customer.id).where(Customer.name == name)
    if exclude_id is not None:
        query = query.where(Customer.id != exclude_id)
    if db.scalar(query) is not None:
        raise ConflictError("Customer name must be unique")


def create_customer(db: Session, payload: CustomerCreate) -> Customer:
    _ensure_customer_name_free(db, payload.name.strip())
    customer = Customer()
    _apply(customer, payload.model_dump())
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


def update_customer(db: Session, customer_id: int, payload: CustomerUpdate) -> Customer:
    customer = get_customer(db, customer_id)
    if payload.name is not None:
        _ensure_customer_name_free(db, payload.name.strip(), exclude_id=customer_id)
    _apply(customer, payload.model_dump(exclude_unset=True, exclude_none=True))
    db.commit()
    db.refresh(customer)
    return customer


def delete_customer(db: Session, customer_id: int) -> None:
    db.delete(get_customer(db, customer_id))
    db.commit()
