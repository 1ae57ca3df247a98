from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.deps import CurrentUser, require_app_admin
from app.db.database import get_db
from app.schemas.parties import (
    CustomerCreate,
    CustomerOut,
    CustomerUpdate,
    PatientCreate,
    PatientOut,
    PatientUpdate,
    ProviderCreate,
    ProviderOut,
    ProviderUpdate,
)
from app.services import parties

router = APIRouter(tags=["Parties"])


@router.get("/providers", response_model=list[ProviderOut])
def list_providers(
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return parties.list_providers(db, current_user.account_id)


@router.post("/providers", response_model=ProviderOut, status_code=status.HTTP_201_CREATED)
def create_provider(
    payload: ProviderCreate,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return parties.create_provider(db, payload, current_user.account_id)


@router.get("/providers/{provider_id}", response_model=ProviderOut)
def get_provider(
    provider_id: int,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return parties.get_provider(db, provider_id, current_user.account_id)


@router.put("/providers/{provider_id}", response_model=ProviderOut)
def update_provider(
    provider_id: int,
    payload: ProviderUpdate,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return parties.update_provider(db, provider_id, payload, current_user.account_id)


@router.delete("/providers/{provider_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_provider(
    provider_id: int,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    parties.delete_provider(db, provider_id, current_user.account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/patients", response_model=list[PatientOut])
def list_patients(
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return parties.list_patients(db, current_user.account_id)


@router.post("/patients", response_model=PatientOut, status_code=status.HTTP_201_CREATED)
def create_patient(
    payload: PatientCreate,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return parties.create_patient(db, payload, current_user.account_id)


@router.get("/patients/{patient_id}", response_model=PatientOut)
def get_patient(
    patient_id: int,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return parties.get_patient(db, patient_id, current_user.account_id)


@router.put("/patients/{patient_id}", response_model=PatientOut)
def update_patient(
    patient_id: int,
    payload: PatientUpdate,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return parties.update_patient(db, patient_id, payload, current_user.account_id)


@router.delete("/patients/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_patient(
    patient_id: int,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    parties.delete_patient(db, patient_id, current_user.account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/customers", response_model=list[CustomerOut])
def list_customers(
    _: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return parties.list_customers(db)


@router.post("/customers", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerCreate,
    _: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return parties.create_customer(db, payload)


@router.get("/customers/{customer_id}", response_model=CustomerOut)
def get_customer(
    customer_id: int,
    _: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return parties.get_customer(db, customer_id)


@router.put("/customers/{customer_id}", response_model=CustomerOut)
def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    _: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return parties.update_customer(db, customer_id, payload)


@router.delete("/customers/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    customer_id: int,
    _: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    parties.delete_customer(db, customer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
