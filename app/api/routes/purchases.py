from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.deps import CurrentUser, require_app_admin
from app.core.errors import NotFoundError, ValidationError
from app.db.database import get_db
from app.schemas.billing import (
    IncomingBillListOut,
    IncomingBillOut,
    IncomingBillUpdate,
    IncomingStockCreate,
    IncomingStockOut,
    PurchaseCreateRequest,
    PurchaseResultOut,
    StockIntakeOut,
)
from app.services import purchases

router = APIRouter(tags=["Purchases"])


@router.post("/incoming-bills", response_model=PurchaseResultOut, status_code=status.HTTP_201_CREATED)
def create_incoming_bill(
    payload: PurchaseCreateRequest,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    try:
        result = purchases.create_purchase(db, payload.bill, payload.entries, current_user.account_id)
    except NotFoundError as exc:
        raise ValidationError(exc.message) from exc
    return PurchaseResultOut.model_validate(result, from_attributes=True)


@router.get("/incoming-bills", response_model=IncomingBillListOut)
def list_incoming_bills(
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    bills = purchases.list_incoming_bills(db, current_user.account_id)
    return IncomingBillListOut(incomingBills=[IncomingBillOut.model_validate(bill) for bill in bills])


@router.get("/incoming-bills/search", response_model=list[IncomingBillOut])
def search_incoming_bills(
    q: str = "",
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return purchases.search_incoming_bills(db, q, current_user.account_id)


@router.get("/incoming-bills/{bill_id}", response_model=IncomingBillOut)
def get_incoming_bill(
    bill_id: int,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return purchases.get_incoming_bill(db, bill_id, current_user.account_id)


@router.put("/incoming-bills/{bill_id}", response_model=IncomingBillOut)
def update_incoming_bill(
    bill_id: int,
    payload: IncomingBillUpdate,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return purchases.update_incoming_bill(db, bill_id, payload, current_user.account_id)


@router.delete("/incoming-bills/{bill_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_incoming_bill(
    bill_id: int,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    purchases.delete_incoming_bill(db, bill_id, current_user.account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/incoming-stocks", response_model=StockIntakeOut, status_code=status.HTTP_201_CREATED)
def create_incoming_stock(
    payload: IncomingStockCreate,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    try:
        intake = purchases.add_or_update_stock(db, payload, current_user.account_id)
    except NotFoundError as exc:
        raise ValidationError(exc.message) from exc
    return StockIntakeOut.model_validate(intake, from_attributes=True)


@router.get("/incoming-stocks", response_model=list[IncomingStockOut])
def list_incoming_stocks(
    incoming_bill_id: int | None = None,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return purchases.list_incoming_stocks(db, current_user.account_id, incoming_bill_id)
