from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.deps import CurrentUser, require_app_admin
from app.core.errors import NotFoundError, ValidationError
from app.db.database import get_db
from app.schemas.billing import (
    BillDetailOut,
    BillOut,
    BillUpdate,
    SaleCreateRequest,
    SaleResultOut,
    SellingLogCreate,
    SellingLogOut,
    SellingLogUpdate,
)
from app.services import sales

router = APIRouter(tags=["Sales"])


@router.post("/bills", response_model=SaleResultOut, status_code=status.HTTP_201_CREATED)
def create_bill(
    payload: SaleCreateRequest,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    try:
        result = sales.create_sale(db, payload.bill, payload.entries, current_user.account_id)
    except NotFoundError as exc:
        raise ValidationError(exc.message) from exc
    return SaleResultOut.model_validate(result, from_attributes=True)


@router.get("/bills", response_model=list[BillOut])
def list_bills(
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return sales.list_bills(db, current_user.account_id)


@router.get("/bills/{bill_id}", response_model=BillDetailOut)
def get_bill(
    bill_id: int,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return sales.get_bill(db, bill_id, current_user.account_id)


@router.put("/bills/{bill_id}", response_model=BillOut)
def update_bill(
    bill_id: int,
    payload: BillUpdate,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return sales.update_bill(db, bill_id, payload, current_user.account_id)


@router.delete("/bills/{bill_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_bill(
    bill_id: int,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    sales.delete_bill(db, bill_id, current_user.account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/selling-logs", response_model=SellingLogOut, status_code=status.HTTP_201_CREATED)
def create_selling_log(
    payload: SellingLogCreate,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    try:
        return sales.create_selling_log(db, payload, current_user.account_id)
    except NotFoundError as exc:
        raise ValidationError(exc.message) from exc


@router.get("/selling-logs", response_model=list[SellingLogOut])
def list_selling_logs(
    bill_id: int | None = None,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return sales.list_selling_logs(db, current_user.account_id, bill_id)


@router.put("/selling-logs/{log_id}", response_model=SellingLogOut)
def update_selling_log(
    log_id: int,
    payload: SellingLogUpdate,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return sales.update_selling_log(db, log_id, payload, current_user.account_id)


@router.delete("/selling-logs/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_selling_log(
    log_id: int,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    sales.delete_selling_log(db, log_id, current_user.account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
