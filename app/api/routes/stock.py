from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.api.deps import CurrentUser, require_app_admin
from app.core.errors import NotFoundError, ValidationError
from app.db.database import get_db
from app.schemas.catalog import BatchCreate, BatchOut, BatchSearchOut, BatchUpdate, StockSummaryOut
from app.services import stock

router = APIRouter(prefix="/medicine-stocks", tags=["Stock"])


@router.post("", response_model=BatchOut, status_code=status.HTTP_201_CREATED)
def create_medicine_stock(
    payload: BatchCreate,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    try:
        return stock.create_batch(db, payload, current_user.account_id)
    except NotFoundError as exc:
        raise ValidationError(exc.message) from exc


@router.get("", response_model=list[BatchOut])
def list_medicine_stocks(
    medicine_id: int | None = None,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return stock.list_batches(db, current_user.account_id, medicine_id)


@router.get("/search", response_model=list[BatchSearchOut])
def search_medicine_stocks(
    q: str = "",
    limit: int | None = Query(default=None, ge=1, le=200),
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return stock.search_batches(db, q, current_user.account_id, limit)


@router.get("/summary", response_model=StockSummaryOut)
def stock_summary(
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return StockSummaryOut(
        low_stock_count=stock.count_low_stock_batches(db, current_user.account_id),
        expiring_soon_count=stock.count_expiring_soon(db, current_user.account_id),
    )


@router.get("/{batch_id}", response_model=BatchOut)
def get_medicine_stock(
    batch_id: int,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return stock.get_batch(db, batch_id, current_user.account_id)


@router.put("/{batch_id}", response_model=BatchOut)
def update_medicine_stock(
    batch_id: int,
    payload: BatchUpdate,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    return stock.update_batch(db, batch_id, payload, current_user.account_id)


@router.delete("/{batch_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_medicine_stock(
    batch_id: int,
    current_user: CurrentUser = Depends(require_app_admin),
    db: Session = Depends(get_db),
):
    stock.delete_batch(db, batch_id, current_user.account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
