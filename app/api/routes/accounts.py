from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.deps import CurrentUser, get_current_user, require_account_admin
from app.db.database import get_db
from app.schemas.account import AccountOut, AccountUpdate, UserCreate, UserOut, UserUpdate
from app.services import accounts

router = APIRouter(tags=["Accounts"])


@router.get("/accounts/me", response_model=AccountOut)
def get_my_account(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return accounts.get_account(db, current_user.account_id)


@router.put("/accounts/me", response_model=AccountOut)
def update_my_account(
    payload: AccountUpdate,
    current_user: CurrentUser = Depends(require_account_admin),
    db: Session = Depends(get_db),
):
    return accounts.update_account(db, current_user.account_id, payload)


@router.get("/users", response_model=list[UserOut])
def list_users(
    current_user: CurrentUser = Depends(require_account_admin),
    db: Session = Depends(get_db),
):
    return accounts.list_users(db, current_user.account_id)


@router.post("/users", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    current_user: CurrentUser = Depends(require_account_admin),
    db: Session = Depends(get_db),
):
    return accounts.create_user(db, payload, current_user.account_id)


@router.get("/users/{user_id}", response_model=UserOut)
def get_user(
    user_id: int,
    current_user: CurrentUser = Depends(require_account_admin),
    db: Session = Depends(get_db),
):
    return accounts.get_user(db, user_id, current_user.account_id)


@router.put("/users/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    payload: UserUpdate,
    current_user: CurrentUser = Depends(require_account_admin),
    db: Session = Depends(get_db),
):
    return accounts.update_user(db, user_id, payload, current_user.account_id)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    current_user: CurrentUser = Depends(require_account_admin),
    db: Session = Depends(get_db),
):
    accounts.delete_user(db, user_id, current_user.account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
