from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.schemas.account import (
    AccountOut,
    CompanyRegisterRequest,
    LoginRequest,
    RegisterResponse,
    TokenResponse,
)
from app.services import accounts

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/company/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register_company(payload: CompanyRegisterRequest, db: Session = Depends(get_db)):
    account, admin = accounts.register_company(db, payload)
    return RegisterResponse(
        account=AccountOut.model_validate(account),
        user_id=admin.id,
        username=admin.username,
    )


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    token = accounts.authenticate(db, payload.username, payload.password)
    return TokenResponse(access_token=token, token=token)


@router.post("/token", response_model=TokenResponse)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    token = accounts.authenticate(db, form_data.username, form_data.password)
    return TokenResponse(access_token=token, token=token)
