import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import AuthError, ConflictError, NotFoundError
from app.core.security import create_access_token, hash_password, verify_password
from app.db.database import unit_of_work
from app.models.account import Account, User, UserRole
from app.schemas.account import AccountUpdate, CompanyRegisterRequest, UserCreate, UserUpdate

logger = logging.getLogger(__name__)


def _ensure_username_free(db: Session, username: str) -> None:
    if db.scalar(select(User.id).where(User.username == username)) is not None:
        raise ConflictError("Username already exists")


def register_company(db: Session, payload: CompanyRegisterRequest) -> tuple[Account, User]:
    """Create an account together with its first account admin."""
    username = payload.admin_username.strip()
    _ensure_username_free(db, username)
    with unit_of_work(db):
        account = Account(
            name=payload.name.strip(),
            drug_license_number=payload.drug_license_number.strip(),
            address=payload.address.strip(),
            contact_email=payload.contact_email.strip().lower(),
            contact_phone=payload.contact_phone.strip(),
            low_stock_threshold=payload.low_stock_threshold,
            expiry_alert_lead_time=payload.expiry_alert_lead_time,
        )
        db.add(account)
        db.flush()
        admin = User(
            account_id=account.id,
            username=username,
            password_hash=hash_password(payload.admin_password),
            full_name=(payload.admin_full_name or username).strip(),
            email=account.contact_email,
            role=UserRole.ACCOUNT_ADMIN,
        )
        db.add(admin)
        db.flush()
    logger.info("Registered account %s with admin %s", account.id, username)
    return account, admin


def authenticate(db: Session, username: str, password: str) -> str:
    user = db.scalar(select(User).where(User.username == username.strip()))
    if not user or not verify_password(password, user.password_hash):
        raise AuthError("Invalid credentials")
    return create_access_token(user.id, user.account_id, user.role.value, user.username)


def get_account(db: Session, account_id: int) -> Account:
    account = db.get(Account, account_id)
    if not account:
        raise NotFoundError("Account not found")
    return account


def update_account(db: Session, account_id: int, payload: AccountUpdate) -> Account:
    account = get_account(db, account_id)
    for name, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(account, name, value.strip() if isinstance(value, str) else value)
    db.commit()
    db.refresh(account)
    return account


def list_users(db: Session, account_id: int) -> list[User]:
    return list(db.scalars(select(User).where(User.account_id == account_id).order_by(User.id.asc())).all())


def get_user(db: Session, user_id: int, account_id: int) -> User:
    user = db.scalar(select(User).where(User.id == user_id, User.account_id == account_id))
    if not user:
        raise NotFoundError("User not found")
    return user


def create_user(db: Session, payload: UserCreate, account_id: int) -> User:
    username = payload.username.strip()
    _ensure_username_free(db, username)
    user = User(
        account_id=account_id,
        username=username,
        password_hash=hash_password(payload.password),
        full_name=payload.full_name.strip(),
        email=payload.email.strip().lower(),
        role=payload.role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_user(db: Session, user_id: int, payload: UserUpdate, account_id: int) -> User:
    user = get_user(db, user_id, account_id)
    if payload.password is not None:
        user.password_hash = hash_password(payload.password)
    if payload.full_name is not None:
        user.full_name = payload.full_name.strip()
    if payload.email is not None:
        user.email = payload.email.strip().lower()
    if payload.role is not None:
        user.role = payload.role
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: int, account_id: int) -> None:
    user = get_user(db, user_id, account_id)
    db.delete(user)
    db.commit()
