from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from app.core.errors import AuthError, ForbiddenError
from app.core.security import decode_token
from app.models.account import UserRole

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

INVALID_CREDENTIALS = "Invalid authentication credentials"


@dataclass(frozen=True)
class CurrentUser:
    user_id: int
    account_id: int
    role: UserRole


def get_current_user(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
) -> CurrentUser:
    raw_token = (token or "").strip()
    if not raw_token:
        auth_header = request.headers.get("authorization", "").strip()
        parts = auth_header.split(" ", 1)
        if len(parts) == 2 and parts[0].lower() == "bearer":
            raw_token = parts[1].strip()
    if not raw_token:
        raise AuthError(INVALID_CREDENTIALS)

    try:
        payload = decode_token(raw_token)
        user_id = int(payload["userId"])
        account_id = int(payload["accountId"])
        role = UserRole(payload["role"])
    except (JWTError, KeyError, TypeError, ValueError):
        raise AuthError(INVALID_CREDENTIALS) from None
    if payload.get("type") != "access":
        raise AuthError(INVALID_CREDENTIALS)
    return CurrentUser(user_id=user_id, account_id=account_id, role=role)


def require_role(role: UserRole):
    def checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role != role:
            raise ForbiddenError(f"Role required: {role.value}")
        return current_user

    return checker


require_app_admin = require_role(UserRole.APP_ADMIN)
require_account_admin = require_role(UserRole.ACCOUNT_ADMIN)
