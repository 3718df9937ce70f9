"""FastAPI dependency utilities."""

from collections.abc import Callable
from hashlib import sha256

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from clearlot.application.use_cases.accounts import ADMIN_FORBIDDEN_MESSAGE
from clearlot.application.use_cases.accounts.authenticate import BLOCKED_ACCOUNT_STATUSES
from clearlot.domain.entities import Account
from clearlot.infrastructure.database import SessionLocal, get_db
from clearlot.infrastructure.notifications import (
    NotificationEventBus,
    NotificationStore,
    NotificationTriggers,
)
from clearlot.infrastructure.repositories import AccountRepository
from clearlot.infrastructure.security import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")

_INVALID_CREDENTIALS = "Invalid credentials"


def _unauthorized(detail: str = _INVALID_CREDENTIALS) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def password_signature(account: Account) -> str:
    """Fingerprint embedded in tokens so password or status changes revoke them."""

    return sha256(f"{account.password}:{account.status}".encode()).hexdigest()


def resolve_current_account(token: str, db: Session) -> Account:
    """Resolve the authenticated account for the provided token."""

    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise _unauthorized() from exc

    email = payload.get("sub")
    signature = payload.get("pwd_sig")
    if not isinstance(email, str) or not isinstance(signature, str):
        raise _unauthorized()

    account = AccountRepository(db).get_by_email(email)
    if account is None:
        raise _unauthorized("Account not found")
    if signature != password_signature(account):
        raise _unauthorized()
    return account


def get_current_account(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Account:
    """Return the authenticated account from the provided token."""

    return resolve_current_account(token, db)


def get_current_active_account(
    current_account: Account = Depends(get_current_account),
) -> Account:
    """Ensure the authenticated account is allowed to use the platform."""

    if current_account.status in BLOCKED_ACCOUNT_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is not active",
        )
    return current_account


def require_admin(current_account: Account = Depends(get_current_active_account)) -> Account:
    """Ensure the authenticated account has administrator privileges."""

    if not current_account.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=ADMIN_FORBIDDEN_MESSAGE,
        )
    return current_account


def get_session_factory() -> Callable[[], Session]:
    """Return the factory used for work running outside the request session."""

    return SessionLocal


def get_notification_bus(request: Request) -> NotificationEventBus:
    return request.app.state.notification_bus


def get_notification_store(request: Request) -> NotificationStore:
    return request.app.state.notification_store


def get_notification_triggers(request: Request) -> NotificationTriggers:
    return request.app.state.notification_triggers


__all__ = [
    "get_current_account",
    "get_current_active_account",
    "get_notification_bus",
    "get_notification_store",
    "get_notification_triggers",
    "get_session_factory",
    "oauth2_scheme",
    "password_signature",
    "require_admin",
    "resolve_current_account",
]
