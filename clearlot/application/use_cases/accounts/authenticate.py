"""Use cases for signing accounts in."""

from enum import Enum, auto

from sqlalchemy.orm import Session

from clearlot.domain.entities import Account
from clearlot.infrastructure.repositories import AccountRepository
from clearlot.infrastructure.security import verify_password

ADMIN_UNKNOWN_EMAIL_MESSAGE = "找不到此電子郵件的帳戶"
ADMIN_WRONG_PASSWORD_MESSAGE = "密碼錯誤"
ADMIN_FORBIDDEN_MESSAGE = "您沒有管理員權限"

BLOCKED_ACCOUNT_STATUSES = frozenset({"inactive", "suspended"})


class AuthenticationStatus(Enum):
    """Possible outcomes when attempting to authenticate an account."""

    SUCCESS = auto()
    UNKNOWN_EMAIL = auto()
    WRONG_PASSWORD = auto()
    INACTIVE = auto()
    NOT_ADMIN = auto()


def authenticate_account(
    session: Session, email: str, password: str
) -> tuple[Account | None, AuthenticationStatus]:
    """Return the authentication result along with the account when possible."""

    account = AccountRepository(session).get_by_email(email)
    if account is None:
        return None, AuthenticationStatus.UNKNOWN_EMAIL
    if not verify_password(password, account.password):
        return None, AuthenticationStatus.WRONG_PASSWORD
    if account.status in BLOCKED_ACCOUNT_STATUSES:
        return account, AuthenticationStatus.INACTIVE
    return account, AuthenticationStatus.SUCCESS


def authenticate_admin(
    session: Session, email: str, password: str
) -> tuple[Account | None, AuthenticationStatus]:
    """Authenticate ``email`` and require the administrator flag.

    A valid non-admin account is reported as ``NOT_ADMIN`` and must not
    receive a token.
    """

    account, status = authenticate_account(session, email, password)
    if status is AuthenticationStatus.SUCCESS and account is not None and not account.is_admin:
        return account, AuthenticationStatus.NOT_ADMIN
    return account, status
