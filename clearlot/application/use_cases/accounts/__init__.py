"""Use cases for managing accounts."""

from .authenticate import (
    ADMIN_FORBIDDEN_MESSAGE,
    ADMIN_UNKNOWN_EMAIL_MESSAGE,
    ADMIN_WRONG_PASSWORD_MESSAGE,
    AuthenticationStatus,
    authenticate_account,
    authenticate_admin,
)
from .create_account import create_account
from .submit_verification_documents import submit_verification_documents

__all__ = [
    "ADMIN_FORBIDDEN_MESSAGE",
    "ADMIN_UNKNOWN_EMAIL_MESSAGE",
    "ADMIN_WRONG_PASSWORD_MESSAGE",
    "AuthenticationStatus",
    "authenticate_account",
    "authenticate_admin",
    "create_account",
    "submit_verification_documents",
]
