"""Endpoints related to authentication."""

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from clearlot.application.use_cases.accounts import (
    ADMIN_FORBIDDEN_MESSAGE,
    ADMIN_UNKNOWN_EMAIL_MESSAGE,
    ADMIN_WRONG_PASSWORD_MESSAGE,
    AuthenticationStatus,
    authenticate_account,
    authenticate_admin,
)
from clearlot.config import get_settings
from clearlot.domain.entities import Account
from clearlot.infrastructure.database import get_db
from clearlot.infrastructure.security import create_access_token
from clearlot.interfaces.api.dependencies import password_signature
from clearlot.interfaces.api.schemas import Token

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def _issue_token(account: Account) -> dict:
    settings = get_settings()
    access_token = create_access_token(
        data={
            "sub": account.email,
            "uid": account.id,
            "adm": account.is_admin,
            "pwd_sig": password_signature(account),
        },
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )
    return {"access_token": access_token, "token_type": "bearer", "is_admin": account.is_admin}


# The signature expected by OAuth2PasswordRequestForm is kept.
@router.post("/token", response_model=Token)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    """Authenticate an account by e-mail and return a JWT."""

    account, auth_status = authenticate_account(db, form_data.username, form_data.password)

    if auth_status in {AuthenticationStatus.UNKNOWN_EMAIL, AuthenticationStatus.WRONG_PASSWORD}:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect e-mail or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if auth_status is AuthenticationStatus.INACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is not active",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _issue_token(account)


@router.post("/admin/token", response_model=Token)
def admin_login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    """Authenticate an administrator; other accounts never receive a token."""

    account, auth_status = authenticate_admin(db, form_data.username, form_data.password)

    if auth_status is AuthenticationStatus.UNKNOWN_EMAIL:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ADMIN_UNKNOWN_EMAIL_MESSAGE,
            headers={"WWW-Authenticate": "Bearer"},
        )
    if auth_status is AuthenticationStatus.WRONG_PASSWORD:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ADMIN_WRONG_PASSWORD_MESSAGE,
            headers={"WWW-Authenticate": "Bearer"},
        )
    if auth_status in {AuthenticationStatus.NOT_ADMIN, AuthenticationStatus.INACTIVE}:
        logger.warning("Rejected admin sign-in for %s", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=ADMIN_FORBIDDEN_MESSAGE,
        )
    return _issue_token(account)
