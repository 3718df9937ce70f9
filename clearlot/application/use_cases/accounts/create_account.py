"""Use case for registering accounts."""

from sqlalchemy.orm import Session

from clearlot.domain.entities import Account
from clearlot.infrastructure.repositories import AccountRepository
from clearlot.infrastructure.security import get_password_hash


def create_account(
    session: Session,
    *,
    email: str,
    password: str,
    company: str,
    name: str | None = None,
    phone: str | None = None,
    is_admin: bool = False,
) -> Account:
    """Create an account with a hashed password.

    Raises:
        ValueError: If the e-mail is already registered or a field is empty.
    """

    normalized_email = email.strip().lower()
    if not normalized_email or "@" not in normalized_email:
        raise ValueError("A valid e-mail address is required")
    if not password:
        raise ValueError("Password is required")
    if not company.strip():
        raise ValueError("Company name is required")

    repository = AccountRepository(session)
    if repository.get_by_email(normalized_email) is not None:
        raise ValueError("An account with this e-mail already exists")

    return repository.create(
        Account(
            id=None,
            email=normalized_email,
            password=get_password_hash(password),
            company=company.strip(),
            name=name,
            phone=phone,
            is_admin=is_admin,
        )
    )
