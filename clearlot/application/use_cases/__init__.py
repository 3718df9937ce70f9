"""Aggregate application use cases."""

from .accounts import authenticate_account, authenticate_admin, create_account

__all__ = [
    "authenticate_account",
    "authenticate_admin",
    "create_account",
]
