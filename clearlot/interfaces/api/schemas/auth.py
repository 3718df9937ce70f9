"""Authentication related schemas."""

from pydantic import BaseModel


class Token(BaseModel):
    access_token: str
    token_type: str
    is_admin: bool


__all__ = ["Token"]
