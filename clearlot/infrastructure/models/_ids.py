"""Identifier helpers shared by the ORM models."""

from uuid import uuid4


def generate_id() -> str:
    """Return an opaque identifier for a new document."""

    return uuid4().hex
