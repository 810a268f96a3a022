"""Credential store module."""
from .base import CredentialStore
from .sqlalchemy import SqlAlchemyCredentialStore

__all__ = [
    "CredentialStore",
    "SqlAlchemyCredentialStore",
]
