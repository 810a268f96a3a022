"""Database module."""
from .engine import Database

__all__ = [
    "Database",
]
