"""
Base model classes.

Provides base SQLAlchemy declarative base.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base declarative model for all tables."""
