"""Database models for the progress tracker."""
from sqlalchemy import Column, String, Text

from vocabtrack.models.base import Base, TimestampMixin


class KeyValueEntry(Base, TimestampMixin):
    """One persisted value of the key-value namespace."""

    __tablename__ = "key_values"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)  # UTF-8 JSON document
