"""Engine, session factory and declarative base of the record database."""
from datetime import UTC, datetime
from typing import Optional

from sqlalchemy import Column, DateTime, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from vocabtrack.config import settings

engine = create_engine(settings.database.url, echo=settings.database.echo)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TimestampMixin:
    """Creation and last-write times of a stored row."""
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


def init_db(bind: Optional[Engine] = None) -> None:
    """Create the key-value table on ``bind``, or on the configured engine."""
    # Importing the models registers their tables on Base.metadata
    from vocabtrack.models import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
