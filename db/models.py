"""
SQLAlchemy ORM Models
Spyglass — Competitive Intelligence Briefings
"""

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import declarative_base
from datetime import datetime, timezone

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoredRecord(Base):
    """
    Keyed record holding one serialized document.

    The analysis history lives under a single key as a JSON list and is
    rewritten whole on every mutation.
    """
    __tablename__ = "stored_record"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)
