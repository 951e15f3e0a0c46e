"""
Analysis history store.

Append-only, most-recent-first log of past analyses. The whole list is
persisted under one key after every mutation; persistence is best-effort and
never breaks the caller.
"""

import json
import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from config.settings import settings
from db.database import SessionLocal, session_scope
from db.models import StoredRecord
from models.exceptions import PersistenceError
from models.schemas import HistoryItem

logger = logging.getLogger(__name__)


class HistoryStore:

    def __init__(self, session_factory: sessionmaker = SessionLocal, key: str = settings.HISTORY_KEY):
        self._session_factory = session_factory
        self.key = key
        self._items: List[HistoryItem] = []

    @property
    def items(self) -> Tuple[HistoryItem, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def find(self, item_id: str) -> Optional[HistoryItem]:
        return next((i for i in self._items if i.id == item_id), None)

    def find_by_report(self, report: str) -> Optional[HistoryItem]:
        return next((i for i in self._items if i.report == report), None)

    # ─── Operations ───────────────────────────────────────────────────────

    def load(self) -> Tuple[HistoryItem, ...]:
        """Restore persisted history. Corrupt or unreadable data yields an empty list."""
        try:
            raw = self._read()
            self._items = self._deserialize(raw) if raw else []
        except (PersistenceError, ValueError, TypeError, KeyError) as e:
            logger.error(f"Failed to load history '{self.key}': {e}")
            self._items = []
        logger.info(f"Loaded {len(self._items)} history item(s)")
        return self.items

    def append(self, item: HistoryItem) -> None:
        self._items.insert(0, item)
        self._save()

    def clear(self) -> None:
        """Drop every entry. Callers are expected to confirm with the user first."""
        self._items = []
        self._save()

    # ─── Persistence ──────────────────────────────────────────────────────

    @staticmethod
    def _deserialize(raw: str) -> List[HistoryItem]:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise TypeError(f"expected a list, got {type(data).__name__}")
        return [HistoryItem.from_dict(d) for d in data]

    def _read(self) -> Optional[str]:
        try:
            with session_scope(self._session_factory) as db:
                record = db.get(StoredRecord, self.key)
                return record.value if record else None
        except SQLAlchemyError as e:
            raise PersistenceError(str(e)) from e

    def _save(self) -> None:
        payload = json.dumps([i.to_dict() for i in self._items], ensure_ascii=False)
        try:
            with session_scope(self._session_factory) as db:
                record = db.get(StoredRecord, self.key)
                if record is None:
                    db.add(StoredRecord(key=self.key, value=payload))
                else:
                    record.value = payload
        except SQLAlchemyError as e:
            logger.error(f"Failed to save history '{self.key}': {e}")
