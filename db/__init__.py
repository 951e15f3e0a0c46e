from .database import init_db, session_scope, create_session_factory, make_engine, engine, SessionLocal
from .models import Base, StoredRecord
from .history import HistoryStore

__all__ = [
    "init_db", "session_scope", "create_session_factory", "make_engine",
    "engine", "SessionLocal",
    "Base", "StoredRecord",
    "HistoryStore",
]
