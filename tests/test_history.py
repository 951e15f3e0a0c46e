"""
History store persistence.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json

import pytest
from sqlalchemy.orm import sessionmaker

from db.database import make_engine, session_scope
from db.history import HistoryStore
from db.models import StoredRecord
from models.schemas import HistoryItem


def _write_raw(session_factory, value, key="spyglass-history"):
    with session_scope(session_factory) as db:
        db.add(StoredRecord(key=key, value=value))


class TestHistoryStore:
    def test_starts_empty(self, history):
        assert history.items == ()
        assert len(history) == 0

    def test_append_is_most_recent_first(self, history):
        first = HistoryItem.new(["Acme"], "## A\nx")
        second = HistoryItem.new(["Globex"], "## B\ny")
        history.append(first)
        history.append(second)
        assert [i.id for i in history.items] == [second.id, first.id]

    def test_survives_reload(self, history, session_factory):
        item = HistoryItem.new(["Acme", "Globex"], "## Relatório\nçãõ")
        history.append(item)

        reloaded = HistoryStore(session_factory)
        reloaded.load()
        assert reloaded.items == (item,)

    def test_clear_is_persisted(self, history, session_factory):
        history.append(HistoryItem.new(["Acme"], "## A\nx"))
        history.clear()

        reloaded = HistoryStore(session_factory)
        reloaded.load()
        assert len(reloaded) == 0

    def test_find(self, history):
        item = HistoryItem.new(["Acme"], "## A\nx")
        history.append(item)
        assert history.find(item.id) == item
        assert history.find_by_report("## A\nx") == item
        assert history.find("missing") is None

    def test_items_is_a_snapshot(self, history):
        snapshot = history.items
        history.append(HistoryItem.new(["Acme"], "## A\nx"))
        assert snapshot == ()


class TestCorruptHistory:
    @pytest.mark.parametrize("raw", [
        "não é json",
        json.dumps({"id": "x"}),
        json.dumps([{"id": "x"}]),
        json.dumps([{"id": "x", "competitors": "Acme", "report": "r", "date": "d"}]),
    ])
    def test_corrupt_data_yields_empty(self, session_factory, raw):
        _write_raw(session_factory, raw)
        store = HistoryStore(session_factory)
        assert store.load() == ()

    def test_corrupt_data_is_overwritten_on_next_save(self, session_factory):
        _write_raw(session_factory, "{{{")
        store = HistoryStore(session_factory)
        store.load()
        item = HistoryItem.new(["Acme"], "## A\nx")
        store.append(item)

        reloaded = HistoryStore(session_factory)
        reloaded.load()
        assert reloaded.items == (item,)


class TestUnavailableDatabase:
    @pytest.fixture
    def broken_factory(self):
        # No tables: every read and write fails
        return sessionmaker(bind=make_engine("sqlite://"))

    def test_load_falls_back_to_empty(self, broken_factory):
        store = HistoryStore(broken_factory)
        assert store.load() == ()

    def test_save_failure_is_swallowed(self, broken_factory):
        store = HistoryStore(broken_factory)
        item = HistoryItem.new(["Acme"], "## A\nx")
        store.append(item)
        assert store.items == (item,)
