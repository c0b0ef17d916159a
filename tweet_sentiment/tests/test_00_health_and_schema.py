import pytest
from sqlalchemy import create_engine, inspect

from tweet_sentiment.storage.db import StoreUnavailable, check_connection, engine, init_store


def test_health(client):
    for path in ("/health", "/api/health"):
        r = client.get(path)
        assert r.status_code == 200
        assert r.json() == {"status": "ok", "last_refresh": None}


def test_tables_exist():
    names = set(inspect(engine).get_table_names())
    assert {"cache", "keywords"} <= names


def test_check_connection_ok():
    check_connection()


def test_store_unavailable(monkeypatch):
    from tweet_sentiment.storage import db as db_mod
    bad = create_engine("sqlite:////nonexistent-dir/tweet_sentiment.sqlite")
    monkeypatch.setattr(db_mod, "engine", bad)
    with pytest.raises(StoreUnavailable):
        check_connection()


def test_init_store_checks_connection_before_creating_tables(monkeypatch):
    from tweet_sentiment.storage import db as db_mod
    bad = create_engine("sqlite:////nonexistent-dir/tweet_sentiment.sqlite")
    monkeypatch.setattr(db_mod, "engine", bad)
    with pytest.raises(StoreUnavailable):
        init_store()


def test_init_store_creates_tables():
    init_store()
    assert {"cache", "keywords"} <= set(inspect(engine).get_table_names())
