# tweet_sentiment/tests/conftest.py
import os

# 必须在导入 app 之前设置：单测用内存库，不启动后台刷新
os.environ["DB_URL"] = "sqlite://"
os.environ["ENABLE_REFRESHER"] = "false"
os.environ["TIMEZONE"] = "UTC"

import pytest
from fastapi.testclient import TestClient

from tweet_sentiment.app import app as fastapi_app
from tweet_sentiment.storage.db import Base, engine, SessionLocal
from tweet_sentiment.storage.models import CacheEntry, Keyword
from tweet_sentiment.orchestrator.refresher import sentiment_refresher
from tweet_sentiment.sentiment.snapshot import Snapshot


@pytest.fixture(autouse=True)
def _clean_store():
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as s:
        s.query(CacheEntry).delete()
        s.query(Keyword).delete()
        s.commit()
    sentiment_refresher.snapshots.publish(Snapshot())
    yield


@pytest.fixture(scope="session")
def client():
    return TestClient(fastapi_app)


@pytest.fixture
def db():
    s = SessionLocal()
    yield s
    s.close()
