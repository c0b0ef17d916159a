# tweet_sentiment/storage/db.py
from __future__ import annotations
from pathlib import Path
from typing import Iterator
import logging

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from ..core.config import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()


class StoreUnavailable(RuntimeError):
    """启动时无法连接到存储：致命错误，服务不开始对外提供与刷新。"""


def _default_sqlite_url() -> str:
    # tweet_sentiment/storage/db.py → 项目根 = parents[2]
    root = Path(__file__).resolve().parents[2]
    db_dir = root / "db"
    db_dir.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{(db_dir / 'tweet_sentiment.sqlite').as_posix()}"


def _is_memory_sqlite(db_url: str) -> bool:
    return db_url in ("sqlite://", "sqlite:///:memory:")


def get_engine():
    settings = get_settings()
    db_url = settings.database_url() or _default_sqlite_url()
    kwargs = {}
    if db_url.startswith("sqlite"):
        # 刷新线程与请求线程共用连接
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_memory_sqlite(db_url):
            # 内存库只有一个连接，所有 Session 才能看到同一批表
            kwargs["poolclass"] = StaticPool
    return create_engine(db_url, echo=False, future=True, **kwargs)


def get_db() -> Iterator[Session]:
    """FastAPI 依赖注入：提供 Session，请求结束后关闭。"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_connection() -> None:
    """执行 SELECT 1；失败则抛出 StoreUnavailable。"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"❌ 无法连接数据库 {engine.url!r}: {e}")
        raise StoreUnavailable(str(e)) from e
    logger.info("✅ 数据库连接已建立")


def init_store() -> None:
    """先确认连接，再建表（SQLite 简化；用 Alembic 时可去掉建表）。"""
    check_connection()
    Base.metadata.create_all(bind=engine)


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
