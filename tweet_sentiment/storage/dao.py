# tweet_sentiment/storage/dao.py
from __future__ import annotations
from datetime import datetime
from typing import List

from sqlalchemy import select, func, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .models import CacheEntry, Keyword


class QueryFailure(RuntimeError):
    """对存储的读写失败（运行期），由调用方决定中止或返回错误。"""


def find_by_phrase_and_date_range(db: Session, phrase: str,
                                  start: datetime, end: datetime) -> List[CacheEntry]:
    """date ∈ [start, end)，按日期倒序（最近的一天在前）。"""
    stmt = (
        select(CacheEntry)
        .where(CacheEntry.phrase == phrase,
               CacheEntry.date >= start,
               CacheEntry.date < end)
        .order_by(CacheEntry.date.desc())
    )
    try:
        return list(db.execute(stmt).scalars())
    except SQLAlchemyError as e:
        raise QueryFailure(f"cache 查询失败 phrase={phrase}: {e}") from e


def find_all_phrases_sorted(db: Session) -> List[str]:
    stmt = select(Keyword.phrase).order_by(Keyword.phrase.asc())
    try:
        return list(db.execute(stmt).scalars())
    except SQLAlchemyError as e:
        raise QueryFailure(f"keywords 查询失败: {e}") from e


def sum_tweets_across_all_entries(db: Session) -> int:
    stmt = select(func.coalesce(func.sum(CacheEntry.tweets), 0))
    try:
        return int(db.execute(stmt).scalar() or 0)
    except SQLAlchemyError as e:
        raise QueryFailure(f"tweets 汇总失败: {e}") from e


def phrase_exists(db: Session, phrase: str) -> bool:
    stmt = select(Keyword.phrase).where(Keyword.phrase == phrase).limit(1)
    try:
        return db.execute(stmt).first() is not None
    except SQLAlchemyError as e:
        raise QueryFailure(f"keywords 查询失败 phrase={phrase}: {e}") from e


def insert_phrase(db: Session, phrase: str) -> bool:
    """写入成功返回 True；并发请求已先写入同名关键词时返回 False。"""
    try:
        db.add(Keyword(phrase=phrase))
        db.commit()
        return True
    except IntegrityError:
        db.rollback()
        return False
    except SQLAlchemyError as e:
        db.rollback()
        raise QueryFailure(f"写入关键词失败 phrase={phrase}: {e}") from e


def delete_phrase_by_name(db: Session, phrase: str) -> int:
    """返回删除的条数（0 表示本来就不存在）。"""
    try:
        result = db.execute(delete(Keyword).where(Keyword.phrase == phrase))
        db.commit()
        return int(result.rowcount or 0)
    except SQLAlchemyError as e:
        db.rollback()
        raise QueryFailure(f"删除关键词失败 phrase={phrase}: {e}") from e
