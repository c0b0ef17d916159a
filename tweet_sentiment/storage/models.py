# tweet_sentiment/storage/models.py
from __future__ import annotations
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy import Column, Integer, String, DateTime, Float, Index

from .db import Base


class CacheEntry(Base):
    """
    某个关键词某一天的推文情绪汇总（由外部采集进程写入，本服务只读）。
    date 按天粒度、以 UTC 存储；latest_tweets 为 [{text..., sentiment}, ...]。
    """
    __tablename__ = "cache"

    id = Column(Integer, primary_key=True, autoincrement=True)
    phrase = Column(String, nullable=False, index=True)
    date = Column(DateTime, nullable=False, index=True)
    tweets = Column(Integer, nullable=False, default=0)
    totalsentiment = Column(Float, nullable=False, default=0.0)
    latest_tweets = Column(sa.JSON, nullable=False, default=list)

    __table_args__ = (Index("ix_cache_phrase_date", "phrase", "date"),)

    def __repr__(self):
        return f"<CacheEntry(phrase={self.phrase}, date={self.date}, tweets={self.tweets})>"


class Keyword(Base):
    """关注的关键词列表"""
    __tablename__ = "keywords"

    phrase = Column(String, primary_key=True)
    added_at = Column(DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))
