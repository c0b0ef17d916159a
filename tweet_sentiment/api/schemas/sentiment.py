# tweet_sentiment/api/schemas/sentiment.py
from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class ScoredTweet(BaseModel):
    # 保留推文正文等原始字段
    model_config = ConfigDict(extra="allow")

    sentiment: float = 0.0  # 单条原始情绪（约 -5..5）
    score: float            # 映射到 0..1


class HistoryEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    phrase: str
    date: datetime  # UTC
    tweets: int = 0
    totalsentiment: float = 0.0
    score: float    # 当日分 0..1
    latest_tweets: List[Dict[str, Any]] = Field(default_factory=list, alias="latestTweets")


class PhraseSentiment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    phrase: str
    tweets: int = 0
    totalsentiment: float = 0.0
    average: float = 0.0
    score: float = 0.5
    latest_tweets: List[ScoredTweet] = Field(default_factory=list, alias="latestTweets")
    history: List[HistoryEntry] = []  # 最近的一天在前


class SentimentOverview(BaseModel):
    tweets: int = 0
    sentiments: List[PhraseSentiment] = []


class PhraseChange(BaseModel):
    ok: bool
    phrase: str
    message: str = ""
