# tweet_sentiment/sentiment/scorer.py
"""
关键词情绪聚合：把按天汇总的推文情绪（cache 表）换算成 0..1 的分数。

- 日均情绪 totalsentiment / tweets 先截断到 [-1.3, 1.3]，再线性映射到 [0, 1]
- 单条推文情绪截断到 [-5, 5] 后同样映射
- 区间总分 = 区间内所有天的 tweets / totalsentiment 求和后按日均同样换算
"""
from __future__ import annotations
from datetime import date, datetime, time, timezone, tzinfo
from typing import Any, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from ..api.schemas.sentiment import HistoryEntry, PhraseSentiment, ScoredTweet
from ..core.config import get_settings
from ..storage.dao import find_by_phrase_and_date_range
from ..storage.models import CacheEntry

AVG_LOW, AVG_HIGH = -1.3, 1.3
SINGLE_LOW, SINGLE_HIGH = -5.0, 5.0
SCORE_LOW, SCORE_HIGH = 0.0, 1.0

DAY_FORMAT = "%d-%m-%Y"


def clamp_and_map(value: float, low: float, high: float) -> float:
    """截断到 [low, high] 后映射到 [SCORE_LOW, SCORE_HIGH]。"""
    v = max(low, min(high, value))
    return (v - low) / (high - low) * (SCORE_HIGH - SCORE_LOW) + SCORE_LOW


def safe_average(totalsentiment: float, tweets: int) -> float:
    # 没有推文时均值记为 0（对应中性分 0.5），不产生 NaN
    if not tweets:
        return 0.0
    return totalsentiment / tweets


def day_score(entry: CacheEntry) -> float:
    return clamp_and_map(safe_average(entry.totalsentiment or 0.0, entry.tweets or 0), AVG_LOW, AVG_HIGH)


def single_score(sentiment: float) -> float:
    return clamp_and_map(sentiment, SINGLE_LOW, SINGLE_HIGH)


def _score_samples(samples: List[Dict[str, Any]]) -> List[ScoredTweet]:
    out = []
    for sample in samples or []:
        s = float(sample.get("sentiment") or 0.0)
        # 复制一份，不改动存储里的原始记录
        out.append(ScoredTweet(**{**sample, "sentiment": s, "score": single_score(s)}))
    return out


def compute_sentiment(db: Session, phrase: str, start: datetime, end: datetime) -> PhraseSentiment:
    """
    计算 phrase 在 [start, end) 内的情绪。
    history 按日期倒序；latestTweets 只取最近一天的样本。
    存储读取失败时抛出 QueryFailure。
    """
    entries = find_by_phrase_and_date_range(db, phrase, start, end)

    tweets = 0
    totalsentiment = 0.0
    latest_tweets: List[ScoredTweet] = []
    history: List[HistoryEntry] = []

    for i, entry in enumerate(entries):
        tweets += entry.tweets or 0
        totalsentiment += entry.totalsentiment or 0.0
        if i == 0:
            latest_tweets = _score_samples(entry.latest_tweets)
        history.append(HistoryEntry(
            phrase=entry.phrase,
            date=entry.date.replace(tzinfo=timezone.utc),
            tweets=entry.tweets or 0,
            totalsentiment=entry.totalsentiment or 0.0,
            score=day_score(entry),
            latest_tweets=[dict(t) for t in entry.latest_tweets or []],
        ))

    average = safe_average(totalsentiment, tweets)
    return PhraseSentiment(
        phrase=phrase,
        tweets=tweets,
        totalsentiment=totalsentiment,
        average=average,
        score=clamp_and_map(average, AVG_LOW, AVG_HIGH),
        latest_tweets=latest_tweets,
        history=history,
    )


# ---------------------- 日期窗口 ----------------------

def _zone() -> tzinfo:
    name = get_settings().TIMEZONE
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def _to_naive_utc(dt: datetime) -> datetime:
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_day(value: str) -> date:
    """解析 DD-MM-YYYY；格式不对抛 ValueError。"""
    return datetime.strptime(value, DAY_FORMAT).date()


def day_bounds(first_day: date, last_day: Optional[date] = None) -> Tuple[datetime, datetime]:
    """[first_day 00:00, last_day 23:59:59.999]（配置时区），返回 naive UTC。"""
    tz = _zone()
    last_day = last_day or first_day
    start = datetime.combine(first_day, time.min, tzinfo=tz)
    end = datetime.combine(last_day, time(23, 59, 59, 999000), tzinfo=tz)
    return _to_naive_utc(start), _to_naive_utc(end)


def today_bounds(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    tz = _zone()
    now = now or datetime.now(tz)
    return day_bounds(now.astimezone(tz).date())
