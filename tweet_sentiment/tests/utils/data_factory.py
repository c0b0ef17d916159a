# -*- coding: utf-8 -*-
import datetime as dt
from typing import Dict, Iterable, List, Optional

from tweet_sentiment.storage import models


def make_cache_entry(phrase: str, date: dt.datetime, tweets: int, totalsentiment: float,
                     latest: Optional[List[Dict]] = None) -> models.CacheEntry:
    return models.CacheEntry(
        phrase=phrase, date=date, tweets=tweets, totalsentiment=totalsentiment,
        latest_tweets=list(latest or []),
    )


def seed_cache(db, rows: Iterable[models.CacheEntry]) -> None:
    for r in rows:
        db.add(r)
    db.commit()


def seed_phrases(db, phrases: Iterable[str]) -> None:
    for p in phrases:
        db.add(models.Keyword(phrase=p))
    db.commit()
