# tweet_sentiment/api/routers/sentiment.py
from __future__ import annotations
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from tweet_sentiment.storage.db import get_db
from tweet_sentiment.storage import dao
from tweet_sentiment.sentiment.scorer import compute_sentiment, day_bounds, parse_day
from tweet_sentiment.sentiment.snapshot import SnapshotHolder
from tweet_sentiment.orchestrator.refresher import sentiment_refresher
from tweet_sentiment.api.schemas.sentiment import PhraseChange, PhraseSentiment, SentimentOverview

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sentiment", tags=["sentiment"])

INVALID_PHRASE_HINT = 'Invalid request: send {"phrase": "ibm"}'
INVALID_DATE_HINT = "Invalid date: use DD-MM-YYYY, e.g. /sentiment/ibm/01-03-2014/31-03-2014"


def get_snapshots() -> SnapshotHolder:
    return sentiment_refresher.snapshots


@router.get("", response_model=SentimentOverview)
def get_overview(snapshots: SnapshotHolder = Depends(get_snapshots)):
    """所有关键词当日的情绪（直接读最新快照，不重新计算）"""
    snap = snapshots.current()
    return SentimentOverview(tweets=snap.total_tweets, sentiments=list(snap.sentiments))


@router.get("/{phrase}/{start}/{end}", response_model=PhraseSentiment)
def get_phrase_range(phrase: str, start: str, end: str, db: Session = Depends(get_db)):
    """
    指定关键词、指定日期区间（DD-MM-YYYY，首尾两天都包含）的情绪，实时计算。
    """
    try:
        first_day, last_day = parse_day(start), parse_day(end)
    except ValueError:
        raise HTTPException(status_code=400, detail=INVALID_DATE_HINT)
    since, until = day_bounds(first_day, last_day)
    return compute_sentiment(db, phrase, since, until)


@router.post("", response_model=PhraseChange)
async def add_phrase(request: Request, db: Session = Depends(get_db)):
    """添加监控关键词；已存在时仍返回 200，ok=False"""
    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail=INVALID_PHRASE_HINT)

    phrase = payload.get("phrase") if isinstance(payload, dict) else None
    if not isinstance(phrase, str) or not phrase.strip():
        raise HTTPException(status_code=400, detail=INVALID_PHRASE_HINT)
    phrase = phrase.strip()

    # 数据库调用放到线程池，避免阻塞事件循环
    exists = await run_in_threadpool(dao.phrase_exists, db, phrase)
    if exists or not await run_in_threadpool(dao.insert_phrase, db, phrase):
        logger.warning(f"Phrase {phrase} already exists.")
        return PhraseChange(ok=False, phrase=phrase, message=f"{phrase} already exists")

    logger.info(f"Added phrase {phrase}.")
    return PhraseChange(ok=True, phrase=phrase, message=f"added {phrase}")


@router.delete("/{phrase}", response_model=PhraseChange)
def remove_phrase(phrase: str, db: Session = Depends(get_db)):
    """删除监控关键词；不存在也返回 200"""
    if dao.delete_phrase_by_name(db, phrase) == 0:
        logger.info(f"Phrase {phrase} not found, nothing to remove.")
        return PhraseChange(ok=False, phrase=phrase, message=f"{phrase} not found")

    logger.info(f"Removed phrase {phrase}.")
    return PhraseChange(ok=True, phrase=phrase, message=f"removed {phrase}")
