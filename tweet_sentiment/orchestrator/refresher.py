# tweet_sentiment/orchestrator/refresher.py
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
import logging

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.orm import Session

from tweet_sentiment.core.config import get_settings
from tweet_sentiment.sentiment.scorer import compute_sentiment, today_bounds
from tweet_sentiment.sentiment.snapshot import Snapshot, SnapshotHolder
from tweet_sentiment.storage.dao import QueryFailure, find_all_phrases_sorted, sum_tweets_across_all_entries
from tweet_sentiment.storage.db import SessionLocal

logger = logging.getLogger(__name__)

JOB_ID = "refresh_sentiments"


class SentimentRefresher:
    """关键词情绪刷新器：每轮重算全部关键词的当日情绪并整体发布快照"""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal,
                 delay: Optional[float] = None):
        self.session_factory = session_factory
        self.delay = get_settings().REFRESH_DELAY_SECONDS if delay is None else delay
        self.snapshots = SnapshotHolder()
        self.scheduler = BackgroundScheduler()
        self.is_running = False

    def run_cycle(self) -> bool:
        """执行一轮刷新。成功发布新快照返回 True；失败保留旧快照返回 False。"""
        try:
            with self.session_factory() as db:
                total_tweets = sum_tweets_across_all_entries(db)
                phrases = find_all_phrases_sorted(db)
                start, end = today_bounds()
                # 逐个顺序计算，保证顺序确定且不给存储加压
                sentiments = tuple(compute_sentiment(db, p, start, end) for p in phrases)
        except QueryFailure as e:
            logger.error(f"❌ 情绪刷新中止，保留上一份快照: {e}")
            return False
        except Exception:
            logger.exception("❌ 情绪刷新出现未预期错误，保留上一份快照")
            return False

        self.snapshots.publish(Snapshot(
            total_tweets=total_tweets,
            sentiments=sentiments,
            refreshed_at=datetime.now(timezone.utc),
        ))
        logger.debug(f"🔄 快照已更新: {len(sentiments)} 个关键词, tweets={total_tweets}")
        return True

    def _tick(self):
        try:
            self.run_cycle()
        finally:
            self._schedule_next()

    def _schedule_next(self):
        # 以本轮结束时间为基准推迟下一轮，两轮之间至少间隔 delay 秒
        if not self.is_running:
            return
        try:
            self.scheduler.modify_job(
                JOB_ID, next_run_time=datetime.now(timezone.utc) + timedelta(seconds=self.delay)
            )
        except JobLookupError:
            logger.debug("刷新任务已移除，跳过重新排期")

    def start(self):
        """启动刷新循环（立即执行第一轮）"""
        if self.is_running:
            return

        # 调度器 shutdown 后不能复用，每次启动新建
        self.scheduler = BackgroundScheduler()
        self.scheduler.add_job(
            self._tick,
            'interval',
            seconds=self.delay,
            id=JOB_ID,
            next_run_time=datetime.now(timezone.utc),
            max_instances=1,  # 同一时间只跑一轮
            coalesce=True,
            replace_existing=True,
        )
        self.is_running = True
        self.scheduler.start()
        logger.info(f"📅 情绪刷新器已启动 (间隔 {self.delay}s)")

    def stop(self):
        """停止刷新循环"""
        self.is_running = False
        if self.scheduler.running:
            self.scheduler.shutdown()
        logger.info("📅 情绪刷新器已停止")


# 全局刷新器实例
sentiment_refresher = SentimentRefresher()
