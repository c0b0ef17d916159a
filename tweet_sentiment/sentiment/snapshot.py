# tweet_sentiment/sentiment/snapshot.py
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple
import threading

from ..api.schemas.sentiment import PhraseSentiment


@dataclass(frozen=True)
class Snapshot:
    """一次刷新的完整结果；整体替换，不做局部修改。"""
    total_tweets: int = 0
    sentiments: Tuple[PhraseSentiment, ...] = ()  # 按 phrase 升序
    refreshed_at: Optional[datetime] = None


class SnapshotHolder:
    """
    单写多读：刷新循环是唯一写入方，请求处理只读。
    读者拿到的永远是某一轮完整的 Snapshot。
    """

    def __init__(self, initial: Optional[Snapshot] = None):
        self._lock = threading.Lock()
        self._current = initial or Snapshot()

    def current(self) -> Snapshot:
        with self._lock:
            return self._current

    def publish(self, snapshot: Snapshot) -> None:
        with self._lock:
            self._current = snapshot
