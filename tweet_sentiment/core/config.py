# tweet_sentiment/core/config.py
from __future__ import annotations

import json
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

# Cloud Foundry 绑定服务里可直接交给 SQLAlchemy 的 scheme
_SQL_SCHEMES = ("postgres://", "postgresql://", "mysql://", "sqlite:")


class Settings(BaseSettings):
    DB_URL: str | None = None
    # Cloud Foundry 注入的绑定服务（JSON），DB_URL 未设置时从中取 credentials.uri/url
    VCAP_SERVICES: str | None = None
    # 每轮刷新结束后等待的秒数
    REFRESH_DELAY_SECONDS: float = 1.0
    ENABLE_REFRESHER: bool = True
    # 计算“当天”窗口以及解析 DD-MM-YYYY 所用的时区
    TIMEZONE: str = "UTC"
    # 可选：静态前端目录，挂载到 /
    PUBLIC_DIR: str | None = None
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    def database_url(self) -> str | None:
        if self.DB_URL:
            return self.DB_URL
        if not self.VCAP_SERVICES:
            return None
        services = json.loads(self.VCAP_SERVICES)
        for instances in services.values():
            for inst in instances:
                creds = inst.get("credentials") or {}
                url = creds.get("uri") or creds.get("url") or ""
                if url.startswith(_SQL_SCHEMES):
                    # SQLAlchemy 2 只认 postgresql://
                    if url.startswith("postgres://"):
                        url = "postgresql://" + url[len("postgres://"):]
                    return url
        return None


@lru_cache
def get_settings() -> Settings:
    return Settings()
