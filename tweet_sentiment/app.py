import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]  # 指向项目根
ENV_FILE = ROOT_DIR / ".env"
if ENV_FILE.exists():
    load_dotenv(ENV_FILE, override=False)

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from tweet_sentiment.core.config import get_settings
from tweet_sentiment.storage.db import init_store
from tweet_sentiment.storage.dao import QueryFailure
from tweet_sentiment.storage import models  # noqa: F401  注册表结构
from tweet_sentiment.api.routers.health import router as health_router
from tweet_sentiment.api.routers import sentiment
from tweet_sentiment.orchestrator.refresher import sentiment_refresher

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL.upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 启动时：数据库不可用则直接失败，不对外服务
    logger.info("🚀 启动 tweet-sentiment ...")
    init_store()

    if settings.ENABLE_REFRESHER:
        sentiment_refresher.start()

    yield

    # 关闭时
    logger.info("🛑 关闭 tweet-sentiment ...")
    sentiment_refresher.stop()


app = FastAPI(title="tweet-sentiment", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], allow_methods=["*"], allow_headers=["*"], allow_credentials=True,
)


@app.exception_handler(QueryFailure)
async def query_failure_handler(request: Request, exc: QueryFailure):
    logger.error(f"❌ {request.method} {request.url.path} 存储查询失败: {exc}")
    return JSONResponse(status_code=503, content={"detail": "store query failed"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Caught exception: {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "internal error"})


app.include_router(health_router)   # /api/health 与 /health
app.include_router(sentiment.router)  # /sentiment/*


def mount_public(app: FastAPI, public_dir: str | None) -> bool:
    """可选：静态前端，必须在路由之后挂载，避免覆盖 API。"""
    if not public_dir or not Path(public_dir).is_dir():
        return False
    app.mount("/", StaticFiles(directory=public_dir, html=True), name="public")
    return True


mount_public(app, settings.PUBLIC_DIR)
