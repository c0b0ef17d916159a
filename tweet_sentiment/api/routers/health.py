from fastapi import APIRouter

from tweet_sentiment.orchestrator.refresher import sentiment_refresher

# 不用 prefix，直接声明具体路径
router = APIRouter(tags=["health"])


def _status():
    refreshed_at = sentiment_refresher.snapshots.current().refreshed_at
    return {
        "status": "ok",
        "last_refresh": refreshed_at.isoformat() if refreshed_at else None,
    }


@router.get("/api/health")
def health_api():
    return _status()


@router.get("/health")
def health_plain():
    return _status()
