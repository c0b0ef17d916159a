from datetime import date, datetime, timedelta, timezone

import pytest

from tweet_sentiment.sentiment.scorer import (
    AVG_HIGH, AVG_LOW, clamp_and_map, compute_sentiment, day_bounds, day_score,
    parse_day, safe_average, single_score, today_bounds,
)
from tweet_sentiment.tests.utils.data_factory import make_cache_entry, seed_cache

D14 = datetime(2026, 10, 14)
D15 = datetime(2026, 10, 15)
D16 = datetime(2026, 10, 16)


def test_clamp_and_map_bounds():
    assert clamp_and_map(AVG_LOW, AVG_LOW, AVG_HIGH) == 0.0
    assert clamp_and_map(AVG_HIGH, AVG_LOW, AVG_HIGH) == 1.0
    assert clamp_and_map(0.0, AVG_LOW, AVG_HIGH) == pytest.approx(0.5)
    # 超出区间先截断
    assert clamp_and_map(42.0, AVG_LOW, AVG_HIGH) == 1.0
    assert clamp_and_map(-42.0, AVG_LOW, AVG_HIGH) == 0.0


def test_day_score_matches_formula():
    for tweets, total in [(10, 5.0), (3, -2.0), (1, 9.0), (7, -100.0), (4, 0.0)]:
        entry = make_cache_entry("ibm", D16, tweets, total)
        avg = max(-1.3, min(1.3, total / tweets))
        s = day_score(entry)
        assert s == pytest.approx((avg + 1.3) / 2.6)
        assert 0.0 <= s <= 1.0


def test_single_score_monotonic_and_bounded():
    values = [-9.0, -5.0, -2.5, 0.0, 2.0, 5.0, 11.0]
    scores = [single_score(v) for v in values]
    assert scores == sorted(scores)
    assert scores[0] == 0.0 and scores[-1] == 1.0
    assert single_score(2.0) == pytest.approx(0.7)


def test_zero_tweets_is_neutral():
    assert safe_average(3.0, 0) == 0.0
    assert day_score(make_cache_entry("ibm", D16, 0, 0.0)) == pytest.approx(0.5)


def test_no_rows(db):
    start, end = day_bounds(date(2026, 10, 16))
    res = compute_sentiment(db, "ibm", start, end)
    assert res.phrase == "ibm"
    assert res.tweets == 0 and res.totalsentiment == 0.0
    assert res.average == 0.0
    assert res.score == pytest.approx(0.5)
    assert res.latest_tweets == [] and res.history == []


def test_ibm_single_day(db):
    start, end = today_bounds()
    seed_cache(db, [make_cache_entry("ibm", start + timedelta(hours=12), 10, 5.0,
                                     [{"text": "IBM up", "sentiment": 2}])])
    res = compute_sentiment(db, "ibm", start, end)
    assert res.tweets == 10
    assert res.average == pytest.approx(0.5)
    assert res.score == pytest.approx(0.6923, abs=1e-4)
    assert len(res.latest_tweets) == 1
    assert res.latest_tweets[0].score == pytest.approx(0.7)
    assert res.latest_tweets[0].model_dump()["text"] == "IBM up"
    assert len(res.history) == 1
    assert res.history[0].score == pytest.approx(0.6923, abs=1e-4)


def test_multiple_days_sum_and_order(db):
    seed_cache(db, [
        make_cache_entry("ibm", D14, 4, 2.0, [{"sentiment": -1}]),
        make_cache_entry("ibm", D16, 10, -3.0, [{"sentiment": 5}, {"sentiment": -8}]),
        make_cache_entry("ibm", D15, 6, 9.0, [{"sentiment": 1}]),
        # 其它关键词与区间外的数据不应计入
        make_cache_entry("apple", D15, 100, 50.0),
        make_cache_entry("ibm", datetime(2026, 10, 17), 99, 99.0),
    ])
    start, _ = day_bounds(date(2026, 10, 14))
    res = compute_sentiment(db, "ibm", start, datetime(2026, 10, 17))

    assert [h.date.date() for h in res.history] == [D16.date(), D15.date(), D14.date()]
    assert res.tweets == sum(h.tweets for h in res.history) == 20
    assert res.totalsentiment == pytest.approx(sum(h.totalsentiment for h in res.history))
    assert res.totalsentiment == pytest.approx(8.0)
    assert res.average == pytest.approx(0.4)
    assert res.score == pytest.approx((0.4 + 1.3) / 2.6)
    # 只取最近一天的样本
    assert [t.score for t in res.latest_tweets] == [1.0, 0.0]
    assert res.history[0].score == pytest.approx((-0.3 + 1.3) / 2.6)
    assert res.history[1].score == 1.0


def test_end_is_exclusive(db):
    start, end = day_bounds(date(2026, 10, 16))
    seed_cache(db, [make_cache_entry("ibm", end, 5, 5.0)])
    assert compute_sentiment(db, "ibm", start, end).tweets == 0


def test_idempotent_and_store_untouched(db):
    seed_cache(db, [make_cache_entry("ibm", D16, 10, 5.0, [{"sentiment": 2}])])
    start, end = day_bounds(date(2026, 10, 16))
    first = compute_sentiment(db, "ibm", start, end)
    second = compute_sentiment(db, "ibm", start, end)
    assert first.model_dump() == second.model_dump()

    db.expire_all()
    from tweet_sentiment.storage.models import CacheEntry
    stored = db.query(CacheEntry).one()
    assert stored.latest_tweets == [{"sentiment": 2}]


def test_parse_day():
    assert parse_day("17-10-2026") == date(2026, 10, 17)
    for bad in ("2026-10-17", "32-01-2026", "ibm", ""):
        with pytest.raises(ValueError):
            parse_day(bad)


def test_day_bounds_cover_whole_days():
    start, end = day_bounds(date(2026, 10, 15), date(2026, 10, 16))
    assert start == datetime(2026, 10, 15, 0, 0)
    assert end == datetime(2026, 10, 16, 23, 59, 59, 999000)
    assert start.tzinfo is None and end.tzinfo is None


def test_today_bounds():
    now = datetime(2026, 10, 17, 15, 30, tzinfo=timezone.utc)
    assert today_bounds(now) == day_bounds(date(2026, 10, 17))
