"""
Tests for the daily record lifecycle and the guarded completion operation.

Unit-level: services are called with an explicit `today` so day boundaries
are deterministic.
"""
from __future__ import annotations

import json
import threading
from datetime import date, timedelta

import pytest

from app.core.errors import ClockSkewError, CorruptRecordError, InvalidOriginError
from app.db.base import SessionLocal
from app.services import days as days_module
from app.services.days import FIRST_DAY_KEY, complete_today, ensure_today, local_today
from app.services.records import DailyRecord, decode_day, load_day, save_day
from app.services.store import CONFIG, DAYS, STREAK, RecordStore
from app.services.streak import get_streak

ORIGIN = date(2024, 1, 1)


def _seed_origin(db, value: str = "2024-01-01") -> None:
    store = RecordStore(db)
    with store.transaction():
        store.put(CONFIG, FIRST_DAY_KEY, value.encode("utf-8"))


class TestEnsureToday:
    def test_first_run_sets_origin_and_start_target(self, db):
        record = ensure_today(db, today=ORIGIN)
        assert record == DailyRecord(date="2024-01-01", count=10, done=False)
        assert RecordStore(db).get(CONFIG, FIRST_DAY_KEY) == b"2024-01-01"

    def test_origin_is_stored_raw_not_json(self, db):
        ensure_today(db, today=ORIGIN)
        raw = RecordStore(db).get(CONFIG, FIRST_DAY_KEY)
        assert not raw.startswith(b'"')

    def test_later_day_uses_progression(self, db):
        ensure_today(db, today=ORIGIN)
        record = ensure_today(db, today=date(2024, 1, 10))
        assert record.count == 28
        assert record.done is False

    def test_origin_never_rewritten(self, db):
        ensure_today(db, today=ORIGIN)
        ensure_today(db, today=date(2024, 3, 1))
        assert RecordStore(db).get(CONFIG, FIRST_DAY_KEY) == b"2024-01-01"

    def test_idempotent(self, db):
        first = ensure_today(db, today=ORIGIN)
        second = ensure_today(db, today=ORIGIN)
        assert first == second
        assert len(list(RecordStore(db).items(DAYS))) == 1

    def test_existing_record_is_not_reset(self, db):
        store = RecordStore(db)
        with store.transaction():
            save_day(store, DailyRecord(date="2024-05-05", count=77, done=True))

        record = ensure_today(db, today=date(2024, 5, 5))
        assert record == DailyRecord(date="2024-05-05", count=77, done=True)
        # Nothing else was touched: no origin was recorded either.
        assert store.get(CONFIG, FIRST_DAY_KEY) is None

    def test_persisted_json_layout(self, db):
        ensure_today(db, today=ORIGIN)
        data = json.loads(RecordStore(db).get(DAYS, "2024-01-01"))
        assert data == {"date": "2024-01-01", "count": 10, "done": False}

    def test_corrupt_origin_is_fatal(self, db):
        _seed_origin(db, "not-a-date")
        with pytest.raises(InvalidOriginError):
            ensure_today(db, today=ORIGIN)

    def test_origin_in_future_is_clock_skew(self, db):
        _seed_origin(db, "2024-05-01")
        with pytest.raises(ClockSkewError):
            ensure_today(db, today=date(2024, 4, 30))
        assert RecordStore(db).get(DAYS, "2024-04-30") is None

    def test_corrupt_today_record_surfaces(self, db):
        store = RecordStore(db)
        with store.transaction():
            store.put(DAYS, "2024-01-01", b"{broken")
        with pytest.raises(CorruptRecordError):
            ensure_today(db, today=ORIGIN)

    def test_local_today_is_local_date(self):
        assert local_today() == date.today()


class TestCompleteToday:
    def test_marks_done(self, db):
        record = complete_today(db, today=ORIGIN)
        assert record.done is True
        assert record.count == 10
        assert load_day(RecordStore(db), "2024-01-01").done is True

    def test_creates_missing_record(self, db):
        ensure_today(db, today=ORIGIN)
        record = complete_today(db, today=date(2024, 1, 2))
        assert record == DailyRecord(date="2024-01-02", count=12, done=True)

    def test_second_call_does_not_touch_streak(self, db):
        complete_today(db, today=ORIGIN)
        before = RecordStore(db).get(STREAK, "current")

        again = complete_today(db, today=ORIGIN)
        assert again.done is True
        assert RecordStore(db).get(STREAK, "current") == before
        assert get_streak(db).current == 1

    def test_done_and_streak_commit_together(self, db):
        ensure_today(db, today=ORIGIN)
        store = RecordStore(db)
        with store.transaction():
            store.put(STREAK, "current", b"not json")

        with pytest.raises(CorruptRecordError):
            complete_today(db, today=ORIGIN)
        assert load_day(RecordStore(db), "2024-01-01").done is False


class TestStreak:
    def test_default_streak(self, db):
        streak = get_streak(db)
        assert (streak.current, streak.longest, streak.lastDate) == (0, 0, "")

    def test_consecutive_days_extend(self, db):
        for offset in range(3):
            complete_today(db, today=ORIGIN + timedelta(days=offset))
        streak = get_streak(db)
        assert streak.current == 3
        assert streak.longest == 3
        assert streak.lastDate == "2024-01-03"

    def test_missing_yesterday_resets(self, db):
        complete_today(db, today=ORIGIN)
        complete_today(db, today=ORIGIN + timedelta(days=1))
        complete_today(db, today=ORIGIN + timedelta(days=3))
        streak = get_streak(db)
        assert streak.current == 1
        assert streak.longest == 2

    def test_incomplete_yesterday_resets(self, db):
        complete_today(db, today=ORIGIN)
        ensure_today(db, today=ORIGIN + timedelta(days=1))
        complete_today(db, today=ORIGIN + timedelta(days=2))
        assert get_streak(db).current == 1

    def test_longest_is_high_water_mark(self, db):
        pattern = [0, 1, 2, 3, 5, 6, 8, 9, 10, 11, 12, 14]
        longest_seen = 0
        for offset in pattern:
            complete_today(db, today=ORIGIN + timedelta(days=offset))
            streak = get_streak(db)
            assert streak.longest >= streak.current
            assert streak.longest >= longest_seen
            longest_seen = streak.longest
        assert get_streak(db).longest == 5
        assert get_streak(db).current == 1


def _pause_after_read(monkeypatch, workers: int) -> None:
    """
    Make every worker wait for the others right after reading the day record,
    so without serialisation all of them would act on the same stale read.
    """
    barrier = threading.Barrier(workers, timeout=1)
    real_load_day = days_module.load_day

    def load_day_then_wait(store, key, lock=False):
        record = real_load_day(store, key, lock=lock)
        try:
            barrier.wait()
        except threading.BrokenBarrierError:
            pass
        return record

    monkeypatch.setattr(days_module, "load_day", load_day_then_wait)


def _run_in_threads(operation, day: date, workers: int = 2):
    results, errors = [], []

    def worker():
        session = SessionLocal()
        try:
            results.append(operation(session, today=day))
        except Exception as exc:  # collected and asserted by the caller
            errors.append(exc)
        finally:
            session.close()

    threads = [threading.Thread(target=worker) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=15)
    return results, errors


class TestConcurrentCompletion:
    def test_streak_counted_once(self, db, monkeypatch):
        complete_today(db, today=ORIGIN)
        _pause_after_read(monkeypatch, workers=2)

        results, errors = _run_in_threads(complete_today, ORIGIN + timedelta(days=1))
        assert errors == []
        assert [r.done for r in results] == [True, True]
        streak = get_streak(db)
        assert streak.current == 2
        assert streak.longest == 2

    def test_first_read_creates_one_record(self, db, monkeypatch):
        _seed_origin(db)
        _pause_after_read(monkeypatch, workers=2)

        results, errors = _run_in_threads(ensure_today, ORIGIN + timedelta(days=5))
        assert errors == []
        assert results == [DailyRecord(date="2024-01-06", count=20, done=False)] * 2


class TestDecodeDay:
    @pytest.mark.parametrize(
        "payload",
        [
            {"date": 5, "count": 10, "done": False},
            {"date": "2024-01-01", "count": "10", "done": False},
            {"date": "2024-01-01", "count": True, "done": False},
            {"date": "2024-01-01", "count": 10, "done": "false"},
            {"date": "2024-01-02", "count": 10, "done": False},
            {"count": 10, "done": False},
            [1, 2, 3],
        ],
    )
    def test_wrong_shape_is_corrupt(self, payload):
        with pytest.raises(CorruptRecordError):
            decode_day("2024-01-01", json.dumps(payload).encode("utf-8"))

    def test_missing_done_defaults_to_false(self):
        record = decode_day("2024-01-01", b'{"date": "2024-01-01", "count": 10}')
        assert record == DailyRecord(date="2024-01-01", count=10, done=False)
