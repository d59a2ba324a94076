"""
Streak engine.

`record_completion` is the raw recurrence: it increments unconditionally when
yesterday was done, so it must run at most once per date. `complete_today` in
app.services.days is the guarded caller.
"""
from __future__ import annotations

from datetime import date, timedelta

from sqlalchemy.orm import Session

from app.services.records import StreakState, load_day, load_streak, save_streak
from app.services.store import RecordStore


def record_completion(store: RecordStore, day: date) -> StreakState:
    streak = load_streak(store)

    yesterday = load_day(store, (day - timedelta(days=1)).isoformat())
    if yesterday is not None and yesterday.done:
        streak.current += 1
    else:
        streak.current = 1

    streak.longest = max(streak.longest, streak.current)
    streak.lastDate = day.isoformat()
    save_streak(store, streak)
    return streak


def get_streak(db: Session) -> StreakState:
    return load_streak(RecordStore(db))
