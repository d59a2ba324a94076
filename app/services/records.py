"""
Value types stored in the record store and their JSON codecs.
"""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Optional

from app.core.errors import CorruptRecordError
from app.services.store import DAYS, STREAK, RecordStore

STREAK_KEY = "current"


@dataclass
class DailyRecord:
    date: str        # YYYY-MM-DD, local time
    count: int       # target for the day, fixed at creation
    done: bool = False


@dataclass
class StreakState:
    current: int = 0
    longest: int = 0
    lastDate: str = ""


def decode_day(key: str, raw: bytes) -> DailyRecord:
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise CorruptRecordError(DAYS, key) from exc

    if not isinstance(data, dict):
        raise CorruptRecordError(DAYS, key)
    day, count, done = data.get("date"), data.get("count"), data.get("done", False)
    # bool is an int subclass, so it has to be ruled out for count explicitly.
    if (
        day != key
        or not isinstance(count, int)
        or isinstance(count, bool)
        or not isinstance(done, bool)
    ):
        raise CorruptRecordError(DAYS, key)
    return DailyRecord(date=day, count=count, done=done)


def load_day(store: RecordStore, key: str, lock: bool = False) -> Optional[DailyRecord]:
    raw = store.get(DAYS, key, lock=lock)
    if raw is None:
        return None
    return decode_day(key, raw)


def save_day(store: RecordStore, record: DailyRecord) -> None:
    store.put(DAYS, record.date, json.dumps(asdict(record)).encode("utf-8"))


def load_streak(store: RecordStore) -> StreakState:
    raw = store.get(STREAK, STREAK_KEY)
    if raw is None:
        return StreakState()
    try:
        data = json.loads(raw)
        return StreakState(
            current=int(data.get("current", 0)),
            longest=int(data.get("longest", 0)),
            lastDate=str(data.get("lastDate", "")),
        )
    except (ValueError, TypeError, AttributeError) as exc:
        raise CorruptRecordError(STREAK, STREAK_KEY) from exc


def save_streak(store: RecordStore, streak: StreakState) -> None:
    store.put(STREAK, STREAK_KEY, json.dumps(asdict(streak)).encode("utf-8"))
