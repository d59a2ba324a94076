"""
Daily record lifecycle.

One record per local calendar day, created lazily with the target for that
day and never overwritten afterwards. The only mutation is the one-way
`done` transition performed by `complete_today`.

Public API
----------
local_today()                -> date
ensure_today(db, today)      -> DailyRecord
complete_today(db, today)    -> DailyRecord
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ClockSkewError, InvalidOriginError
from app.services.progression import calculate_target
from app.services.records import DailyRecord, load_day, save_day
from app.services.store import CONFIG, RecordStore
from app.services.streak import record_completion

logger = logging.getLogger(__name__)

FIRST_DAY_KEY = "firstDay"


def local_today() -> date:
    # Every date key uses local wall-clock time; never mix in UTC here.
    return datetime.now().date()


# ---------------------------------------------------------------------------
# Store helpers (no commit)
# ---------------------------------------------------------------------------

def read_origin(store: RecordStore) -> Optional[date]:
    raw = store.get(CONFIG, FIRST_DAY_KEY)
    if raw is None:
        return None
    value = raw.decode("utf-8", errors="replace")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidOriginError(value) from exc


def target_for(store: RecordStore, day: date) -> int:
    """Target for `day`, recording `day` as the origin when none exists yet."""
    origin = read_origin(store)
    if origin is None:
        store.put(CONFIG, FIRST_DAY_KEY, day.isoformat().encode("utf-8"))
        logger.info("Tracking origin set to %s", day)
        return settings.START_COUNT

    days_since = (day - origin).days
    if days_since < 0:
        raise ClockSkewError(origin=origin, today=day)
    return calculate_target(settings.START_COUNT, days_since)


def ensure_day(store: RecordStore, day: date) -> DailyRecord:
    key = day.isoformat()
    existing = load_day(store, key, lock=True)
    if existing is not None:
        return existing

    record = DailyRecord(date=key, count=target_for(store, day), done=False)
    save_day(store, record)
    logger.info("Created record for %s with target %d", key, record.count)
    return record


# ---------------------------------------------------------------------------
# Public operations
# ---------------------------------------------------------------------------

def ensure_today(db: Session, today: Optional[date] = None) -> DailyRecord:
    store = RecordStore(db)
    with store.transaction():
        return ensure_day(store, today or local_today())


def complete_today(db: Session, today: Optional[date] = None) -> DailyRecord:
    """
    Mark today done and advance the streak, in one transaction.

    Calling it again on a day already marked done returns the record
    untouched; the streak update below must run at most once per day.
    """
    day = today or local_today()
    store = RecordStore(db)
    with store.transaction():
        record = ensure_day(store, day)
        if record.done:
            return record

        record.done = True
        save_day(store, record)
        streak = record_completion(store, day)
    logger.info(
        "Completed %s (target %d); streak current=%d longest=%d",
        record.date, record.count, streak.current, streak.longest,
    )
    return record
