"""
Calendar projection: which months to draw for a year and which days are done.

Read-only. Unreadable day records are skipped so one bad value never hides
the rest of the year.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import CorruptRecordError
from app.services.days import local_today
from app.services.records import DailyRecord, decode_day
from app.services.store import DAYS, RecordStore

logger = logging.getLogger(__name__)


@dataclass
class CalendarProjection:
    year: int
    start_month: int         # 1-12
    start_year: int
    days: dict[str, DailyRecord] = field(default_factory=dict)


def resolve_year(raw: Optional[str], today: Optional[date] = None) -> int:
    """Parse a `year` query value, falling back to the current year."""
    fallback = (today or local_today()).year
    if raw is None:
        return fallback
    raw = raw.strip()
    if len(raw) != 4 or not raw.isdigit():
        return fallback
    return int(raw)


def project_calendar(db: Session, year: int, today: Optional[date] = None) -> CalendarProjection:
    store = RecordStore(db)

    start = _first_record_date(store) or (today or local_today())
    projection = CalendarProjection(
        year=year,
        start_month=start.month,
        start_year=start.year,
    )

    for key, raw in store.items(DAYS, prefix=f"{year:04d}-"):
        try:
            projection.days[key] = decode_day(key, raw)
        except CorruptRecordError:
            logger.warning("Skipping unreadable day record %s", key)
    return projection


def previous_months(projection: CalendarProjection, today: Optional[date] = None) -> list[str]:
    """
    `YYYY-MM` of the months in the projected year that lie strictly before the
    current month and on or after the first tracked month.
    """
    today = today or local_today()
    current = (today.year, today.month)
    origin = (projection.start_year, projection.start_month)
    return [
        f"{projection.year:04d}-{month:02d}"
        for month in range(1, 13)
        if origin <= (projection.year, month) < current
    ]


def _first_record_date(store: RecordStore) -> Optional[date]:
    key = store.first_key(DAYS)
    if key is None:
        return None
    try:
        return date.fromisoformat(key)
    except ValueError:
        logger.warning("Ignoring malformed first day key %r", key)
        return None
