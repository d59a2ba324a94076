"""
Tracker router. Every route requires HTTP Basic Auth.

GET  /api/today
POST /api/today/complete
GET  /api/calendar
GET  /api/streak
"""
from __future__ import annotations

import secrets
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.orm import Session
from starlette import status

from app.core.config import settings
from app.db.base import get_db
from app.schemas.tracker import CalendarResponse, DayResponse, StreakResponse
from app.services.calendar import previous_months, project_calendar, resolve_year
from app.services.days import complete_today, ensure_today
from app.services.streak import get_streak

_basic = HTTPBasic(realm="Push Up Tracker", auto_error=False)


def require_user(credentials: Optional[HTTPBasicCredentials] = Depends(_basic)) -> str:
    ok = credentials is not None and (
        secrets.compare_digest(credentials.username.encode(), settings.USERNAME.encode())
        & secrets.compare_digest(credentials.password.encode(), settings.PASSWORD.encode())
    )
    if not ok:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized.",
            headers={"WWW-Authenticate": 'Basic realm="Push Up Tracker"'},
        )
    return credentials.username


router = APIRouter(prefix="/api", tags=["tracker"], dependencies=[Depends(require_user)])


@router.get(
    "/today",
    response_model=DayResponse,
    summary="Today's target and completion flag",
)
def today(db: Session = Depends(get_db)):
    """Return today's record, creating it with the progressive target if needed."""
    return ensure_today(db=db)


@router.post(
    "/today/complete",
    response_model=DayResponse,
    summary="Mark today as done",
    responses={200: {"description": "Today's record, now done. Repeat calls are no-ops."}},
)
def today_complete(db: Session = Depends(get_db)):
    return complete_today(db=db)


@router.get(
    "/calendar",
    response_model=CalendarResponse,
    summary="Per-day completion map for a year",
)
def calendar(
    year: Optional[str] = Query(
        default=None,
        description="Four-digit year. Missing or malformed values mean the current year.",
        examples=["2026"],
    ),
    db: Session = Depends(get_db),
):
    projection = project_calendar(db=db, year=resolve_year(year))
    return CalendarResponse(
        year=projection.year,
        startMonth=projection.start_month - 1,
        startYear=projection.start_year,
        days={
            key: DayResponse.model_validate(record)
            for key, record in projection.days.items()
        },
        previousMonths=previous_months(projection),
    )


@router.get(
    "/streak",
    response_model=StreakResponse,
    summary="Current and longest streak",
)
def streak(db: Session = Depends(get_db)):
    return get_streak(db=db)
