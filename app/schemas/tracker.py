"""
Tracker schemas.

GET  /api/today           → DayResponse
POST /api/today/complete  → DayResponse
GET  /api/calendar        → CalendarResponse
GET  /api/streak          → StreakResponse

Field names follow the JSON the web client already reads (camelCase).
"""
from pydantic import BaseModel, ConfigDict, Field


class DayResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: str = Field(examples=["2026-02-20"])
    count: int = Field(description="Push-ups required that day.")
    done: bool


class StreakResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    current: int = Field(description="Consecutive completed days ending at lastDate.")
    longest: int = Field(description="Highest value `current` has ever reached.")
    lastDate: str = Field(description="Date of the most recent completion, or empty.")


class CalendarResponse(BaseModel):
    year: int
    startMonth: int = Field(description="Month of the first record, 0-based (January = 0).")
    startYear: int
    days: dict[str, DayResponse]
    previousMonths: list[str] = Field(
        description="YYYY-MM of months before the current one and on/after the first record.",
    )
