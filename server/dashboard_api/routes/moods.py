"""Mood entry, trend and statistics API routes."""
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from mood_analytics import MoodAnalyticsEngine
from mood_analytics import models as core

from ..database import get_engine
from ..models.mood import (
    DayAggregate,
    EarliestDate,
    MoodEntry,
    MoodEntryRequest,
    MoodStatistics,
    SegmentEntry,
)

router = APIRouter(prefix="/api/mood", tags=["Mood"])


def _to_day(aggregate: core.DayAggregate, grace_hours: int = 0) -> DayAggregate:
    """Convert an engine DayAggregate to its API model."""
    return DayAggregate(
        date=aggregate.date.isoformat(),
        entries=[SegmentEntry.model_validate(e.to_dict()) for e in aggregate.entries],
        has_any_mood=aggregate.has_any_mood,
        day_average=aggregate.day_average,
        was_logged_live=aggregate.was_logged_live(grace_hours),
    )


def _resolve_range(
    engine: MoodAnalyticsEngine, start: Optional[date], end: Optional[date], days: int
) -> tuple[date, date]:
    end = end or engine.today()
    start = start or end - timedelta(days=days - 1)
    if start > end:
        raise HTTPException(status_code=422, detail="start must not be after end")
    return start, end


@router.get("/trends", response_model=list[DayAggregate])
async def get_mood_trends(
    start: Optional[date] = Query(default=None, description="First day (inclusive)"),
    end: Optional[date] = Query(default=None, description="Last day (defaults to today)"),
    days: int = Query(default=30, ge=1, le=1095, description="Range length when start is omitted"),
    engine: MoodAnalyticsEngine = Depends(get_engine),
):
    """Get one aggregate per calendar day of the range."""
    start, end = _resolve_range(engine, start, end, days)
    aggregates = await engine.get_mood_trends(start, end)
    return [_to_day(a, engine.settings.live_grace_hours) for a in aggregates]


@router.get("/statistics", response_model=MoodStatistics)
async def get_statistics(
    start: Optional[date] = Query(default=None),
    end: Optional[date] = Query(default=None),
    days: int = Query(default=30, ge=1, le=1095),
    engine: MoodAnalyticsEngine = Depends(get_engine),
):
    """Get statistics for the range; streaks always use full history."""
    start, end = _resolve_range(engine, start, end, days)
    aggregates = await engine.get_mood_trends(start, end)
    stats = await engine.calculate_statistics(aggregates)
    return MoodStatistics.model_validate(stats.to_dict())


@router.get("/earliest", response_model=EarliestDate)
async def get_earliest_mood_date(engine: MoodAnalyticsEngine = Depends(get_engine)):
    """Get the date of the first logged mood."""
    earliest = await engine.get_earliest_mood_date()
    return EarliestDate(earliest_date=earliest.isoformat() if earliest else None)


@router.get("/entries/{day}/{segment}", response_model=MoodEntry)
async def get_mood_entry(
    day: date, segment: int, engine: MoodAnalyticsEngine = Depends(get_engine)
):
    """Get a single mood entry."""
    record = await engine.load_mood(day, segment)
    if record is None:
        raise HTTPException(status_code=404, detail=f"No mood logged for {day} segment {segment}")
    return MoodEntry.model_validate(record.to_dict())


@router.put("/entries/{day}/{segment}", response_model=MoodEntry)
async def save_mood_entry(
    day: date,
    segment: int,
    body: MoodEntryRequest,
    engine: MoodAnalyticsEngine = Depends(get_engine),
):
    """Save or overwrite a mood entry (rating 1-10, segment 0-2)."""
    try:
        saved = await engine.save_mood(day, segment, body.rating, body.note)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if not saved:
        raise HTTPException(status_code=500, detail="Mood entry could not be saved")

    record = await engine.load_mood(day, segment)
    if record is None:
        raise HTTPException(status_code=500, detail="Mood entry could not be read back")
    return MoodEntry.model_validate(record.to_dict())


@router.delete("/entries/{day}/{segment}")
async def delete_mood_entry(
    day: date, segment: int, engine: MoodAnalyticsEngine = Depends(get_engine)
):
    """Delete a mood entry."""
    if not await engine.delete_mood(day, segment):
        raise HTTPException(status_code=404, detail=f"No mood logged for {day} segment {segment}")
    return {"deleted": True, "date": day.isoformat(), "segment": segment}


@router.get("/health")
async def mood_health(engine: MoodAnalyticsEngine = Depends(get_engine)):
    """Engine and insight cache status."""
    return {"status": "healthy", "service": "mood-analytics", **engine.get_stats()}
