"""Weekly summary API routes."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from mood_analytics import MoodAnalyticsEngine

from ..database import get_engine
from ..models.summary import WeeklySummary

router = APIRouter(prefix="/api/mood", tags=["Weekly Summary"])


@router.get("/weekly-summary", response_model=WeeklySummary)
async def get_weekly_summary(
    week_start: Optional[date] = Query(default=None, description="First day of the week (defaults to this Monday)"),
    engine: MoodAnalyticsEngine = Depends(get_engine),
):
    """Get statistics, highlights, concerns and recommendations for a week."""
    summary = await engine.generate_weekly_summary(week_start)
    return WeeklySummary.model_validate(summary.to_dict())
