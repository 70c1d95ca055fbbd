"""Generated insight and correlation API routes."""
from fastapi import APIRouter, Depends, Query

from mood_analytics import DateWindow, MoodAnalyticsEngine

from ..database import get_engine
from ..models.insights import CorrelationInsight, SmartInsight

router = APIRouter(prefix="/api/mood", tags=["Mood Insights"])


@router.get("/insights", response_model=list[SmartInsight])
async def get_insights(
    force_refresh: bool = Query(default=False, description="Recompute instead of using the cache"),
    engine: MoodAnalyticsEngine = Depends(get_engine),
):
    """
    Get ranked insights for the rolling analysis window.

    Results are cached until the next mood or context write.
    """
    insights = await engine.generate_insights(force_refresh=force_refresh)
    return [SmartInsight.model_validate(i.to_dict()) for i in insights]


@router.get("/correlations", response_model=list[CorrelationInsight])
async def get_correlations(
    days: int = Query(default=90, ge=7, le=365, description="Number of days to analyze"),
    engine: MoodAnalyticsEngine = Depends(get_engine),
):
    """Get context factors that correlate with mood, strongest first."""
    window = DateWindow.ending(engine.today(), days)
    correlations = await engine.generate_correlation_insights(window)
    return [CorrelationInsight.model_validate(c.to_dict()) for c in correlations]
