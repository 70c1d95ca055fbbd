"""Daily context API routes."""
from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from mood_analytics import ContextRecord, MoodAnalyticsEngine

from ..database import get_engine
from ..models.context import DayContext, DayContextRequest

router = APIRouter(prefix="/api/mood", tags=["Day Context"])


def _to_context(record: ContextRecord) -> DayContext:
    """Convert an engine ContextRecord to its API model."""
    return DayContext.model_validate(
        {**record.to_dict(), "sleep_hours": record.sleep_hours}
    )


@router.get("/context/{day}", response_model=DayContext)
async def get_day_context(day: date, engine: MoodAnalyticsEngine = Depends(get_engine)):
    """Get the context factors recorded for a day."""
    record = await engine.load_context(day)
    if record is None:
        raise HTTPException(status_code=404, detail=f"No context recorded for {day}")
    return _to_context(record)


@router.put("/context/{day}", response_model=DayContext)
async def save_day_context(
    day: date,
    body: DayContextRequest,
    engine: MoodAnalyticsEngine = Depends(get_engine),
):
    """Save (replace) the context factors for a day."""
    payload = body.model_dump(mode="json")
    payload["date"] = day.isoformat()
    try:
        record = ContextRecord.from_dict(payload)
        saved = await engine.save_context(record)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if not saved:
        raise HTTPException(status_code=500, detail="Context could not be saved")
    return _to_context(record)


@router.delete("/context/{day}")
async def delete_day_context(day: date, engine: MoodAnalyticsEngine = Depends(get_engine)):
    """Delete the context factors for a day."""
    if not await engine.delete_context(day):
        raise HTTPException(status_code=404, detail=f"No context recorded for {day}")
    return {"deleted": True, "date": day.isoformat()}
