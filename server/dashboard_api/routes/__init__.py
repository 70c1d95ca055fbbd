"""API route modules."""
from .moods import router as moods_router
from .context import router as context_router
from .insights import router as insights_router
from .summary import router as summary_router

__all__ = [
    "moods_router",
    "context_router",
    "insights_router",
    "summary_router",
]
