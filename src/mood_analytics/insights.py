"""
Insight Synthesizer.

Runs every detector over one AnalysisSnapshot and merges the candidates
into a ranked, de-duplicated list. A detector that raises is logged and
contributes nothing; the worst outcome of a run is an empty list.
"""

import logging
from typing import Dict, Iterable, List, Optional

from .config import AnalyticsSettings
from .detectors import (
    AnalysisSnapshot,
    CelebrationDetector,
    CorrelationDetector,
    Detector,
    ForecastDetector,
    StreakDetector,
    TimeOfDayDetector,
    TrendDetector,
    WeatherDetector,
    WeekdayPatternDetector,
)
from .models import SmartInsight

logger = logging.getLogger(__name__)

DEFAULT_MAX_INSIGHTS = 10


def default_detectors(settings: Optional[AnalyticsSettings] = None) -> List[Detector]:
    """Build the standard detector set from settings."""
    settings = settings or AnalyticsSettings()
    return [
        StreakDetector(),
        TrendDetector(),
        CorrelationDetector(
            top_n=settings.correlation_top_n,
            min_strength=settings.correlation_insight_min_strength,
        ),
        ForecastDetector(weekday_weight=settings.forecast_weekday_weight),
        WeekdayPatternDetector(),
        CelebrationDetector(),
        TimeOfDayDetector(),
        WeatherDetector(min_samples=settings.correlation_min_samples),
    ]


def _is_better(candidate: SmartInsight, current: SmartInsight) -> bool:
    if candidate.priority.rank != current.priority.rank:
        return candidate.priority.rank > current.priority.rank
    return (candidate.confidence or 0.0) > (current.confidence or 0.0)


def merge_insights(
    candidates: Iterable[SmartInsight],
    max_insights: int = DEFAULT_MAX_INSIGHTS,
) -> List[SmartInsight]:
    """
    De-duplicate, rank and cap insight candidates.

    Candidates sharing (type, subject) collapse to the one with the higher
    priority, then the higher confidence. The result is ordered by priority,
    confidence and creation time (all descending).

    Args:
        candidates: Insights from all detectors
        max_insights: Maximum number of insights to return

    Returns:
        Ranked list of at most max_insights insights
    """
    best: Dict[tuple, SmartInsight] = {}
    for candidate in candidates:
        current = best.get(candidate.dedup_key)
        if current is None or _is_better(candidate, current):
            best[candidate.dedup_key] = candidate

    ranked = sorted(
        best.values(),
        key=lambda i: (
            -i.priority.rank,
            -(i.confidence if i.confidence is not None else -1.0),
            -i.created_at.timestamp(),
            i.id,
        ),
    )
    return ranked[:max_insights]


class InsightSynthesizer:
    """Composes detectors over a snapshot."""

    def __init__(
        self,
        detectors: Optional[List[Detector]] = None,
        max_insights: int = DEFAULT_MAX_INSIGHTS,
    ):
        """
        Initialize the synthesizer.

        Args:
            detectors: Detector instances (defaults to the standard set)
            max_insights: Cap on returned insights
        """
        self.detectors = detectors if detectors is not None else default_detectors()
        self.max_insights = max_insights

    def synthesize(self, snapshot: AnalysisSnapshot) -> List[SmartInsight]:
        """Run all detectors and merge their candidates."""
        candidates: List[SmartInsight] = []
        for detector in self.detectors:
            name = getattr(detector, "name", type(detector).__name__)
            try:
                found = detector.detect(snapshot)
            except Exception as e:
                logger.error(f"[INSIGHTS] Detector '{name}' failed: {e}", exc_info=True)
                continue
            logger.debug(f"[INSIGHTS] Detector '{name}' proposed {len(found)} insights")
            candidates.extend(found)

        merged = merge_insights(candidates, self.max_insights)
        logger.info(
            f"[INSIGHTS] {len(merged)} insights from {len(candidates)} candidates "
            f"for {snapshot.today}"
        )
        return merged
