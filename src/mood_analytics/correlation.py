"""
Correlation Analyzer.

Measures how each contextual factor (weather, sleep, exercise, social
activity, hobbies, work stress, custom tags) relates to the day-average
mood. Each factor value defines a group of days; the group's effect size
is its mean difference from the overall mean, in overall standard
deviations, clipped into [0, 1].
"""

import logging
import math
import statistics
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from .models import ContextRecord, CorrelationInsight, DateWindow, SocialActivity

logger = logging.getLogger(__name__)

DEFAULT_MIN_SAMPLES = 3
DEFAULT_MIN_STRENGTH = 0.2


@dataclass(frozen=True)
class Factor:
    """A factor dimension and how its groups are reported."""

    name: str
    category: str
    presence: bool = False  # only the presence group is reported


WEATHER = Factor("weather", "weather")
TEMPERATURE = Factor("temperature", "weather")
SLEEP_QUALITY = Factor("sleep_quality", "sleep")
SLEEP_DURATION = Factor("sleep_duration", "sleep")
EXERCISE = Factor("exercise", "exercise")
SOCIAL = Factor("social", "social", presence=True)
HOBBY = Factor("hobby", "custom", presence=True)
WORK_STRESS = Factor("work_stress", "stress")
CUSTOM_TAG = Factor("custom_tag", "custom", presence=True)

FACTORS = [
    WEATHER,
    TEMPERATURE,
    SLEEP_QUALITY,
    SLEEP_DURATION,
    EXERCISE,
    SOCIAL,
    HOBBY,
    WORK_STRESS,
    CUSTOM_TAG,
]

SOCIAL_LABELS = {
    SocialActivity.FRIENDS.value: "time with friends",
    SocialActivity.FAMILY.value: "time with family",
    SocialActivity.WORK.value: "socializing at work",
    SocialActivity.PARTY.value: "parties",
    SocialActivity.DATE.value: "dates",
}


# ============================================================================
# Bucketing
# ============================================================================


def temperature_band(celsius: float) -> str:
    if celsius < 10:
        return "cold"
    if celsius <= 20:
        return "mild"
    return "warm"


def sleep_quality_bucket(quality: float) -> str:
    if quality <= 4:
        return "poor"
    if quality < 8:
        return "fair"
    return "good"


def sleep_duration_bucket(hours: float) -> str:
    if hours < 6:
        return "short"
    if hours <= 8:
        return "adequate"
    return "long"


def stress_bucket(stress: float) -> str:
    if stress <= 3:
        return "low"
    if stress <= 6:
        return "moderate"
    return "high"


def factor_values(record: ContextRecord) -> List[Tuple[Factor, str]]:
    """Every (factor, value) group a day belongs to."""
    values = []
    if record.weather is not None:
        values.append((WEATHER, record.weather.value))
    if record.temperature_celsius is not None:
        values.append((TEMPERATURE, temperature_band(record.temperature_celsius)))
    if record.sleep_quality is not None:
        values.append((SLEEP_QUALITY, sleep_quality_bucket(record.sleep_quality)))
    if record.sleep_hours is not None:
        values.append((SLEEP_DURATION, sleep_duration_bucket(record.sleep_hours)))
    if record.exercise_level is not None:
        values.append((EXERCISE, record.exercise_level.value))
    for activity in set(record.social_activities):
        if activity != SocialActivity.NONE:
            values.append((SOCIAL, activity.value))
    for hobby in set(h.strip().lower() for h in record.hobbies if h.strip()):
        values.append((HOBBY, hobby))
    if record.work_stress is not None:
        values.append((WORK_STRESS, stress_bucket(record.work_stress)))
    for tag in set(t.strip().lower() for t in record.custom_tags if t.strip()):
        values.append((CUSTOM_TAG, tag))
    return values


def factor_label(factor: Factor, value: str) -> str:
    """Human-readable phrase for a factor group, e.g. 'good sleep quality'."""
    if factor is WEATHER:
        return f"{value} weather"
    if factor is TEMPERATURE:
        return f"{value} temperatures"
    if factor is SLEEP_QUALITY:
        return f"{value} sleep quality"
    if factor is SLEEP_DURATION:
        return f"{value} sleep"
    if factor is EXERCISE:
        return "no exercise" if value == "none" else f"{value} exercise"
    if factor is SOCIAL:
        return SOCIAL_LABELS.get(value, value)
    if factor is WORK_STRESS:
        return f"{value} work stress"
    if factor is CUSTOM_TAG:
        return f"the '{value}' tag"
    return value


# ============================================================================
# Analysis
# ============================================================================


def pearson(xs: List[float], ys: List[float]) -> Optional[float]:
    """Pearson correlation coefficient, or None when undefined."""
    if len(xs) != len(ys) or len(xs) < 2:
        return None
    mean_x = statistics.mean(xs)
    mean_y = statistics.mean(ys)
    cov = sum((x - mean_x) * (y - mean_y) for x, y in zip(xs, ys))
    var_x = sum((x - mean_x) ** 2 for x in xs)
    var_y = sum((y - mean_y) ** 2 for y in ys)
    if var_x == 0 or var_y == 0:
        return None
    return cov / math.sqrt(var_x * var_y)


def analyze_correlations(
    context_records: Iterable[ContextRecord],
    mood_by_date: Dict[date, float],
    window: DateWindow,
    min_samples: int = DEFAULT_MIN_SAMPLES,
    min_strength: float = DEFAULT_MIN_STRENGTH,
) -> List[CorrelationInsight]:
    """
    Find factor groups whose mood differs from the overall mean.

    Args:
        context_records: Context records (any order, extra dates ignored)
        mood_by_date: Day-average mood keyed by date
        window: Only days inside this window are considered
        min_samples: Minimum days in a group before it is scored
        min_strength: Minimum strength for an insight to be returned

    Returns:
        Insights sorted by strength desc, sample size desc, then factor/value
    """
    days: Dict[date, Tuple[ContextRecord, float]] = {}
    for record in context_records:
        if record.date in window and record.date in mood_by_date:
            days[record.date] = (record, mood_by_date[record.date])

    if len(days) < 2:
        logger.debug(f"[CORRELATION] Only {len(days)} days with context and mood")
        return []

    moods = [mood for _, mood in days.values()]
    overall_mean = statistics.mean(moods)
    overall_std = statistics.pstdev(moods)
    if overall_std == 0:
        logger.debug("[CORRELATION] No mood variance in window, nothing to correlate")
        return []

    groups: Dict[Tuple[Factor, str], List[float]] = {}
    for record, mood in days.values():
        for factor, value in factor_values(record):
            groups.setdefault((factor, value), []).append(mood)

    ordinal_r = {
        SLEEP_QUALITY: _ordinal_pearson(days.values(), lambda r: r.sleep_quality),
        WORK_STRESS: _ordinal_pearson(days.values(), lambda r: r.work_stress),
    }

    insights = []
    for (factor, value), group in groups.items():
        if len(group) < min_samples:
            continue
        group_mean = statistics.mean(group)
        strength = min(max(abs(group_mean - overall_mean) / overall_std, 0.0), 1.0)
        if strength < min_strength:
            continue

        insight = _build_insight(
            factor, value, group, group_mean, overall_mean, strength
        )
        if factor in ordinal_r and ordinal_r[factor] is not None:
            insight.data["pearson_r"] = ordinal_r[factor]
        insights.append(insight)

    insights.sort(key=lambda i: (-i.strength, -i.sample_size, i.factor, i.value))

    logger.info(
        f"[CORRELATION] {len(insights)} correlations over {len(days)} days "
        f"({window.start}..{window.end})"
    )
    return insights


def _ordinal_pearson(days, raw_value) -> Optional[float]:
    xs, ys = [], []
    for record, mood in days:
        value = raw_value(record)
        if value is not None:
            xs.append(float(value))
            ys.append(mood)
    return pearson(xs, ys)


def _build_insight(
    factor: Factor,
    value: str,
    group: List[float],
    group_mean: float,
    overall_mean: float,
    strength: float,
) -> CorrelationInsight:
    effect = group_mean - overall_mean
    label = factor_label(factor, value)
    direction = "higher" if effect > 0 else "lower"
    verb = "lifts" if effect > 0 else "lowers"

    return CorrelationInsight(
        title=f"{label[0].upper()}{label[1:]} {verb} your mood",
        description=(
            f"On days with {label}, your mood averages {group_mean:.1f}, "
            f"{abs(effect):.1f} points {direction} than your overall "
            f"{overall_mean:.1f} across {len(group)} days."
        ),
        category=factor.category,
        strength=strength,
        factor=factor.name,
        value=value,
        sample_size=len(group),
        group_mean=group_mean,
        overall_mean=overall_mean,
        data={
            "label": label,
            "direction": "positive" if effect > 0 else "negative",
            "difference": effect,
        },
    )
