"""Action step catalog attached to generated insights."""

from typing import List, Optional

from .models import ExerciseLevel, SocialActivity, WeatherCondition

WEATHER_STEPS = {
    WeatherCondition.RAINY: [
        "Set up a cozy indoor space with warm lighting",
        "Plan engaging indoor activities (puzzles, books, crafts)",
        "Use a light therapy lamp for 20-30 minutes",
        "Schedule video calls with friends and family",
        "Prepare comfort foods and warm beverages",
    ],
    WeatherCondition.CLOUDY: [
        "Increase indoor lighting brightness",
        "Consider a vitamin D supplement",
        "Plan energizing indoor activities",
        "Practice gratitude journaling",
        "Get outside even for brief moments",
    ],
    WeatherCondition.STORMY: [
        "Create a calm, secure indoor environment",
        "Practice deep breathing or meditation",
        "Avoid caffeine which can increase anxiety",
        "Plan soothing activities like reading or warm baths",
        "Stay connected with supportive people",
    ],
    WeatherCondition.SNOWY: [
        "Embrace winter activities if you enjoy them",
        "Plan cozy indoor activities",
        "Make warm, nourishing meals",
        "Use bright lighting to combat seasonal effects",
        "Connect with others to combat isolation",
    ],
    WeatherCondition.FOGGY: [
        "Use bright indoor lighting",
        "Plan clear, focused activities",
        "Take extra care with transportation",
        "Create structure in your day",
        "Practice mindfulness to stay grounded",
    ],
}

DEFAULT_WEATHER_STEPS = [
    "Prepare indoor mood-boosting activities as backup",
    "Ensure you have good lighting in your environment",
    "Stay connected with supportive people",
    "Have comfort strategies ready for challenging weather",
]

EXERCISE_STEPS = {
    ExerciseLevel.LIGHT: [
        "Take a 15-20 minute walk during lunch breaks",
        "Try gentle yoga or stretching routines",
        "Dance to your favorite music for 10 minutes",
        "Do light household activities or gardening",
    ],
    ExerciseLevel.MODERATE: [
        "Schedule 30-45 minutes of cardio 3-4 times this week",
        "Try a fitness class or follow online workout videos",
        "Go for bike rides or swimming sessions",
        "Play active sports you enjoy with friends",
    ],
    ExerciseLevel.INTENSE: [
        "Set a new personal fitness challenge or goal",
        "Try interval training or weightlifting sessions",
        "Join a competitive sports league or activity",
    ],
}

DEFAULT_EXERCISE_STEPS = [
    "Find ways to move your body that feel enjoyable",
    "Start with small, manageable activities",
    "Listen to your body and adjust as needed",
]

SOCIAL_STEPS = {
    SocialActivity.FRIENDS: [
        "Schedule a coffee date or call with a close friend",
        "Plan a fun group activity for this weekend",
        "Join a hobby group or meetup",
    ],
    SocialActivity.FAMILY: [
        "Plan quality time with family members",
        "Schedule a family meal or activity",
        "Call a family member you miss",
    ],
    SocialActivity.WORK: [
        "Suggest a team coffee break or lunch",
        "Join or organize workplace social events",
        "Find opportunities for positive work interactions",
    ],
    SocialActivity.PARTY: [
        "Host a small gathering for friends",
        "Say yes to the next social invitation",
        "Plan a celebration for recent accomplishments",
    ],
    SocialActivity.DATE: [
        "Plan a special date with your partner",
        "Try a new activity together",
        "Schedule regular quality time together",
    ],
}

DEFAULT_SOCIAL_STEPS = [
    "Reach out to people who make you feel good",
    "Balance social time with alone time as needed",
    "Notice which interactions drain your energy",
]

SLEEP_STEPS = [
    "Keep a consistent bedtime and wake time, even on weekends",
    "Avoid screens for 30 minutes before bed",
    "Keep your bedroom cool, dark and quiet",
    "Limit caffeine after early afternoon",
    "Track what helps you achieve better sleep",
]

STRESS_STEPS = [
    "Identify your top 3 work stressors this week",
    "Practice 5-minute breathing exercises during high stress",
    "Set boundaries around work communications",
    "Plan stress-relief activities for high-stress days",
    "Consider delegating or postponing non-urgent tasks",
]

REINFORCE_STEPS = [
    "Notice what made these days work and repeat it",
    "Schedule more of this into your week",
    "Keep logging so you can see the effect over time",
]

GENERIC_SUGGESTION_STEPS = [
    "Notice how this factor shows up on your lower days",
    "Try adjusting it for a week and compare your ratings",
    "Plan a mood-boosting activity for days when it occurs",
]

TIME_OF_DAY_STEPS = {
    0: [
        "Schedule important tasks in the morning",
        "Plan challenging conversations for morning hours",
        "Try 10 minutes of morning sunlight exposure",
    ],
    1: [
        "Block early afternoon for your most demanding work",
        "Use lunch break for energizing activities",
        "Save routine tasks for your lower periods",
    ],
    2: [
        "Save creative tasks for the evening",
        "Plan social activities for evening hours",
        "Use mornings for routine or administrative tasks",
    ],
}

DECLINE_STEPS = [
    "Reflect on what has changed in your routine recently",
    "Prioritize sleep and stress management",
    "Reach out to supportive friends or family",
    "Schedule activities that usually boost your mood",
    "Be extra kind to yourself during this time",
]

LOW_MOOD_STEPS = [
    "Reach out to someone you trust and let them know how you feel",
    "Review what self-care strategies have helped you before",
    "Think about professional support if this continues",
    "Focus on small, manageable goals",
]

STREAK_STEPS = [
    "Set a reminder for your usual mood logging time",
    "Prepare a small celebration for reaching your next milestone",
    "Share your progress with someone who supports you",
]

CELEBRATION_STEPS = [
    "Take a moment to acknowledge this achievement",
    "Notice what contributed to this great day",
    "Plan to repeat the successful elements",
]

GOOD_DAY_STEPS = [
    "Plan something special to make the most of your good day",
    "Tackle that challenging task you've been postponing",
    "Share your positive energy with others",
]

HARD_DAY_STEPS = [
    "Plan extra self-care activities",
    "Schedule easier tasks and build in breaks",
    "Prepare your favorite comfort strategies",
    "Be extra kind to yourself",
]

NEUTRAL_DAY_STEPS = [
    "Add one mood-boosting activity to your day",
    "Plan something to look forward to",
    "Practice your favorite stress management technique",
]


def weather_steps(condition: Optional[WeatherCondition]) -> List[str]:
    return list(WEATHER_STEPS.get(condition, DEFAULT_WEATHER_STEPS))


def exercise_steps(level: Optional[ExerciseLevel]) -> List[str]:
    return list(EXERCISE_STEPS.get(level, DEFAULT_EXERCISE_STEPS))


def social_steps(activity: Optional[SocialActivity]) -> List[str]:
    return list(SOCIAL_STEPS.get(activity, DEFAULT_SOCIAL_STEPS))


def weekday_steps(best_day: str, worst_day: str) -> List[str]:
    """Steps for arranging the week around its best and worst days."""
    return [
        f"Schedule your biggest challenges and opportunities on {best_day}s",
        f"Plan something to look forward to every {worst_day}",
        f"Use {best_day}s for important decisions and conversations",
        f"Build in extra self-care on {worst_day}s",
        f"Consider lighter workloads on {worst_day} when possible",
    ]


def suggestion_steps(factor: str, value: str) -> List[str]:
    """
    Steps for a factor group that lowers mood.

    Args:
        factor: Correlation factor name (e.g. "sleep_quality", "weather")
        value: The factor group value (e.g. "poor", "rainy")
    """
    if factor in ("sleep_quality", "sleep_duration"):
        return list(SLEEP_STEPS)
    if factor == "work_stress":
        return list(STRESS_STEPS)
    if factor in ("weather", "temperature"):
        try:
            return weather_steps(WeatherCondition(value))
        except ValueError:
            return list(DEFAULT_WEATHER_STEPS)
    if factor == "exercise":
        # Low mood on an exercise level suggests trying the next one up
        return exercise_steps(ExerciseLevel.LIGHT if value == "none" else None)
    if factor == "social":
        return list(DEFAULT_SOCIAL_STEPS)
    return list(GENERIC_SUGGESTION_STEPS)


def reinforce_steps(factor: str, value: str) -> List[str]:
    """Steps for a factor group that lifts mood."""
    if factor == "exercise":
        try:
            return exercise_steps(ExerciseLevel(value))
        except ValueError:
            return list(DEFAULT_EXERCISE_STEPS)
    if factor == "social":
        try:
            return social_steps(SocialActivity(value))
        except ValueError:
            return list(DEFAULT_SOCIAL_STEPS)
    if factor in ("sleep_quality", "sleep_duration"):
        return [
            "Maintain the bedtime routine behind your best nights",
            "Track what helps you achieve better sleep",
            "Protect your sleep schedule on busy days",
        ]
    return list(REINFORCE_STEPS)
