"""
Energy service.

Default energy profile and time-of-day suitability checks.
"""

from typing import Optional

from zmanit.models.energy import CategoryPreference, EnergyProfile, EnergyWindow, TimeOptimality
from zmanit.models.enums import ScheduleKind

EARLY_MORNING = "early_morning"
LATE_MORNING = "late_morning"
EARLY_AFTERNOON = "early_afternoon"
LATE_AFTERNOON = "late_afternoon"

HOME_CATEGORIES = ("home", "family", "kids", "personal")


def default_energy_windows() -> list[EnergyWindow]:
    return [
        EnergyWindow(id=EARLY_MORNING, label="Early morning", start=8 * 60 + 30, end=10 * 60),
        EnergyWindow(id=LATE_MORNING, label="Late morning", start=10 * 60, end=12 * 60),
        EnergyWindow(id=EARLY_AFTERNOON, label="Midday", start=12 * 60, end=14 * 60),
        EnergyWindow(id=LATE_AFTERNOON, label="Afternoon", start=14 * 60, end=16 * 60 + 15),
    ]


def default_category_preferences() -> dict[str, CategoryPreference]:
    """
    Built-in categories of a transcription/proofreading practice.

    Focus work leans on the morning; light work drifts to the end of the day.
    """
    preferences = [
        CategoryPreference(
            category="transcription",
            label="Transcription",
            preferred_windows=[EARLY_MORNING, LATE_MORNING, EARLY_AFTERNOON],
            avoid_windows=[LATE_AFTERNOON],
            requires_focus=True,
            rank=1,
        ),
        CategoryPreference(
            category="proofreading",
            label="Proofreading",
            preferred_windows=[LATE_AFTERNOON, EARLY_AFTERNOON],
            avoid_windows=[EARLY_MORNING],
            requires_focus=True,
            rank=2,
        ),
        CategoryPreference(
            category="translation",
            label="Translation",
            preferred_windows=[EARLY_MORNING, LATE_MORNING],
            requires_focus=True,
            rank=1,
        ),
        CategoryPreference(
            category="email",
            label="Email",
            preferred_windows=[LATE_AFTERNOON],
            avoid_windows=[EARLY_MORNING],
            rank=4,
        ),
        CategoryPreference(
            category="client_communication",
            label="Client communication",
            preferred_windows=[LATE_MORNING, EARLY_AFTERNOON],
            avoid_windows=[EARLY_MORNING],
            rank=3,
        ),
        CategoryPreference(
            category="course",
            label="Course",
            preferred_windows=[LATE_MORNING, EARLY_AFTERNOON],
            requires_focus=True,
            rank=2,
        ),
        CategoryPreference(
            category="admin",
            label="Admin",
            preferred_windows=[LATE_AFTERNOON],
            avoid_windows=[EARLY_MORNING],
            rank=5,
        ),
        CategoryPreference(
            category="other",
            label="Other",
            preferred_windows=[EARLY_AFTERNOON, LATE_AFTERNOON],
            rank=5,
        ),
    ]
    for category in HOME_CATEGORIES:
        preferences.append(
            CategoryPreference(category=category, label=category.title(), rank=5, kind=ScheduleKind.HOME)
        )
    return {preference.category: preference for preference in preferences}


def default_energy_profile() -> EnergyProfile:
    return EnergyProfile(
        windows=default_energy_windows(),
        preferences=default_category_preferences(),
        fallback_category="other",
    )


def check_time_optimality(profile: EnergyProfile, category: Optional[str], minute: int) -> TimeOptimality:
    """
    Rate a start minute for a category.

    Optimal inside a preferred window, unacceptable inside an avoided one or
    outside every window, acceptable otherwise.
    """
    preference = profile.preference_for(category)
    window = profile.window_at(minute)
    if window is None:
        return TimeOptimality(is_optimal=False, is_acceptable=False, reason="Outside working hours")

    if window.id in preference.preferred_windows:
        return TimeOptimality(
            is_optimal=True,
            is_acceptable=True,
            window_id=window.id,
            reason=f"{window.label or window.id} suits {preference.label or preference.category}",
        )
    if window.id in preference.avoid_windows:
        return TimeOptimality(
            is_optimal=False,
            is_acceptable=False,
            window_id=window.id,
            reason=f"{preference.label or preference.category} is not recommended in {window.label or window.id}",
        )
    return TimeOptimality(is_optimal=False, is_acceptable=True, window_id=window.id, reason="Acceptable time")
