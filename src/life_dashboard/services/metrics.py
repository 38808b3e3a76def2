"""Derived metrics computed from a complete dashboard snapshot.

Every function here is pure: the same snapshot and clock always produce the
same result, and nothing is cached between calls. Dates are compared as ISO
strings, exactly as they arrive from Notion.
"""

import math
from collections.abc import Callable, Iterable
from datetime import date, datetime, time, timedelta

from life_dashboard.domain.metrics import (
    BodyCompStory,
    BulkPlan,
    BulkProgress,
    DailyRollup,
    DayCompliance,
    ExerciseProgression,
    SyncStatus,
    Targets,
    WeeklyCompliance,
)
from life_dashboard.domain.records import BodyCompEntry, MealEntry, TrainingEntry

PACE_AHEAD = "ahead"
PACE_ON_TRACK = "on track"
PACE_BEHIND = "behind"
AHEAD_MARGIN = 0.10
BEHIND_MARGIN = 0.15
MIN_PROJECTION_SAMPLES = 3

STATUS_HIT = "hit"
STATUS_CLOSE = "close"
STATUS_MISS = "miss"
CLOSE_RATIO = 0.85
WEEKEND_DIP_RATIO = 0.85
WEEK_DAYS = 7
SATURDAY = 5
CONSISTENT_PERCENT = 85
DECENT_PERCENT = 60

GREEN_FLOOR = 0.9
YELLOW_FLOOR = 0.8
RATIO_CAP = 1.1
LOW_EVENING_RATIO = 0.7
MORNING_END_HOUR = 12
AFTERNOON_END_HOUR = 17
MIN_COMPARE_SAMPLES = 2

STALE_AFTER = timedelta(hours=24)
MEAL_ORDER = {"Breakfast": 0, "Lunch": 1, "Dinner": 2, "Snack": 3, "Shake": 4}
_UNORDERED_MEAL = 9
_DAY = timedelta(days=1)
_NOON = time(12)

_GRADES = (
    (0.95, "A"),
    (0.88, "B+"),
    (0.80, "B"),
    (0.70, "C+"),
    (0.60, "C"),
    (0.50, "D"),
)
_PROTEIN_SUGGESTIONS = (
    (30, "chicken breast (31g)"),
    (20, "protein shake (25g)"),
    (0, "Greek yogurt (15g)"),
)


def parse_day(value: str) -> date | None:
    """Parse the calendar date at the start of an ISO date or datetime string."""
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def short_date_label(value: str) -> str:
    """Format a date string as ``Feb 7``, reading it at local noon."""
    day = parse_day(value)
    if day is None:
        return ""
    noon = datetime.combine(day, _NOON)
    return f"{noon:%b} {noon.day}"


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def daily_rollup(meals: Iterable[MealEntry]) -> list[DailyRollup]:
    """Sum calories and protein per date, ascending by date."""
    totals: dict[str, tuple[float, float]] = {}
    for meal in meals:
        if not meal.date:
            continue
        calories, protein = totals.get(meal.date, (0, 0))
        totals[meal.date] = (
            calories + (meal.calories or 0),
            protein + (meal.protein or 0),
        )
    return [
        DailyRollup(
            date=day,
            calories=calories,
            protein=protein,
            label=short_date_label(day),
        )
        for day, (calories, protein) in sorted(totals.items())
    ]


def hit_count(
    rollups: Iterable[DailyRollup],
    threshold: float,
    metric: Callable[[DailyRollup], float],
) -> int:
    """Count the days whose metric meets or exceeds the threshold."""
    return sum(1 for rollup in rollups if metric(rollup) >= threshold)


def hit_rate(
    rollups: list[DailyRollup],
    threshold: float,
    metric: Callable[[DailyRollup], float],
) -> float:
    if not rollups:
        return 0.0
    return hit_count(rollups, threshold, metric) / len(rollups)


def exercise_progressions(
    training: Iterable[TrainingEntry],
) -> list[ExerciseProgression]:
    """Group sessions by exercise and pick the earliest and latest entry."""
    by_exercise: dict[str, list[TrainingEntry]] = {}
    for entry in training:
        if not entry.exercise:
            continue
        by_exercise.setdefault(entry.exercise, []).append(entry)

    progressions = []
    for name, entries in by_exercise.items():
        ordered = sorted(entries, key=lambda entry: entry.date)
        progressions.append(
            ExerciseProgression(
                name=name,
                sessions=len(ordered),
                first=ordered[0],
                latest=ordered[-1],
            )
        )
    return progressions


def bulk_progress(
    body_comp: Iterable[BodyCompEntry], plan: BulkPlan, now: datetime
) -> BulkProgress:
    """Compare weight gained against time elapsed in the bulk window.

    The projected date extrapolates the average daily gain since the start of
    the plan. Without enough samples or without any gain it is the plan's end
    date.
    """
    ordered = sorted(body_comp, key=lambda entry: entry.date)
    current = ordered[-1].weight if ordered else plan.start_weight
    total_gain = plan.target_weight - plan.start_weight
    gained = current - plan.start_weight
    progress = min(max(gained / total_gain, 0), 1) if total_gain else 1.0

    start = datetime.combine(plan.start_date, time.min, tzinfo=now.tzinfo)
    end = datetime.combine(plan.end_date, time.min, tzinfo=now.tzinfo)
    days_remaining = max(0, math.ceil((end - now) / _DAY))
    total_days = math.ceil((end - start) / _DAY)
    days_passed = total_days - days_remaining
    time_elapsed = days_passed / total_days if total_days > 0 else 1.0

    pace = PACE_ON_TRACK
    if progress > time_elapsed + AHEAD_MARGIN:
        pace = PACE_AHEAD
    elif progress < time_elapsed - BEHIND_MARGIN:
        pace = PACE_BEHIND

    projected: date | None = plan.end_date
    if len(ordered) >= MIN_PROJECTION_SAMPLES and gained > 0:
        rate = gained / max(days_passed, 1)
        days_needed = (plan.target_weight - current) / rate
        projected = (now + timedelta(days=days_needed)).date()

    return BulkProgress(
        current_weight=current,
        progress=progress,
        time_elapsed=time_elapsed,
        days_passed=days_passed,
        days_remaining=days_remaining,
        total_days=total_days,
        pace=pace,
        projected_date=projected,
        samples=len(ordered),
    )


def weekly_compliance(
    rollups: list[DailyRollup], targets: Targets
) -> WeeklyCompliance | None:
    """Classify the last seven tracked days and look for a weekend protein dip."""
    last_week = rollups[-WEEK_DAYS:]
    if not last_week:
        return None

    days: list[DayCompliance] = []
    weekday_protein: list[float] = []
    weekend_protein: list[float] = []
    for rollup in last_week:
        day = parse_day(rollup.date)
        days.append(
            DayCompliance(
                date=rollup.date,
                weekday=f"{day:%a}" if day else "",
                status=_day_status(rollup, targets),
            )
        )
        if day is not None and day.weekday() >= SATURDAY:
            weekend_protein.append(rollup.protein)
        else:
            weekday_protein.append(rollup.protein)

    on_target = sum(1 for day in days if day.status == STATUS_HIT)
    compliance = round_half_up(on_target / len(last_week) * 100)
    avg_weekday = _mean(weekday_protein)
    avg_weekend = _mean(weekend_protein)
    weekend_dip = (
        bool(weekend_protein) and avg_weekend < avg_weekday * WEEKEND_DIP_RATIO
    )

    if weekend_dip:
        pattern = "Protein tends to dip on weekends. Plan ahead!"
    elif compliance >= CONSISTENT_PERCENT:
        pattern = "Consistent week!"
    elif compliance >= DECENT_PERCENT:
        pattern = "Decent consistency."
    else:
        pattern = "Inconsistent. Focus on daily tracking."

    return WeeklyCompliance(
        days=days,
        avg_calories=round_half_up(_mean([r.calories for r in last_week])),
        avg_protein=round_half_up(_mean([r.protein for r in last_week])),
        compliance=compliance,
        weekday_protein=avg_weekday,
        weekend_protein=avg_weekend,
        weekend_dip=weekend_dip,
        pattern=pattern,
    )


def _day_status(rollup: DailyRollup, targets: Targets) -> str:
    if (
        rollup.calories >= targets.calories_min
        and rollup.protein >= targets.protein_min
    ):
        return STATUS_HIT
    if (
        rollup.calories >= targets.calories_min * CLOSE_RATIO
        and rollup.protein >= targets.protein_min * CLOSE_RATIO
    ):
        return STATUS_CLOSE
    return STATUS_MISS


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0


def meals_for_day(meals: Iterable[MealEntry], day: str) -> list[MealEntry]:
    """Return one day's meals in breakfast-to-shake order."""
    return sorted(
        (meal for meal in meals if meal.date == day),
        key=lambda meal: MEAL_ORDER.get(meal.meal, _UNORDERED_MEAL),
    )


def today_totals(meals: Iterable[MealEntry], day: str) -> tuple[float, float]:
    calories = 0.0
    protein = 0.0
    for meal in meals:
        if meal.date == day:
            calories += meal.calories or 0
            protein += meal.protein or 0
    return calories, protein


def calorie_status(calories: float, targets: Targets) -> str:
    ratio = _ratio(calories, targets.calories)
    if GREEN_FLOOR <= ratio <= RATIO_CAP:
        return "green"
    if ratio >= YELLOW_FLOOR:
        return "yellow"
    return "red"


def protein_status(protein: float, targets: Targets) -> str:
    ratio = _ratio(protein, targets.protein)
    if ratio >= GREEN_FLOOR:
        return "green"
    if ratio >= YELLOW_FLOOR:
        return "yellow"
    return "red"


def day_grade(calories: float, protein: float, targets: Targets) -> str:
    """Letter grade for a day from capped calorie and protein ratios."""
    calorie_ratio = min(_ratio(calories, targets.calories), RATIO_CAP)
    protein_ratio = min(_ratio(protein, targets.protein), RATIO_CAP)
    average = (calorie_ratio + protein_ratio) / 2
    for floor, grade in _GRADES:
        if average >= floor:
            return grade
    return "F"


def _ratio(value: float, target: float) -> float:
    return value / target if target > 0 else 0.0


def coach_insights(
    calories: float, protein: float, meals_logged: int, hour: int, targets: Targets
) -> list[str]:
    """Plain-language suggestions for the rest of the day."""
    if meals_logged == 0:
        return ["Nothing logged yet today. Start tracking to stay on target!"]

    if hour < MORNING_END_HOUR:
        time_of_day = "morning"
    elif hour < AFTERNOON_END_HOUR:
        time_of_day = "afternoon"
    else:
        time_of_day = "evening"
    calories_left = max(0, targets.calories - calories)
    protein_left = max(0, targets.protein - protein)
    lines: list[str] = []
    if calories_left <= 0 and protein_left <= 0:
        lines.append("You've hit both targets today. Nice work!")
    else:
        if calories_left > 0:
            suffix = ". Time for a solid dinner" if time_of_day == "evening" else ""
            lines.append(
                f"You need {format_number(calories_left)} more calories{suffix}."
            )
        if protein_left > 0:
            suggestions = [
                food for floor, food in _PROTEIN_SUGGESTIONS if protein_left > floor
            ]
            lines.append(
                f"You need {format_number(protein_left)}g more protein. "
                f"Try: {', '.join(suggestions)}."
            )
    if time_of_day == "morning" and meals_logged <= 1:
        lines.append("Still early. Plenty of time to hit your targets today.")
    late_and_low = calories < targets.calories_min * LOW_EVENING_RATIO
    if time_of_day == "evening" and late_and_low:
        lines.append("Running low on calories late in the day. Don't skip dinner.")
    return lines


def format_number(value: float) -> str:
    """Format with thousands separators, dropping a zero fraction."""
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.1f}"


def sorted_body_comp(body_comp: Iterable[BodyCompEntry]) -> list[BodyCompEntry]:
    return sorted(body_comp, key=lambda entry: entry.date)


def body_comp_deltas(
    ordered: list[BodyCompEntry],
) -> tuple[float, float, float]:
    """Weight, body fat and muscle change between the last two samples."""
    if len(ordered) < MIN_COMPARE_SAMPLES:
        return 0, 0, 0
    latest, prior = ordered[-1], ordered[-2]
    return (
        round(latest.weight - prior.weight, 1),
        round(latest.body_fat - prior.body_fat, 1),
        round(latest.muscle_mass - prior.muscle_mass, 1),
    )


def body_comp_story(body_comp: Iterable[BodyCompEntry]) -> BodyCompStory | None:
    """Summarize the change from the first to the latest sample."""
    ordered = sorted_body_comp(body_comp)
    if len(ordered) < MIN_COMPARE_SAMPLES:
        return None
    first, latest = ordered[0], ordered[-1]
    first_day, latest_day = parse_day(first.date), parse_day(latest.date)
    span_days = (latest_day - first_day).days if first_day and latest_day else 0
    weeks = max(1, round_half_up(span_days / 7))
    weight_change = round(latest.weight - first.weight, 1)
    muscle_change = round(latest.muscle_mass - first.muscle_mass, 1)
    lean_share = None
    if muscle_change > 0 and weight_change > 0:
        lean_share = round_half_up(muscle_change / weight_change * 100)
    return BodyCompStory(
        weeks=weeks,
        weight_change=weight_change,
        body_fat_change=round(latest.body_fat - first.body_fat, 1),
        muscle_change=muscle_change,
        lean_share=lean_share,
    )


def last_meal_date(meals: Iterable[MealEntry]) -> str | None:
    dates = [meal.date for meal in meals if meal.date]
    return max(dates) if dates else None


def sync_status(
    updated_at: str | None, meal_date: str | None, now: datetime
) -> SyncStatus:
    """Flag data and meal logs older than a day."""
    synced = _parse_timestamp(updated_at, now) if updated_at else None
    stale_data = synced is not None and now - synced > STALE_AFTER
    stale_meals = False
    day = parse_day(meal_date) if meal_date else None
    if day is not None:
        end_of_day = datetime.combine(day, time(23, 59, 59), tzinfo=now.tzinfo)
        stale_meals = now - end_of_day > STALE_AFTER
    return SyncStatus(
        updated_at=synced,
        last_meal_date=meal_date,
        stale_data=stale_data,
        stale_meals=stale_meals,
    )


def _parse_timestamp(value: str, now: datetime) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None and now.tzinfo is not None:
        return parsed.replace(tzinfo=now.tzinfo)
    if parsed.tzinfo is not None and now.tzinfo is None:
        return parsed.astimezone().replace(tzinfo=None)
    return parsed


def workout_days(training: Iterable[TrainingEntry]) -> list[str]:
    """Distinct training dates, ascending."""
    return sorted({entry.date for entry in training if entry.date})


def latest_entries(
    training: Iterable[TrainingEntry], limit: int = 6
) -> list[TrainingEntry]:
    return sorted(training, key=lambda entry: entry.date, reverse=True)[:limit]
