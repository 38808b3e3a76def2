"""Map raw Notion pages into canonical records."""

from collections.abc import Mapping

from life_dashboard.domain.properties import (
    PropertyMap,
    date_of,
    first_existing,
    number_of,
    prop_rich_text,
    prop_select,
    rich_text_of,
    select_of,
    title_of,
)
from life_dashboard.domain.records import (
    BodyCompEntry,
    LooksEntry,
    LooksGoal,
    MealEntry,
    Milestone,
    PhaseCount,
    RoadmapItem,
    TrainingEntry,
)

DATE_KEYS = ("Date", "Log Date")
NEXT_MILESTONE_LIMIT = 8
UNASSIGNED_PHASE = "Unassigned"


def page_properties(page: Mapping[str, object]) -> PropertyMap:
    """Return the property map of a page, or an empty map."""
    props = page.get("properties")
    return props if isinstance(props, Mapping) else {}


def map_meal(page: Mapping[str, object]) -> MealEntry:
    p = page_properties(page)
    return MealEntry(
        food=title_of(p, ("Food", "Name", "Meal", "Title")),
        date=date_of(p, DATE_KEYS),
        meal=select_of(p, ("Meal", "Meal Type")),
        calories=number_of(p, ("Calories", "kcal")),
        protein=number_of(p, ("Protein", "Protein (g)")),
        # 0 and missing both collapse to None for the optional macros.
        carbs=number_of(p, ("Carbs", "Carbs (g)")) or None,
        fat=number_of(p, ("Fat", "Fat (g)")) or None,
        source=select_of(p, ("Source", "Type")) or "Other",
    )


def normalize_body_fat(raw: float) -> float:
    """Rescale fractional body fat readings to percent."""
    if 0 < raw <= 1:
        return round(raw * 100, 1)
    if raw > 1:
        return round(raw, 1)
    return raw


def map_body_comp(page: Mapping[str, object]) -> BodyCompEntry:
    p = page_properties(page)
    return BodyCompEntry(
        date=date_of(p, DATE_KEYS),
        weight=number_of(p, ("Weight", "Weight (lbs)")),
        body_fat=normalize_body_fat(number_of(p, ("Body Fat", "Body Fat %"))),
        muscle_mass=number_of(p, ("Muscle Mass (lbs)", "Muscle Mass", "Muscle (lbs)")),
        lean_mass=number_of(p, ("Lean Mass (lbs)", "Lean Mass", "Lean (lbs)")) or None,
        bmi=number_of(p, ("BMI",)) or None,
        bmr=number_of(p, ("BMR", "BMR (kcal)")) or None,
        notes=rich_text_of(p, ("Notes",)) or None,
    )


def map_training(page: Mapping[str, object]) -> TrainingEntry:
    p = page_properties(page)
    reps_text = rich_text_of(p, ("Actual Reps", "Target Reps", "Reps"))
    reps_number = number_of(p, ("Actual Reps", "Reps"))
    return TrainingEntry(
        exercise=select_of(p, ("Exercise",)) or title_of(p, ("Name", "Title")),
        date=date_of(p, DATE_KEYS),
        weight=number_of(p, ("Weight (lbs)", "Weight")),
        sets=number_of(p, ("Sets",)),
        reps=reps_text or reps_number or "Unknown",
        workout_type=select_of(p, ("Workout", "Workout Type", "Type")),
        notes=rich_text_of(p, ("Notes",)) or None,
    )


def map_roadmap_item(page: Mapping[str, object]) -> RoadmapItem:
    p = page_properties(page)
    return RoadmapItem(
        milestone=title_of(p, ("Milestone", "Name", "Title")) or "Untitled",
        phase=select_of(p, ("Phase",)),
        type=select_of(p, ("Type",)),
        date=date_of(p, ("Date",)),
        notes=rich_text_of(p, ("Notes",)),
        target_weight=number_of(p, ("Target Weight",)),
        target_body_fat=number_of(p, ("Target BF%", "Target BF")),
        target_muscle=number_of(p, ("Target Muscle",)),
    )


def build_roadmap(
    items: list[RoadmapItem], today: str
) -> tuple[list[RoadmapItem], list[PhaseCount], list[Milestone]]:
    """Sort items by date and derive the phase histogram and upcoming slice.

    ``today`` is an ISO date; items dated on or after it, and undated items,
    count as upcoming.
    """
    ordered = sorted(items, key=lambda item: item.date or "")

    counts: dict[str, int] = {}
    for item in ordered:
        phase = item.phase or UNASSIGNED_PHASE
        counts[phase] = counts.get(phase, 0) + 1
    by_phase = [PhaseCount(name=name, value=value) for name, value in counts.items()]

    upcoming = [item for item in ordered if not item.date or item.date >= today]
    next_milestones = [
        Milestone(milestone=item.milestone, date=item.date, phase=item.phase)
        for item in upcoming[:NEXT_MILESTONE_LIMIT]
    ]
    return ordered, by_phase, next_milestones


def map_looks_entry(page: Mapping[str, object]) -> LooksEntry:
    p = page_properties(page)
    return LooksEntry(
        title=_looks_title(p),
        date=date_of(p, ("Date", "Created", "When", "Log Date")),
    )


def map_looks_goal(page: Mapping[str, object]) -> LooksGoal:
    p = page_properties(page)
    status_prop = first_existing(p, ("Status", "State", "Progress"))
    status = prop_select(status_prop) or prop_rich_text(status_prop)
    return LooksGoal(title=_looks_title(p), status=status)


def _looks_title(p: PropertyMap) -> str:
    return title_of(p, ("Name", "Title", "Goal", "Entry", "Task")) or "Untitled"
