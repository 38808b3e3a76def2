"""JSON wire format for dashboard payloads.

Routes serialize canonical records into the camelCase shape the SPA reads,
and the presentation shell parses the same shape back.
"""

from collections.abc import Mapping
from datetime import UTC, datetime

from life_dashboard.domain.records import (
    BodyCompEntry,
    DashboardPayload,
    LooksEntry,
    LooksGoal,
    LooksmaxxPayload,
    MealEntry,
    Milestone,
    PhaseCount,
    RoadmapItem,
    RoadmapPayload,
    TrainingEntry,
)


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    moment = (now or datetime.now(tz=UTC)).astimezone(UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def serialize_dashboard(payload: DashboardPayload) -> dict[str, object]:
    data: dict[str, object] = {
        "meals": [_serialize_meal(entry) for entry in payload.meals],
        "bodyComp": [_serialize_body_comp(entry) for entry in payload.body_comp],
        "training": [_serialize_training(entry) for entry in payload.training],
        "updatedAt": payload.updated_at,
    }
    return _with_error(data, payload.error)


def serialize_roadmap(payload: RoadmapPayload) -> dict[str, object]:
    data: dict[str, object] = {
        "updatedAt": payload.updated_at,
        "items": [_serialize_roadmap_item(item) for item in payload.items],
        "byPhase": [
            {"name": phase.name, "value": phase.value} for phase in payload.by_phase
        ],
        "nextMilestones": [
            {"milestone": m.milestone, "date": m.date, "phase": m.phase}
            for m in payload.next_milestones
        ],
    }
    return _with_error(data, payload.error)


def serialize_looksmaxx(payload: LooksmaxxPayload) -> dict[str, object]:
    data: dict[str, object] = {
        "updatedAt": payload.updated_at,
        "dailyCount": payload.daily_count,
        "fitnessCount": payload.fitness_count,
        "productsCount": payload.products_count,
        "goalsCount": payload.goals_count,
        "latestDaily": [
            {"title": entry.title, "date": entry.date} for entry in payload.latest_daily
        ],
        "latestGoals": [
            {"title": goal.title, "status": goal.status}
            for goal in payload.latest_goals
        ],
    }
    return _with_error(data, payload.error)


def parse_dashboard(data: Mapping[str, object]) -> DashboardPayload:
    """Parse a ``/api/dashboard`` body, tolerating missing collections."""
    return DashboardPayload(
        updated_at=_str(data.get("updatedAt")),
        meals=[_parse_meal(row) for row in _rows(data.get("meals"))],
        body_comp=[_parse_body_comp(row) for row in _rows(data.get("bodyComp"))],
        training=[_parse_training(row) for row in _rows(data.get("training"))],
        error=_error(data),
    )


def parse_roadmap(data: Mapping[str, object]) -> RoadmapPayload:
    return RoadmapPayload(
        updated_at=_str(data.get("updatedAt")),
        items=[_parse_roadmap_item(row) for row in _rows(data.get("items"))],
        by_phase=[
            PhaseCount(name=_str(row.get("name")), value=int(_num(row.get("value"))))
            for row in _rows(data.get("byPhase"))
        ],
        next_milestones=[
            Milestone(
                milestone=_str(row.get("milestone")),
                date=_str(row.get("date")),
                phase=_str(row.get("phase")),
            )
            for row in _rows(data.get("nextMilestones"))
        ],
        error=_error(data),
    )


def parse_looksmaxx(data: Mapping[str, object]) -> LooksmaxxPayload:
    return LooksmaxxPayload(
        updated_at=_str(data.get("updatedAt")),
        daily_count=int(_num(data.get("dailyCount"))),
        fitness_count=int(_num(data.get("fitnessCount"))),
        products_count=int(_num(data.get("productsCount"))),
        goals_count=int(_num(data.get("goalsCount"))),
        latest_daily=[
            LooksEntry(title=_str(row.get("title")), date=_str(row.get("date")))
            for row in _rows(data.get("latestDaily"))
        ],
        latest_goals=[
            LooksGoal(title=_str(row.get("title")), status=_str(row.get("status")))
            for row in _rows(data.get("latestGoals"))
        ],
        error=_error(data),
    )


def _with_error(data: dict[str, object], error: str | None) -> dict[str, object]:
    if error:
        data["error"] = error
    return data


def _serialize_meal(entry: MealEntry) -> dict[str, object]:
    return {
        "food": entry.food,
        "date": entry.date,
        "meal": entry.meal,
        "calories": entry.calories,
        "protein": entry.protein,
        "carbs": entry.carbs,
        "fat": entry.fat,
        "source": entry.source,
    }


def _serialize_body_comp(entry: BodyCompEntry) -> dict[str, object]:
    return {
        "date": entry.date,
        "weight": entry.weight,
        "bodyFat": entry.body_fat,
        "muscleMass": entry.muscle_mass,
        "leanMass": entry.lean_mass,
        "bmi": entry.bmi,
        "bmr": entry.bmr,
        "notes": entry.notes,
    }


def _serialize_training(entry: TrainingEntry) -> dict[str, object]:
    return {
        "exercise": entry.exercise,
        "date": entry.date,
        "weight": entry.weight,
        "sets": entry.sets,
        "reps": entry.reps,
        "workoutType": entry.workout_type,
        "notes": entry.notes,
    }


def _serialize_roadmap_item(item: RoadmapItem) -> dict[str, object]:
    return {
        "milestone": item.milestone,
        "phase": item.phase,
        "type": item.type,
        "date": item.date,
        "notes": item.notes,
        "targetWeight": item.target_weight,
        "targetBodyFat": item.target_body_fat,
        "targetMuscle": item.target_muscle,
    }


def _parse_meal(row: Mapping[str, object]) -> MealEntry:
    return MealEntry(
        food=_str(row.get("food")),
        date=_str(row.get("date")),
        meal=_str(row.get("meal")),
        calories=_num(row.get("calories")),
        protein=_num(row.get("protein")),
        carbs=_optional_num(row.get("carbs")),
        fat=_optional_num(row.get("fat")),
        source=_str(row.get("source")) or "Other",
    )


def _parse_body_comp(row: Mapping[str, object]) -> BodyCompEntry:
    notes = row.get("notes")
    return BodyCompEntry(
        date=_str(row.get("date")),
        weight=_num(row.get("weight")),
        body_fat=_num(row.get("bodyFat")),
        muscle_mass=_num(row.get("muscleMass")),
        lean_mass=_optional_num(row.get("leanMass")),
        bmi=_optional_num(row.get("bmi")),
        bmr=_optional_num(row.get("bmr")),
        notes=notes if isinstance(notes, str) else None,
    )


def _parse_training(row: Mapping[str, object]) -> TrainingEntry:
    reps = row.get("reps")
    notes = row.get("notes")
    return TrainingEntry(
        exercise=_str(row.get("exercise")),
        date=_str(row.get("date")),
        weight=_num(row.get("weight")),
        sets=_num(row.get("sets")),
        reps=reps if isinstance(reps, str | int | float) else "Unknown",
        workout_type=_str(row.get("workoutType")),
        notes=notes if isinstance(notes, str) else None,
    )


def _parse_roadmap_item(row: Mapping[str, object]) -> RoadmapItem:
    return RoadmapItem(
        milestone=_str(row.get("milestone")) or "Untitled",
        phase=_str(row.get("phase")),
        type=_str(row.get("type")),
        date=_str(row.get("date")),
        notes=_str(row.get("notes")),
        target_weight=_num(row.get("targetWeight")),
        target_body_fat=_num(row.get("targetBodyFat")),
        target_muscle=_num(row.get("targetMuscle")),
    )


def _rows(value: object) -> list[Mapping[str, object]]:
    if not isinstance(value, list):
        return []
    return [row for row in value if isinstance(row, Mapping)]


def _str(value: object) -> str:
    return value if isinstance(value, str) else ""


def _num(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return 0
    return value


def _optional_num(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return value


def _error(data: Mapping[str, object]) -> str | None:
    error = data.get("error")
    return error if isinstance(error, str) and error else None
