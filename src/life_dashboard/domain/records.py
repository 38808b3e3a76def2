"""Canonical records produced from Notion pages."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class MealEntry:
    """A single logged food item."""

    food: str
    date: str
    meal: str
    calories: float
    protein: float
    carbs: float | None = None
    fat: float | None = None
    source: str = "Other"


@dataclass(frozen=True)
class BodyCompEntry:
    """A body composition measurement in pounds and percent."""

    date: str
    weight: float
    body_fat: float
    muscle_mass: float
    lean_mass: float | None = None
    bmi: float | None = None
    bmr: float | None = None
    notes: str | None = None


@dataclass(frozen=True)
class TrainingEntry:
    """One exercise performed on a given day."""

    exercise: str
    date: str
    weight: float
    reps: str | float
    sets: float = 0
    workout_type: str = ""
    notes: str | None = None


@dataclass(frozen=True)
class RoadmapItem:
    """A planned milestone with optional body composition targets."""

    milestone: str = "Untitled"
    phase: str = ""
    type: str = ""
    date: str = ""
    notes: str = ""
    target_weight: float = 0
    target_body_fat: float = 0
    target_muscle: float = 0


@dataclass(frozen=True)
class PhaseCount:
    name: str
    value: int


@dataclass(frozen=True)
class Milestone:
    milestone: str
    date: str
    phase: str


@dataclass(frozen=True)
class LooksEntry:
    title: str
    date: str


@dataclass(frozen=True)
class LooksGoal:
    title: str
    status: str


@dataclass(frozen=True)
class DashboardPayload:
    """Meals, body composition and training pulled in one refresh."""

    updated_at: str
    meals: list[MealEntry] = field(default_factory=list)
    body_comp: list[BodyCompEntry] = field(default_factory=list)
    training: list[TrainingEntry] = field(default_factory=list)
    error: str | None = None


@dataclass(frozen=True)
class RoadmapPayload:
    """Sorted roadmap with its phase histogram and upcoming milestones."""

    updated_at: str
    items: list[RoadmapItem] = field(default_factory=list)
    by_phase: list[PhaseCount] = field(default_factory=list)
    next_milestones: list[Milestone] = field(default_factory=list)
    error: str | None = None


@dataclass(frozen=True)
class LooksmaxxPayload:
    """Counts and latest rows across the four looksmaxx data sources."""

    updated_at: str
    daily_count: int = 0
    fitness_count: int = 0
    products_count: int = 0
    goals_count: int = 0
    latest_daily: list[LooksEntry] = field(default_factory=list)
    latest_goals: list[LooksGoal] = field(default_factory=list)
    error: str | None = None
