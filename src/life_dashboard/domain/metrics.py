"""Domain models for derived dashboard metrics."""

from dataclasses import dataclass
from datetime import date, datetime

from life_dashboard.domain.records import TrainingEntry


@dataclass(frozen=True)
class Targets:
    """Daily nutrition targets and the body fat goal."""

    calories: float = 2800
    protein: float = 170
    calories_min: float = 2700
    protein_min: float = 160
    body_fat_goal: float = 20


@dataclass(frozen=True)
class BulkPlan:
    """A weight gain phase between two dates."""

    start_date: date = date(2026, 1, 7)
    end_date: date = date(2026, 3, 23)
    start_weight: float = 161
    target_weight: float = 170


@dataclass(frozen=True)
class DailyRollup:
    """Summed calories and protein for one calendar date."""

    date: str
    calories: float
    protein: float
    label: str


@dataclass(frozen=True)
class ExerciseProgression:
    """First and latest session of one exercise."""

    name: str
    sessions: int
    first: TrainingEntry
    latest: TrainingEntry

    @property
    def delta(self) -> float:
        return self.latest.weight - self.first.weight

    @property
    def progressing(self) -> bool:
        return self.delta >= 0


@dataclass(frozen=True)
class BulkProgress:
    """Progress toward the bulk target weight with a pace label."""

    current_weight: float
    progress: float
    time_elapsed: float
    days_passed: int
    days_remaining: int
    total_days: int
    pace: str
    projected_date: date | None
    samples: int


@dataclass(frozen=True)
class DayCompliance:
    date: str
    weekday: str
    status: str


@dataclass(frozen=True)
class WeeklyCompliance:
    """Last-seven-days adherence summary."""

    days: list[DayCompliance]
    avg_calories: int
    avg_protein: int
    compliance: int
    weekday_protein: float
    weekend_protein: float
    weekend_dip: bool
    pattern: str


@dataclass(frozen=True)
class BodyCompStory:
    """Change between the first and latest body composition samples."""

    weeks: int
    weight_change: float
    body_fat_change: float
    muscle_change: float
    lean_share: int | None


@dataclass(frozen=True)
class SyncStatus:
    updated_at: datetime | None
    last_meal_date: str | None
    stale_data: bool
    stale_meals: bool


@dataclass(frozen=True)
class KpiCard:
    label: str
    value: float
    sub: str
    suffix: str = ""
