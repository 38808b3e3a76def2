"""Presentation shell: fetch every backend payload and derive the tab views."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, tzinfo

from life_dashboard.adapters.dashboard_api_client import ApiResponse, DashboardApi
from life_dashboard.domain.metrics import (
    BodyCompStory,
    BulkPlan,
    BulkProgress,
    DailyRollup,
    ExerciseProgression,
    KpiCard,
    SyncStatus,
    Targets,
    WeeklyCompliance,
)
from life_dashboard.domain.records import (
    BodyCompEntry,
    DashboardPayload,
    LooksmaxxPayload,
    MealEntry,
    RoadmapPayload,
    TrainingEntry,
)
from life_dashboard.services import metrics
from life_dashboard.services.payloads import (
    parse_dashboard,
    parse_looksmaxx,
    parse_roadmap,
)

TABS = ("Nutrition", "Body Comp", "Training", "Roadmap", "Looksmaxx")

DASHBOARD_PATH = "/api/dashboard"
ROADMAP_PATH = "/api/roadmap"
LOOKSMAXX_PATH = "/api/looksmaxx"
PORTFOLIO_PATH = "/api/portfolio"

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NutritionView:
    """Everything the nutrition tab renders for one moment in time."""

    today: str
    rollups: list[DailyRollup]
    calorie_hits: int
    protein_hits: int
    calorie_hit_rate: float
    protein_hit_rate: float
    weekly: WeeklyCompliance | None
    bulk: BulkProgress
    today_meals: list[MealEntry]
    today_calories: float
    today_protein: float
    calorie_status: str
    protein_status: str
    grade: str
    insights: list[str]
    sync: SyncStatus
    trained_today: bool


@dataclass(frozen=True)
class BodyCompView:
    ordered: list[BodyCompEntry]
    deltas: tuple[float, float, float]
    story: BodyCompStory | None


@dataclass(frozen=True)
class TrainingView:
    progressions: list[ExerciseProgression]
    workout_days: list[str]
    latest: list[TrainingEntry]


@dataclass
class DashboardShell:
    """Hold the latest payload per source and rebuild views from it.

    A refresh fans out one request per endpoint. The dashboard payload is
    required; the other sources are accepted or ignored independently. A
    failed refresh keeps whatever was loaded before.
    """

    api: DashboardApi
    targets: Targets = field(default_factory=Targets)
    plan: BulkPlan = field(default_factory=BulkPlan)
    timezone: tzinfo = UTC
    dashboard: DashboardPayload | None = None
    roadmap: RoadmapPayload | None = None
    looksmaxx: LooksmaxxPayload | None = None
    portfolio: dict[str, object] | None = None
    error: str | None = None
    source_errors: dict[str, str] = field(default_factory=dict)
    loading: bool = False

    async def refresh(self) -> None:
        """Fetch all endpoints concurrently and replace accepted snapshots."""
        self.loading = True
        self.error = None
        self.source_errors = {}
        try:
            dashboard, roadmap, looksmaxx, portfolio = await asyncio.gather(
                self.api.get_json(DASHBOARD_PATH),
                self.api.get_json(ROADMAP_PATH),
                self.api.get_json(LOOKSMAXX_PATH),
                self.api.get_json(PORTFOLIO_PATH),
                return_exceptions=True,
            )
        finally:
            self.loading = False

        roadmap_body = self._accept(ROADMAP_PATH, roadmap)
        if roadmap_body is not None:
            self.roadmap = parse_roadmap(roadmap_body)
        looksmaxx_body = self._accept(LOOKSMAXX_PATH, looksmaxx)
        if looksmaxx_body is not None:
            self.looksmaxx = parse_looksmaxx(looksmaxx_body)
        portfolio_body = self._accept(PORTFOLIO_PATH, portfolio)
        if portfolio_body is not None:
            self.portfolio = portfolio_body

        if isinstance(dashboard, BaseException):
            _reraise_cancellation(dashboard)
            self.error = str(dashboard) or "Failed to load data"
            return
        if not dashboard.ok:
            message = dashboard.payload.get("error")
            if not isinstance(message, str) or not message:
                message = "Failed to fetch dashboard"
            self.error = message
            return
        self.dashboard = parse_dashboard(dashboard.payload)
        self._record_source_error(DASHBOARD_PATH, dashboard.payload)

    def _accept(
        self, path: str, result: ApiResponse | BaseException
    ) -> dict[str, object] | None:
        if isinstance(result, BaseException):
            _reraise_cancellation(result)
            _logger.warning("Ignoring %s after failure: %s", path, result)
            return None
        if not result.ok:
            _logger.warning("Ignoring %s with status %s", path, result.status_code)
            return None
        self._record_source_error(path, result.payload)
        return result.payload

    def _record_source_error(self, path: str, payload: dict[str, object]) -> None:
        message = payload.get("error")
        if isinstance(message, str) and message:
            self.source_errors[path] = message

    @property
    def meals(self) -> list[MealEntry]:
        return self.dashboard.meals if self.dashboard else []

    @property
    def body_comp(self) -> list[BodyCompEntry]:
        return self.dashboard.body_comp if self.dashboard else []

    @property
    def training(self) -> list[TrainingEntry]:
        return self.dashboard.training if self.dashboard else []

    def local_now(self, now: datetime | None = None) -> datetime:
        return (now or datetime.now(tz=UTC)).astimezone(self.timezone)

    def nutrition_view(self, now: datetime | None = None) -> NutritionView:
        local = self.local_now(now)
        today = local.date().isoformat()
        rollups = metrics.daily_rollup(self.meals)
        today_meals = metrics.meals_for_day(self.meals, today)
        calories, protein = metrics.today_totals(self.meals, today)
        updated_at = self.dashboard.updated_at if self.dashboard else None
        return NutritionView(
            today=today,
            rollups=rollups,
            calorie_hits=metrics.hit_count(
                rollups, self.targets.calories_min, _calories
            ),
            protein_hits=metrics.hit_count(rollups, self.targets.protein_min, _protein),
            calorie_hit_rate=metrics.hit_rate(
                rollups, self.targets.calories_min, _calories
            ),
            protein_hit_rate=metrics.hit_rate(
                rollups, self.targets.protein_min, _protein
            ),
            weekly=metrics.weekly_compliance(rollups, self.targets),
            bulk=metrics.bulk_progress(self.body_comp, self.plan, local),
            today_meals=today_meals,
            today_calories=calories,
            today_protein=protein,
            calorie_status=metrics.calorie_status(calories, self.targets),
            protein_status=metrics.protein_status(protein, self.targets),
            grade=metrics.day_grade(calories, protein, self.targets),
            insights=metrics.coach_insights(
                calories, protein, len(today_meals), local.hour, self.targets
            ),
            sync=metrics.sync_status(
                updated_at or None, metrics.last_meal_date(self.meals), local
            ),
            trained_today=any(entry.date == today for entry in self.training),
        )

    def body_comp_view(self) -> BodyCompView:
        ordered = metrics.sorted_body_comp(self.body_comp)
        return BodyCompView(
            ordered=ordered,
            deltas=metrics.body_comp_deltas(ordered),
            story=metrics.body_comp_story(ordered),
        )

    def training_view(self) -> TrainingView:
        return TrainingView(
            progressions=metrics.exercise_progressions(self.training),
            workout_days=metrics.workout_days(self.training),
            latest=metrics.latest_entries(self.training),
        )

    def cards(self, tab: str, now: datetime | None = None) -> list[KpiCard]:
        """Return the four KPI cards shown at the top of a tab."""
        if tab == "Body Comp":
            return self._body_comp_cards()
        if tab == "Training":
            return self._training_cards()
        if tab == "Roadmap":
            return self._roadmap_cards()
        if tab == "Looksmaxx":
            return self._looksmaxx_cards()
        if tab == "Nutrition":
            return self._nutrition_cards(now)
        raise ValueError(f"Unknown tab: {tab}")

    def _nutrition_cards(self, now: datetime | None) -> list[KpiCard]:
        view = self.nutrition_view(now)
        tracked = f"{len(view.rollups)} tracked days"
        calorie_target = f"{self.targets.calories:g}"
        protein_target = f"{self.targets.protein:g}"
        return [
            KpiCard(
                "Today's Calories", view.today_calories, f"Target {calorie_target}"
            ),
            KpiCard(
                "Today's Protein",
                view.today_protein,
                f"Target {protein_target}g",
                suffix="g",
            ),
            KpiCard("Cal Goal Hits", view.calorie_hits, tracked),
            KpiCard("Protein Hits", view.protein_hits, tracked),
        ]

    def _body_comp_cards(self) -> list[KpiCard]:
        view = self.body_comp_view()
        latest = view.ordered[-1] if view.ordered else None
        weight_delta, body_fat_delta, muscle_delta = view.deltas
        goal = self.targets.body_fat_goal
        gap = max(0, round(latest.body_fat - goal, 1)) if latest else 0
        return [
            KpiCard(
                "Weight",
                latest.weight if latest else 0,
                _vs_prior(weight_delta),
                suffix=" lbs",
            ),
            KpiCard(
                "Body Fat",
                latest.body_fat if latest else 0,
                _vs_prior(body_fat_delta),
                suffix="%",
            ),
            KpiCard(
                "Muscle",
                latest.muscle_mass if latest else 0,
                _vs_prior(muscle_delta),
                suffix=" lbs",
            ),
            KpiCard("Goal Gap", gap, f"to {goal:g}% goal", suffix="%"),
        ]

    def _training_cards(self) -> list[KpiCard]:
        view = self.training_view()
        last_workout = view.workout_days[-1] if view.workout_days else None
        last_day = metrics.parse_day(last_workout) if last_workout else None
        return [
            KpiCard("Workout Days", len(view.workout_days), "Unique training dates"),
            KpiCard("Exercises", len(view.progressions), "Tracked lifts"),
            KpiCard(
                "Last Session",
                last_day.day if last_day else 0,
                metrics.short_date_label(last_workout) if last_workout else "No data",
            ),
            KpiCard(
                "Progressing",
                sum(1 for p in view.progressions if p.progressing),
                "Exercises moving up",
            ),
        ]

    def _roadmap_cards(self) -> list[KpiCard]:
        items = self.roadmap.items if self.roadmap else []
        upcoming = self.roadmap.next_milestones if self.roadmap else []
        next_milestone = upcoming[0] if upcoming else None
        latest = items[0] if items else None
        return [
            KpiCard("Roadmap Items", len(items), "Total milestones"),
            KpiCard(
                "Next Milestone",
                1 if next_milestone else 0,
                next_milestone.milestone if next_milestone else "No upcoming",
            ),
            KpiCard(
                "Target BF",
                latest.target_body_fat if latest else 0,
                "Latest target",
                suffix="%",
            ),
            KpiCard(
                "Target Muscle",
                latest.target_muscle if latest else 0,
                "Latest target",
                suffix=" lbs",
            ),
        ]

    def _looksmaxx_cards(self) -> list[KpiCard]:
        looks = self.looksmaxx
        return [
            KpiCard("Daily Logs", looks.daily_count if looks else 0, "Looksmaxx HQ"),
            KpiCard(
                "Fitness Logs", looks.fitness_count if looks else 0, "Workout + body"
            ),
            KpiCard("Products", looks.products_count if looks else 0, "Stack tracked"),
            KpiCard("Goals", looks.goals_count if looks else 0, "Milestones"),
        ]


def _calories(rollup: DailyRollup) -> float:
    return rollup.calories


def _protein(rollup: DailyRollup) -> float:
    return rollup.protein


def _vs_prior(delta: float) -> str:
    sign = "+" if delta >= 0 else ""
    return f"{sign}{metrics.format_number(delta)} vs prior"


def _reraise_cancellation(exc: BaseException) -> None:
    if not isinstance(exc, Exception):
        raise exc
