"""Statistics service for logged meals."""

from collections.abc import Iterable
from dataclasses import dataclass

from foodtrack.domain.meals import NutritionRecord
from foodtrack.domain.stats import DailyGoals, DailySummary, NutrientProgress
from foodtrack.services.ledger import MealLedger


@dataclass
class StatsService:
    """Service for computing goal progress over the ledger."""

    ledger: MealLedger
    goals: DailyGoals

    def get_summary(self) -> DailySummary:
        """Return totals and progress for every meal currently logged."""
        return summarize(self.ledger.all(), self.goals)


def summarize(records: Iterable[NutritionRecord], goals: DailyGoals) -> DailySummary:
    """Sum all records and measure them against the goals.

    No date filtering is applied: every record in the ledger counts.
    """
    count = 0
    calories = protein = carbs = fats = 0.0
    for record in records:
        count += 1
        calories += record.calories
        protein += record.protein
        carbs += record.carbs
        fats += record.fats
    return DailySummary(
        meal_count=count,
        calories=_progress(calories, goals.calories),
        protein=_progress(protein, goals.protein),
        carbs=_progress(carbs, goals.carbs),
        fats=_progress(fats, goals.fats),
    )


def _progress(total: float, goal: float) -> NutrientProgress:
    percent = min(100.0, 100.0 * total / goal)
    return NutrientProgress(
        total=total,
        goal=goal,
        percent_complete=max(0.0, percent),
        remaining=max(0.0, goal - total),
    )
