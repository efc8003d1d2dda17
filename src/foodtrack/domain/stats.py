"""Domain models for statistics."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DailyGoals:
    """Daily nutrient targets."""

    calories: float = 2000
    protein: float = 150
    carbs: float = 250
    fats: float = 65


@dataclass(frozen=True)
class NutrientProgress:
    """Progress of one nutrient towards its goal."""

    total: float
    goal: float
    percent_complete: float
    remaining: float


@dataclass(frozen=True)
class DailySummary:
    """Totals and goal progress across the logged meals."""

    meal_count: int
    calories: NutrientProgress
    protein: NutrientProgress
    carbs: NutrientProgress
    fats: NutrientProgress
