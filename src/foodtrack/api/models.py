"""Request and response models for the meal API."""

from pydantic import BaseModel, Field

from foodtrack.domain.meals import MealSource, NutritionRecord
from foodtrack.services.ledger import format_timestamp


class ManualEntryRequest(BaseModel):
    """Free-text meal description to analyze."""

    description: str = Field(max_length=2000)


class MealResponse(BaseModel):
    """A logged meal."""

    id: int
    name: str
    calories: float
    protein: float
    carbs: float
    fats: float
    timestamp: str
    source: MealSource

    @classmethod
    def from_record(cls, record: NutritionRecord) -> "MealResponse":
        """Build a response from a ledger record."""
        return cls(
            id=record.id,
            name=record.name,
            calories=record.calories,
            protein=record.protein,
            carbs=record.carbs,
            fats=record.fats,
            timestamp=format_timestamp(record.timestamp),
            source=record.source,
        )


class Notification(BaseModel):
    """Short-lived message for the user."""

    status: str
    message: str
    warning: str | None = None


class MealLoggedResponse(Notification):
    """Notification for a newly logged meal."""

    meal: MealResponse
